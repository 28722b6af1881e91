# -*- coding: utf-8 -*-
"""
charon.entropy
==============

Shannon entropy helpers used to score candidate splits.

All functions work on plain class-count vectors or on arrays of observation
indexes ("filters") into a label vector, so the tree builder never has to copy
rows around.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np


def count_classes(labels, n_classes: int | None = None) -> np.ndarray:
    """Count occurrences of each integer class code in ``labels``.

    Parameters
    ----------
    labels : array-like of int
        Class codes, ``0 <= code < n_classes``.
    n_classes : int or None, default=None
        Length of the returned vector.  When ``None`` only the classes that
        actually occur are counted (zero entries are dropped).

    Returns
    -------
    ndarray of int
    """
    labels = np.asarray(labels, dtype=np.intp)
    if n_classes is None:
        counts = np.bincount(labels) if labels.size else np.zeros(0, dtype=np.intp)
        return counts[counts > 0]
    return np.bincount(labels, minlength=n_classes)


def h(counts: Sequence[int] | np.ndarray) -> float:
    """Entropy (in bits) of the distribution obtained by normalising ``counts``.

    ``0 log 0`` is taken to be 0, so zero counts never contribute.  An empty or
    all-zero vector has entropy 0.
    """
    c = np.asarray(counts, dtype=float)
    tot = c.sum()
    if tot <= 0:
        return 0.0
    p = c / tot
    p = p[p > 0]
    return float(-np.sum(p * np.log2(p)))


def conditional_entropy(partitions: Iterable[np.ndarray], labels) -> float:
    """Weighted average entropy of the label distribution in each partition.

    Parameters
    ----------
    partitions : iterable of ndarray of int
        Each partition is an array of observation indexes into ``labels``.
    labels : array-like of int
        Class code per observation.

    Returns
    -------
    float
        ``sum(|p| / total * h(labels[p]))`` where ``total`` is the size of all
        partitions together; 0 when every partition is empty.
    """
    labels = np.asarray(labels)
    parts = [np.asarray(p, dtype=np.intp) for p in partitions]
    total = float(sum(p.size for p in parts))
    if total <= 0:
        return 0.0
    return float(sum(p.size / total * h(count_classes(labels[p])) for p in parts if p.size))


def most_likely(labels) -> int:
    """Majority class among ``labels``; ties resolve to the smallest code."""
    labels = np.asarray(labels, dtype=np.intp)
    if labels.size == 0:
        raise ValueError("cannot take a majority vote over zero observations")
    return int(np.argmax(np.bincount(labels)))
