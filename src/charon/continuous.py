# -*- coding: utf-8 -*-
"""
charon.continuous
=================

Threshold search for numeric features.

The analyzer sorts the valued observations, scans every boundary between
distinct consecutive values with cumulative class counts and keeps the cut of
minimum conditional entropy.  The first cut is always proposed; each side is
then refined by its own best cut for as long as the Fayyad–Irani MDL test
accepts it, up to ``max_splits`` thresholds.  Thresholds are midpoints
between the two values they separate, or the lower of the two when the
midpoint rounds onto the upper one.

Bucket ``b`` of a split holds the values ``v`` with
``splits[b-1] < v <= splits[b]``.
"""

from __future__ import annotations

from collections import deque

import numpy as np

from .entropy import conditional_entropy, count_classes, h
from .features import Numeric

DEFAULT_MAX_SPLITS = 8


def bucket_of(value: float, splits) -> int:
    """Number of thresholds strictly below ``value``."""
    return int(np.searchsorted(np.asarray(splits, dtype=float), value, side="left"))


def _best_cut(values: np.ndarray, labels: np.ndarray, n_classes: int):
    """Best binary cut of sorted ``values``.

    Returns ``(i, entropy)`` where the cut falls between positions ``i`` and
    ``i + 1``, or ``None`` if all values are equal.
    """
    bd = np.nonzero(values[:-1] != values[1:])[0]
    if bd.size == 0:
        return None
    n = labels.shape[0]
    M = np.zeros((n, n_classes), dtype=float)
    M[np.arange(n), labels] = 1.0
    SW = M.cumsum(axis=0)
    total = SW[-1]
    best = None
    for i in bd:
        left = SW[i]
        right = total - left
        n_left = i + 1
        e = (n_left * h(left) + (n - n_left) * h(right)) / n
        if best is None or e < best[1]:
            best = (int(i), e)
    return best


def _mdl_accepts(labels: np.ndarray, i: int, cut_entropy: float) -> bool:
    n = labels.shape[0]
    if n < 2:
        return False
    counts = count_classes(labels)
    left = count_classes(labels[: i + 1])
    right = count_classes(labels[i + 1:])
    ent = h(counts)
    gain = ent - cut_entropy
    k, k1, k2 = counts.size, left.size, right.size
    delta = np.log2(3.0 ** k - 2) - (k * ent - k1 * h(left) - k2 * h(right))
    return gain > (np.log2(n - 1) + delta) / n


def _thresholds(values: np.ndarray, labels: np.ndarray, n_classes: int, max_splits: int) -> list[float]:
    splits: list[float] = []
    pending = deque([(0, values.shape[0], True)])
    while pending and len(splits) < max_splits:
        lo, hi, forced = pending.popleft()
        v, y = values[lo:hi], labels[lo:hi]
        cut = _best_cut(v, y, n_classes)
        if cut is None:
            continue
        i, e = cut
        if not forced and not _mdl_accepts(y, i, e):
            continue
        t = 0.5 * (v[i] + v[i + 1])
        # adjacent floats: the midpoint can round up onto the upper value
        splits.append(v[i] if t >= v[i + 1] else t)
        pending.append((lo, lo + i + 1, False))
        pending.append((lo + i + 1, hi, False))
    return sorted(splits)


def analyze(n_classes: int, feature: Numeric, max_splits: int = DEFAULT_MAX_SPLITS) -> tuple[float, list[float]]:
    """Find the best set of thresholds for a (filtered) numeric feature.

    Parameters
    ----------
    n_classes : int
        Number of classes in the dataset.
    feature : Numeric
        Feature restricted to the observations in play.
    max_splits : int, default=8
        Upper bound on the number of thresholds returned.

    Returns
    -------
    (float, list of float)
        Conditional entropy of the labels given the bucket, computed over every
        observation of ``feature`` (rows with a missing value form one extra
        partition), and the sorted thresholds.  With fewer than two distinct
        values no split is possible: the entropy of the labels is returned
        together with an empty list.
    """
    known = ~np.isnan(feature.values)
    order = np.argsort(feature.values[known], kind="mergesort")
    values = feature.values[known][order]
    labels = feature.labels[known][order]

    splits = _thresholds(values, labels, n_classes, max_splits)
    if not splits:
        return h(count_classes(feature.labels, n_classes)), []

    buckets = np.searchsorted(np.asarray(splits), feature.values[known], side="left")
    positions = np.flatnonzero(known)
    partitions = [positions[buckets == b] for b in range(len(splits) + 1)]
    partitions.append(np.flatnonzero(~known))
    return conditional_entropy(partitions, feature.labels), splits


def subindex(feature: Numeric, filter, splits) -> dict[int, np.ndarray]:
    """Split ``filter`` into one child filter per bucket of ``splits``.

    ``feature`` is the unfiltered encoding, indexed by observation.  Every
    bucket ``0 .. len(splits)`` is present in the result, possibly empty, and
    each child keeps the relative order of ``filter``.  Observations with a
    missing value go to no bucket.
    """
    filter = np.asarray(filter, dtype=np.intp)
    values = feature.values[filter]
    known = ~np.isnan(values)
    idx = filter[known]
    buckets = np.searchsorted(np.asarray(splits, dtype=float), values[known], side="left")
    return {b: idx[buckets == b] for b in range(len(splits) + 1)}
