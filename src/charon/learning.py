# -*- coding: utf-8 -*-
"""
charon.learning
===============

Tree induction.

:func:`train` grows a tree top-down.  At each node :func:`select_feature`
scores every feature that has not yet been used on the current path by its
information gain (parent entropy minus the conditional entropy of its best
split) and the winner partitions the node's filter into child filters.  A
node becomes a leaf when no feature is left, when its filter holds at most
``Settings.min_leaf`` observations, or when no feature has positive gain.
Features are used at most once per path, so the depth of the tree never
exceeds the number of features.

Rows with a missing value for the winning feature reach no child.

``train`` requires a non-empty filter and raises ``ValueError`` otherwise: a
majority vote over zero observations is undefined.  The builder itself never
recurses into an empty filter, so only the caller can trigger this.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from .continuous import DEFAULT_MAX_SPLITS, analyze, subindex
from .entropy import conditional_entropy, count_classes, h, most_likely
from .features import Categorical, Dataset, Feature, Numeric, apply_filter, filtered_by
from .tree import CategoricalBranch, Leaf, Node, NumericBranch

# Gains at or below this are floating-point noise, not information.
_MIN_GAIN = 1e-12


class Settings(BaseModel):
    """Induction settings.

    Attributes
    ----------
    min_leaf : int, default=5
        A node whose filter holds ``min_leaf`` observations or fewer becomes
        a leaf.
    holdout : float, default=0.2
        Fraction of observations kept out of training for validation.  Only
        used by the caller that samples the training filter.
    max_splits : int, default=8
        Maximum number of thresholds proposed for a numeric feature.
    """

    model_config = ConfigDict(frozen=True)

    min_leaf: int = Field(default=5, ge=0)
    holdout: float = Field(default=0.2, ge=0.0, lt=1.0)
    max_splits: int = Field(default=DEFAULT_MAX_SPLITS, ge=1)


class SplitCandidate(NamedTuple):
    index: int
    feature: Feature
    splits: list[float]
    gain: float


def best_split(feature: Feature, filter, outcomes: np.ndarray, n_classes: int,
               max_splits: int = DEFAULT_MAX_SPLITS) -> tuple[float, list[float]]:
    """Conditional entropy of the best split of a filtered feature, and its thresholds.

    Rows of ``filter`` with a missing categorical value form one extra
    partition, as they do for numeric features, so every feature is scored
    over the same observations.
    """
    if isinstance(feature, Categorical):
        valued = np.concatenate(feature.groups) if feature.groups else np.zeros(0, dtype=np.intp)
        missing = np.setdiff1d(np.asarray(filter, dtype=np.intp), valued)
        return conditional_entropy(feature.groups + (missing,), outcomes), []
    if isinstance(feature, Numeric):
        return analyze(n_classes, feature, max_splits=max_splits)
    raise TypeError(f"unknown feature encoding: {type(feature).__name__}")


def select_feature(dataset: Dataset, filter, remaining,
                   max_splits: int = DEFAULT_MAX_SPLITS) -> SplitCandidate | None:
    """Pick the remaining feature with the largest information gain.

    Parameters
    ----------
    dataset : Dataset
    filter : array-like of int
        Observations reaching the node.
    remaining : iterable of int
        Indexes of features still usable on this path.  They are scanned in
        ascending order and the first maximal gain wins.
    max_splits : int, default=8
        Passed to the numeric threshold search.

    Returns
    -------
    SplitCandidate or None
        ``None`` when no feature has positive gain.
    """
    labels = apply_filter(filter, dataset.outcomes)
    initial_entropy = h(count_classes(labels, dataset.n_classes))

    best: SplitCandidate | None = None
    for i in sorted(remaining):
        restricted = filtered_by(filter, dataset.features[i])
        cond, splits = best_split(restricted, filter, dataset.outcomes, dataset.n_classes, max_splits)
        gain = initial_entropy - cond
        logger.trace("feature {} gain={:.6f} splits={}", i, gain, splits)
        if gain <= _MIN_GAIN:
            continue
        if best is None or gain > best.gain:
            best = SplitCandidate(i, restricted, splits, gain)
    return best


def train(dataset: Dataset, filter, remaining, settings: Settings) -> Node:
    """Recursively build a tree over the observations in ``filter``.

    Parameters
    ----------
    dataset : Dataset
        Encoded training set; never modified.
    filter : array-like of int
        Observation indexes used for this (sub)tree.  Must be non-empty.
    remaining : iterable of int
        Feature indexes available for splitting.
    settings : Settings

    Returns
    -------
    Node
    """
    filter = np.asarray(filter, dtype=np.intp)
    remaining = frozenset(remaining)
    if filter.size == 0:
        raise ValueError("cannot train on an empty filter")

    majority = most_likely(apply_filter(filter, dataset.outcomes))

    if not remaining or filter.size <= settings.min_leaf:
        logger.trace("leaf {} over {} observations", majority, filter.size)
        return Leaf(majority)

    best = select_feature(dataset, filter, remaining, settings.max_splits)
    if best is None:
        logger.trace("leaf {} over {} observations: no informative feature", majority, filter.size)
        return Leaf(majority)

    logger.debug("split on feature {} (gain={:.4f}) over {} observations", best.index, best.gain, filter.size)
    remaining = remaining - {best.index}

    def child(filt: np.ndarray) -> Node:
        if filt.size == 0:
            return Leaf(majority)
        return train(dataset, filt, remaining, settings)

    if isinstance(best.feature, Categorical):
        return CategoricalBranch(
            feature=best.index,
            default=majority,
            children=tuple(child(g) for g in best.feature.groups),
        )

    full = dataset.features[best.index]
    if not isinstance(full, Numeric):
        raise TypeError(f"feature {best.index} changed encoding during training")
    filters = subindex(full, filter, best.splits)
    return NumericBranch(
        feature=best.index,
        default=majority,
        splits=tuple(best.splits),
        children=tuple(child(filters[b]) for b in range(len(best.splits) + 1)),
    )
