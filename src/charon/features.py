# -*- coding: utf-8 -*-
"""
charon.features
===============

Encoded features and the index-array "filters" used to partition them.

A feature is one of two encodings:

``Categorical``
    an inverted index: ``groups[code]`` holds the observation indexes whose
    value equals ``code``.  Observations with a missing value appear in no
    group.
``Numeric``
    one ``(value, label)`` pair per observation, stored as two parallel
    arrays; ``NaN`` marks a missing value.

``Feature`` is the union of the two; every consumer dispatches explicitly on
the case.  Nothing in this module copies rows: restricting a feature to a
subset of observations only ever builds new index or gather arrays.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Union

import numpy as np

from .exceptions import InvalidEncodingError


# -----------------------------------------------------------------------------
# Encodings
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Categorical:
    """Inverted index of a categorical feature, one index array per code."""

    groups: tuple[np.ndarray, ...]

    @property
    def n_categories(self) -> int:
        return len(self.groups)


@dataclass(frozen=True)
class Numeric:
    """Numeric feature values (``NaN`` = missing) paired with class labels.

    Position ``i`` describes observation ``i`` of the training set, or, after
    :func:`filtered_by`, the ``i``-th entry of the filter.
    """

    values: np.ndarray
    labels: np.ndarray

    def __len__(self) -> int:
        return int(self.values.shape[0])


Feature = Union[Categorical, Numeric]


@dataclass(frozen=True)
class Dataset:
    """Fully encoded training set.

    Attributes
    ----------
    n_classes : int
        Number of distinct classes; labels are coded ``0 .. n_classes - 1``.
    outcomes : ndarray of int
        Class code per observation.
    features : tuple of Feature
        One encoding per feature, in column order.
    """

    n_classes: int
    outcomes: np.ndarray
    features: tuple[Feature, ...]

    @property
    def n_observations(self) -> int:
        return int(self.outcomes.shape[0])

    @property
    def n_features(self) -> int:
        return len(self.features)


# -----------------------------------------------------------------------------
# Filtering
# -----------------------------------------------------------------------------
def apply_filter(filter, data) -> np.ndarray:
    """Gather ``data`` at each observation index of ``filter``, in order."""
    return np.asarray(data)[np.asarray(filter, dtype=np.intp)]


def filtered_by(filter, feature: Feature) -> Feature:
    """Restrict ``feature`` to the observations listed in ``filter``.

    Categorical groups keep only the indexes that are members of ``filter``
    and stay absolute observation indexes.  Numeric features are gathered in
    filter order, so their positions become filter-relative.
    """
    filter = np.asarray(filter, dtype=np.intp)
    if isinstance(feature, Categorical):
        return Categorical(tuple(g[np.isin(g, filter)] for g in feature.groups))
    if isinstance(feature, Numeric):
        return Numeric(feature.values[filter], feature.labels[filter])
    raise TypeError(f"unknown feature encoding: {type(feature).__name__}")


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------
def is_missing(v) -> bool:
    """True for ``None`` and float ``NaN``."""
    return (v is None) or (isinstance(v, (float, np.floating)) and np.isnan(v))


def category_code(value, feature: int | None = None) -> int | None:
    """Interpret ``value`` as a category code; ``None`` when missing.

    Raises
    ------
    InvalidEncodingError
        If the value is not integral.
    """
    if is_missing(value):
        return None
    if isinstance(value, (bool, np.bool_)):
        raise InvalidEncodingError("Not an int: boolean category code", feature=feature, value=value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    raise InvalidEncodingError(f"Not an int: {value!r}", feature=feature, value=value)


def numeric_value(value, feature: int | None = None) -> float:
    """Interpret ``value`` as a float; ``NaN`` when missing.

    Raises
    ------
    InvalidEncodingError
        If the value cannot be read as a real number.
    """
    if is_missing(value):
        return float("nan")
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        raise InvalidEncodingError(f"Not a float: {value!r}", feature=feature, value=value)
    return float(value)


def discrete(column, feature: int | None = None) -> Categorical:
    """Build the inverted index of a column of category codes.

    Negative codes and missing values are left out of every group.  The
    number of groups is ``max(code) + 1``; codes that never occur get an
    empty group so that ``groups[code]`` always lines up with the code.
    """
    codes = [category_code(v, feature) for v in column]
    codes = np.array([-1 if c is None else c for c in codes], dtype=np.intp)
    n_categories = int(codes.max()) + 1 if codes.size else 0
    return Categorical(tuple(np.flatnonzero(codes == c) for c in range(max(n_categories, 0))))


def continuous(column, outcomes, feature: int | None = None) -> Numeric:
    """Pair each numeric value of ``column`` with its observation's class code."""
    values = np.fromiter((numeric_value(v, feature) for v in column), dtype=float)
    labels = np.asarray(outcomes, dtype=np.intp)
    if values.shape[0] != labels.shape[0]:
        raise ValueError(f"column has {values.shape[0]} values but there are {labels.shape[0]} outcomes")
    return Numeric(values, labels)
