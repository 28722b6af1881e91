# -*- coding: utf-8 -*-
"""
charon.featurization
====================

Turns raw tabular data into the encoded :class:`~charon.features.Dataset`
consumed by :func:`charon.learning.train`.

- Rows whose label is missing (``None`` or ``NaN``) are dropped.
- Labels are mapped to class codes with scikit-learn's ``LabelEncoder``;
  continuous targets are rejected.
- Categorical columns map each distinct raw value to a code, in order of
  first appearance.  Values not seen while fitting encode as ``-1``, which
  the decision procedure treats as an unseen category.
- Numeric columns are read as floats, ``NaN`` marking a missing value.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from loguru import logger
from sklearn.preprocessing import LabelEncoder
from sklearn.utils.multiclass import type_of_target

from .exceptions import RegressionNotSupportedError
from .features import Dataset, continuous, discrete, is_missing, numeric_value

UNKNOWN_CATEGORY = -1


class Featurizer:
    """Encodes raw rows column by column.

    Parameters
    ----------
    n_features : int
        Number of columns.
    categorical : iterable of int
        Indexes of the categorical columns; the others are numeric.

    Attributes
    ----------
    categories_ : list of (list or None)
        For each categorical column the raw values in code order; ``None``
        for numeric columns.  Set by :meth:`fit`.
    """

    def __init__(self, n_features: int, categorical=()):
        self.n_features = int(n_features)
        self.categorical = frozenset(int(j) for j in categorical)
        bad = [j for j in self.categorical if not 0 <= j < self.n_features]
        if bad:
            raise ValueError(f"categorical feature indexes out of range: {sorted(bad)}")
        self.categories_: list[list | None] = [None] * self.n_features
        self._codes: list[dict | None] = [None] * self.n_features

    def is_categorical(self, j: int) -> bool:
        return j in self.categorical

    def fit(self, X: np.ndarray) -> Featurizer:
        for j in sorted(self.categorical):
            seen = dict.fromkeys(v for v in X[:, j] if not is_missing(v))
            self.categories_[j] = list(seen)
            self._codes[j] = {v: code for code, v in enumerate(seen)}
        return self

    def encode_column(self, j: int, column) -> list:
        """Codes for a categorical column, floats for a numeric one."""
        codes = self._codes[j]
        if codes is None:
            return [numeric_value(v, j) for v in column]
        return [None if is_missing(v) else codes.get(v, UNKNOWN_CATEGORY) for v in column]

    def transform(self, X: np.ndarray) -> list[list]:
        """Encoded observations, one list of per-feature values per row."""
        if X.ndim != 2 or X.shape[1] != self.n_features:
            raise ValueError(f"X must have shape (n_samples, {self.n_features}), got {X.shape}")
        columns = [self.encode_column(j, X[:, j]) for j in range(self.n_features)]
        return [list(row) for row in zip(*columns)]


@dataclass(frozen=True)
class Prepared:
    """Result of :func:`prepare`."""

    dataset: Dataset
    featurizer: Featurizer
    label_encoder: LabelEncoder
    observations: list[list]
    labeled: np.ndarray


def encode_labels(y) -> tuple[np.ndarray, LabelEncoder, np.ndarray]:
    """Class codes for the labeled rows of ``y``.

    Returns
    -------
    (ndarray of int, LabelEncoder, ndarray of bool)
        Codes of the labeled rows, the fitted encoder and the mask of labeled
        rows.

    Raises
    ------
    RegressionNotSupportedError
        If the labels are continuous.
    """
    y = np.asarray(y, dtype=object)
    if y.ndim != 1:
        raise ValueError(f"y must be one-dimensional, got shape {y.shape}")
    labeled = np.array([not is_missing(v) for v in y], dtype=bool)
    kept = np.array(list(y[labeled]))
    if kept.size == 0:
        raise ValueError("no labeled observations")
    target_type = type_of_target(kept)
    if target_type.startswith("continuous"):
        raise RegressionNotSupportedError(target_type)
    if target_type not in ("binary", "multiclass"):
        raise ValueError(f"unsupported target type {target_type!r}")
    le = LabelEncoder()
    return le.fit_transform(kept).astype(np.intp), le, labeled


def prepare(X, y, categorical=()) -> Prepared:
    """Encode raw ``X``/``y`` into a :class:`Dataset`.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        Raw values; missing values may be ``None`` or ``NaN``.
    y : array-like of shape (n_samples,)
        Class labels; rows with a missing label are dropped.
    categorical : iterable of int
        Indexes of categorical columns.

    Returns
    -------
    Prepared
    """
    X = np.asarray(X, dtype=object)
    if X.ndim != 2:
        raise ValueError(f"X must be two-dimensional, got shape {X.shape}")
    outcomes, le, labeled = encode_labels(y)
    if X.shape[0] != labeled.shape[0]:
        raise ValueError(f"X has {X.shape[0]} rows but y has {labeled.shape[0]} labels")
    dropped = int((~labeled).sum())
    if dropped:
        logger.info("dropped {} observations without a label", dropped)
    X = X[labeled]

    featurizer = Featurizer(X.shape[1], categorical).fit(X)
    features = []
    for j in range(X.shape[1]):
        column = featurizer.encode_column(j, X[:, j])
        if featurizer.is_categorical(j):
            features.append(discrete(column, j))
        else:
            features.append(continuous(column, outcomes, j))

    dataset = Dataset(n_classes=len(le.classes_), outcomes=outcomes, features=tuple(features))
    logger.debug(
        "prepared {} observations, {} features, {} classes",
        dataset.n_observations, dataset.n_features, dataset.n_classes,
    )
    return Prepared(
        dataset=dataset,
        featurizer=featurizer,
        label_encoder=le,
        observations=featurizer.transform(X),
        labeled=labeled,
    )
