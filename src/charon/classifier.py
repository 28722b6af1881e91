# -*- coding: utf-8 -*-
"""
charon.classifier
=================

scikit-learn style estimator around the induction engine.

:class:`TreeClassifier` encodes raw data (see :mod:`charon.featurization`),
holds out a random fraction of the observations for validation, grows a tree
on the rest with :func:`charon.learning.train` and predicts with
:func:`charon.tree.decide`.  Training and holdout accuracy are recorded on
the fitted estimator.
"""

from __future__ import annotations

import numpy as np
from loguru import logger
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils import check_random_state
from sklearn.utils.validation import check_is_fitted

from . import tree as _tree
from .featurization import prepare
from .learning import Settings, train


class TreeClassifier(ClassifierMixin, BaseEstimator):
    """
    Decision tree classifier grown by maximum information gain.

    Categorical features split into one branch per category; numeric
    features split into buckets at one or more thresholds.  Each feature is
    used at most once along any root-to-leaf path.

    Parameters
    ----------
    min_leaf : int, default=5
        Nodes reached by ``min_leaf`` training observations or fewer become
        leaves.
    holdout : float, default=0.2
        Fraction of observations, drawn at random, kept out of training and
        used to estimate ``holdout_quality_``.  Must lie in ``[0, 1)``.
    max_splits : int, default=8
        Maximum number of thresholds for a numeric split.
    categorical_features : list[int | str] or None, default=None
        Indices or names of categorical columns.  Names require
        ``feature_names``.  All other columns are numeric.
    feature_names : list[str] or None, default=None
        Column names used for rendering and rule export.
    random_state : int, RandomState instance or None, default=None
        Seed for the holdout draw.

    Attributes
    ----------
    tree_ : Node
        Root of the fitted tree.
    classes_ : ndarray
        Class labels, indexed by class code.
    n_features_in_ : int
    settings_ : Settings
    training_indices_, holdout_indices_ : ndarray of int
        Positions (among labeled rows) used for training and validation.
    training_quality_, holdout_quality_ : float or None
        Accuracy on each sample; ``None`` when the sample is empty.
    """

    def __init__(
        self,
        *,
        min_leaf: int = 5,
        holdout: float = 0.2,
        max_splits: int = 8,
        categorical_features: list[int | str] | None = None,
        feature_names: list[str] | None = None,
        random_state=None,
    ):
        self.min_leaf = min_leaf
        self.holdout = holdout
        self.max_splits = max_splits
        self.categorical_features = categorical_features
        self.feature_names = feature_names
        self.random_state = random_state

    def _categorical_indexes(self, n_features: int) -> list[int]:
        cf = self.categorical_features
        if not cf:
            return []
        if isinstance(cf[0], str):
            if self.feature_names is None:
                raise ValueError("feature_names must be provided when using categorical_features by name")
            name_to_idx = {n: i for i, n in enumerate(self.feature_names)}
            missing = [n for n in cf if n not in name_to_idx]
            if missing:
                raise ValueError(f"unknown categorical feature names: {missing}")
            return [name_to_idx[n] for n in cf]
        return [int(i) for i in cf]

    def fit(self, X, y):
        """Grow the tree on a random training sample of ``X``/``y``.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Raw feature values.  Missing values may be ``None`` or ``NaN``.
        y : array-like of shape (n_samples,)
            Class labels.  Rows without a label are ignored.

        Returns
        -------
        self

        Raises
        ------
        RegressionNotSupportedError
            If ``y`` is continuous.
        InvalidEncodingError
            If a numeric column holds non-numeric values.
        pydantic.ValidationError
            If ``min_leaf``, ``holdout`` or ``max_splits`` is out of range.
        """
        settings = Settings(min_leaf=self.min_leaf, holdout=self.holdout, max_splits=self.max_splits)
        X = np.asarray(X, dtype=object)
        if X.ndim != 2:
            raise ValueError(f"X must be two-dimensional, got shape {X.shape}")
        n_features = X.shape[1]
        if self.feature_names is not None and len(self.feature_names) != n_features:
            raise ValueError("feature_names length must match X.shape[1]")

        prepared = prepare(X, y, self._categorical_indexes(n_features))
        dataset = prepared.dataset

        rng = check_random_state(self.random_state)
        draws = rng.random_sample(dataset.n_observations)
        self.training_indices_ = np.flatnonzero(draws >= settings.holdout)
        self.holdout_indices_ = np.flatnonzero(draws < settings.holdout)
        if self.training_indices_.size == 0:
            raise ValueError("holdout left no observations to train on")

        self.settings_ = settings
        self.featurizer_ = prepared.featurizer
        self.label_encoder_ = prepared.label_encoder
        self.classes_ = prepared.label_encoder.classes_
        self.n_features_in_ = n_features
        self.tree_ = train(dataset, self.training_indices_, range(n_features), settings)

        hits = np.array(
            [_tree.decide(self.tree_, obs) == outcome
             for obs, outcome in zip(prepared.observations, dataset.outcomes)],
            dtype=float,
        )
        self.training_quality_ = float(hits[self.training_indices_].mean()) if self.training_indices_.size else None
        self.holdout_quality_ = float(hits[self.holdout_indices_].mean()) if self.holdout_indices_.size else None
        logger.info(
            "fitted tree: depth={} leaves={} training_quality={} holdout_quality={}",
            _tree.depth(self.tree_), _tree.n_leaves(self.tree_),
            self.training_quality_, self.holdout_quality_,
        )
        return self

    def _encode(self, X) -> list[list]:
        check_is_fitted(self, "tree_")
        X = np.asarray(X, dtype=object)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        return self.featurizer_.transform(X)

    def predict(self, X):
        """
        Predict class labels for the provided samples.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Input samples.  Missing values may be ``None`` or ``numpy.nan``;
            categories not seen during ``fit`` use the majority class of the
            branch that tests them.

        Returns
        -------
        ndarray of shape (n_samples,)

        Raises
        ------
        sklearn.exceptions.NotFittedError
            If the estimator has not been fitted.
        """
        codes = [_tree.decide(self.tree_, obs) for obs in self._encode(X)]
        return self.classes_[np.asarray(codes, dtype=np.intp)]

    def predict_rule(self, X, feature_names=None):
        """Conditions followed by each sample from the root to its leaf."""
        fn = feature_names if feature_names is not None else self.feature_names
        return [_tree.trace(self.tree_, obs, fn, self.featurizer_.categories_) for obs in self._encode(X)]

    def _names(self, feature_names, class_names):
        fn = feature_names if feature_names is not None else self.feature_names
        cn = class_names if class_names is not None else [str(c) for c in self.classes_]
        return fn, cn

    def export_rules(self, *, feature_names=None, class_names=None) -> list[str]:
        """
        All root-to-leaf rules as ``"<conditions> => <class>"`` strings.

        Parameters
        ----------
        feature_names : list[str], optional
            Defaults to the names given at construction time.
        class_names : list[str], optional
            Names ordered like ``classes_``.  Defaults to ``classes_``.
        """
        check_is_fitted(self, "tree_")
        fn, cn = self._names(feature_names, class_names)
        return _tree.rules(self.tree_, fn, cn, self.featurizer_.categories_)

    def print_tree(self, feature_names=None, class_names=None):
        """Pretty-print the decision tree to ``stdout``."""
        check_is_fitted(self, "tree_")
        fn, cn = self._names(feature_names, class_names)
        print(_tree.render(self.tree_, fn, cn, self.featurizer_.categories_))

    def export_graphviz(self, filename: str | None = None, *, feature_names=None,
                        class_names=None, format: str = "png") -> str:
        """
        Export the tree structure in Graphviz format.

        Parameters
        ----------
        filename : str or None, default=None
            Basename of the output file.  If None, the DOT source is returned
            and nothing is written.
        feature_names, class_names : list[str], optional
            Display names, as in :meth:`export_rules`.
        format : str, default="png"
            Graphviz output format.  ``'dot'`` writes the DOT source directly
            and does not need the ``dot`` executable; other formats fall back
            to a ``.dot`` file when rendering fails.

        Returns
        -------
        str
            Path to the written file, or the DOT source if filename is None.

        Raises
        ------
        RuntimeError
            If the ``graphviz`` package is not installed.
        """
        check_is_fitted(self, "tree_")
        try:
            import graphviz
        except ImportError as exc:
            raise RuntimeError("Graphviz is required for export_graphviz but not installed.") from exc
        fn, cn = self._names(feature_names, class_names)
        dot = graphviz.Digraph(format=format)
        self._add_graph_nodes(dot, self.tree_, "0", fn, cn)

        if filename is None:
            return dot.source
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        try:
            dot.render(filename, cleanup=True)
            return f"{filename}.{format}"
        except graphviz.ExecutableNotFound:
            logger.warning("Graphviz executable not found, writing DOT source instead")
            fallback_path = f"{filename}.dot"
            dot.save(fallback_path)
            return fallback_path

    def _add_graph_nodes(self, dot, node, name: str, fn, cn):
        if isinstance(node, _tree.Leaf):
            dot.node(name, f"class={cn[node.prediction]}", shape="box", style="filled", color="lightgrey")
            return
        label = _tree._name(node.feature, fn)
        dot.node(name, f"{label}\ndefault={cn[node.default]}", shape="ellipse", style="filled", color="lightblue")
        conds = _tree._conditions(node, fn, self.featurizer_.categories_)
        for b, (cond, child) in enumerate(zip(conds, node.children)):
            child_id = f"{name}_{b}"
            self._add_graph_nodes(dot, child, child_id, fn, cn)
            dot.edge(name, child_id, label=cond)
