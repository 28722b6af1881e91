import os

import numpy as np
import pytest
from pydantic import ValidationError
from sklearn.datasets import load_iris
from sklearn.exceptions import NotFittedError
from charon import RegressionNotSupportedError, TreeClassifier
from charon.tree import n_leaves


def _tiny_dataset():
    """Return a small classification dataset with a numeric and categorical feature."""
    X = np.array([[1, 'A'], [2, 'A'], [3, 'B'], [4, 'B']], dtype=object)
    y = np.array([0, 0, 1, 1])
    return X, y


def _tiny_classifier(**kwargs):
    params = dict(min_leaf=0, holdout=0.0, feature_names=['num', 'cat'], categorical_features=[1])
    params.update(kwargs)
    return TreeClassifier(**params)


def test_classifier_fits_tiny_dataset():
    X, y = _tiny_dataset()
    clf = _tiny_classifier().fit(X, y)
    assert clf.predict(X).tolist() == y.tolist()
    assert clf.training_quality_ == 1.0
    assert clf.holdout_quality_ is None
    assert clf.score(X, y) == 1.0
    assert clf.n_features_in_ == 2


def test_classifier_rule_export():
    X, y = _tiny_dataset()
    clf = _tiny_classifier().fit(X, y)
    rules = clf.predict_rule(X)
    assert len(rules) == len(X)
    tree_rules = clf.export_rules(class_names=['no', 'yes'])
    assert len(tree_rules) == n_leaves(clf.tree_)
    assert all('=>' in r for r in tree_rules)


def test_classifier_print_tree(capsys):
    X, y = _tiny_dataset()
    _tiny_classifier().fit(X, y).print_tree(class_names=['no', 'yes'])
    out = capsys.readouterr().out
    assert "Predict no" in out and "Predict yes" in out


def test_classifier_graphviz_export():
    pytest.importorskip("graphviz")
    X, y = _tiny_dataset()
    clf = _tiny_classifier().fit(X, y)
    assert "digraph" in clf.export_graphviz()
    out_path = clf.export_graphviz('test_tree', class_names=['no', 'yes'], format='dot')
    assert out_path.endswith('.dot')
    assert os.path.exists(out_path)
    os.remove(out_path)


def test_classifier_not_fitted_raises():
    clf = TreeClassifier()
    with pytest.raises(NotFittedError):
        clf.predict([[1, 'A']])
    with pytest.raises(NotFittedError):
        clf.export_rules()


def test_classifier_unseen_category_uses_default():
    X = np.array([['A'], ['A'], ['B'], ['B'], ['B']], dtype=object)
    y = np.array(['no', 'no', 'yes', 'yes', 'yes'])
    clf = TreeClassifier(min_leaf=0, holdout=0.0, categorical_features=[0]).fit(X, y)
    assert clf.predict([['A'], ['B']]).tolist() == ['no', 'yes']
    # majority at the root
    assert clf.predict([['C'], [None]]).tolist() == ['yes', 'yes']


def test_classifier_categorical_by_name_needs_feature_names():
    X, y = _tiny_dataset()
    with pytest.raises(ValueError):
        TreeClassifier(categorical_features=['cat']).fit(X, y)
    clf = _tiny_classifier(categorical_features=['cat']).fit(X, y)
    assert clf.featurizer_.is_categorical(1)


def test_classifier_rejects_regression():
    X, _ = _tiny_dataset()
    with pytest.raises(RegressionNotSupportedError):
        _tiny_classifier().fit(X, [1.5, 2.5, 3.1, 0.2])


def test_classifier_rejects_bad_settings():
    X, y = _tiny_dataset()
    with pytest.raises(ValidationError):
        _tiny_classifier(holdout=1.0).fit(X, y)
    with pytest.raises(ValidationError):
        _tiny_classifier(max_splits=0).fit(X, y)


def test_classifier_drops_unlabeled_rows():
    X, _ = _tiny_dataset()
    clf = _tiny_classifier().fit(X, np.array([0, 0, 1, None], dtype=object))
    assert clf.training_indices_.tolist() == [0, 1, 2]


def test_classifier_holdout_is_reproducible():
    rng = np.random.RandomState(1)
    X = rng.uniform(size=(40, 2))
    y = (X[:, 0] > 0.5).astype(int)
    a = TreeClassifier(holdout=0.5, random_state=0).fit(X, y)
    b = TreeClassifier(holdout=0.5, random_state=0).fit(X, y)
    assert a.training_indices_.tolist() == b.training_indices_.tolist()
    assert a.tree_ == b.tree_
    both = np.concatenate([a.training_indices_, a.holdout_indices_])
    assert sorted(both.tolist()) == list(range(40))
    assert isinstance(a.holdout_quality_, float)


def test_classifier_with_missing_values():
    X = np.array([[1, 'A'], [2, None], [3, 'B'], [None, 'A']], dtype=object)
    y = np.array([0, 0, 1, 1])
    clf = _tiny_classifier().fit(X, y)
    preds = clf.predict(X)
    assert len(preds) == len(y)


def test_classifier_iris():
    data = load_iris()
    clf = TreeClassifier(min_leaf=2, holdout=0.0, feature_names=list(data.feature_names))
    clf.fit(data.data, data.target)
    assert clf.training_quality_ > 0.9
    assert clf.score(data.data, data.target) == pytest.approx(clf.training_quality_)


def test_classifier_get_params():
    params = TreeClassifier(min_leaf=3).get_params()
    assert params['min_leaf'] == 3
    assert params['holdout'] == 0.2
