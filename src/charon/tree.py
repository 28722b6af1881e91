# -*- coding: utf-8 -*-
"""
charon.tree
===========

Tree nodes and the decision procedure.

A tree is built from three immutable node types:

``Leaf``
    holds the predicted class code.
``CategoricalBranch``
    splits on a categorical feature; ``children[code]`` handles observations
    whose value is ``code``.  Codes outside ``children`` (never seen during
    training) resolve to ``default``, the majority class at the branch.
``NumericBranch``
    splits on a numeric feature at the sorted ``splits``; there is one child
    per bucket, ``len(children) == len(splits) + 1``.

The module also provides small read-only helpers over a tree: its depth,
leaf count, an indented text rendering and the list of root-to-leaf rules.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from .continuous import bucket_of
from .features import category_code, is_missing, numeric_value


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Leaf:
    prediction: int


@dataclass(frozen=True)
class CategoricalBranch:
    feature: int
    default: int
    children: tuple[Node, ...]


@dataclass(frozen=True)
class NumericBranch:
    feature: int
    default: int
    splits: tuple[float, ...]
    children: tuple[Node, ...]


Node = Union[Leaf, CategoricalBranch, NumericBranch]


# -----------------------------------------------------------------------------
# Decision
# -----------------------------------------------------------------------------
def decide(tree: Node, observation: Sequence) -> int:
    """Predict the class code of one encoded observation.

    Parameters
    ----------
    tree : Node
        Root of a trained tree.
    observation : sequence
        One encoded value per feature: integral category codes for
        categorical features, floats for numeric ones, ``None`` or ``NaN``
        when missing.

    Returns
    -------
    int
        Predicted class code.

    Notes
    -----
    A missing or unseen category falls back to the branch's ``default``.  A
    missing numeric value is routed to bucket 0.  A value equal to a threshold
    belongs to the bucket below it.
    """
    if isinstance(tree, Leaf):
        return tree.prediction
    if isinstance(tree, CategoricalBranch):
        code = category_code(observation[tree.feature], tree.feature)
        if code is None or not 0 <= code < len(tree.children):
            return tree.default
        return decide(tree.children[code], observation)
    if isinstance(tree, NumericBranch):
        value = observation[tree.feature]
        if is_missing(value):
            return decide(tree.children[0], observation)
        return decide(tree.children[bucket_of(numeric_value(value, tree.feature), tree.splits)], observation)
    raise TypeError(f"not a tree node: {type(tree).__name__}")


# -----------------------------------------------------------------------------
# Inspection
# -----------------------------------------------------------------------------
def depth(tree: Node) -> int:
    if isinstance(tree, Leaf):
        return 0
    return 1 + max(depth(ch) for ch in tree.children)


def n_leaves(tree: Node) -> int:
    if isinstance(tree, Leaf):
        return 1
    return sum(n_leaves(ch) for ch in tree.children)


def _name(feature: int, feature_names) -> str:
    if feature_names is not None and 0 <= feature < len(feature_names):
        return str(feature_names[feature])
    return f"X[{feature}]"


def _class(code: int, class_names) -> str:
    return str(class_names[code]) if class_names is not None else str(code)


def _category(feature: int, code: int, category_names) -> str:
    if category_names is not None and category_names[feature] is not None:
        return str(category_names[feature][code])
    return str(code)


def _conditions(node: Node, feature_names, category_names) -> list[str]:
    """One condition string per child of a branch, in child order."""
    name = _name(node.feature, feature_names)
    if isinstance(node, CategoricalBranch):
        return [f"{name} == {_category(node.feature, c, category_names)}" for c in range(len(node.children))]
    s = node.splits
    conds = [f"{name} <= {s[0]:.4f}"]
    conds += [f"{s[b - 1]:.4f} < {name} <= {s[b]:.4f}" for b in range(1, len(s))]
    conds.append(f"{name} > {s[-1]:.4f}")
    return conds


def render(tree: Node, feature_names=None, class_names=None, category_names=None) -> str:
    """Indented text view of ``tree``.

    Parameters
    ----------
    tree : Node
    feature_names : sequence of str, optional
        Names used instead of ``X[i]``.
    class_names : sequence of str, optional
        Names indexed by class code.
    category_names : sequence, optional
        Per feature, the category labels indexed by code (``None`` for
        numeric features).
    """
    lines: list[str] = []

    def walk(node: Node, indent: str) -> None:
        if isinstance(node, Leaf):
            lines.append(f"{indent}Predict {_class(node.prediction, class_names)}")
            return
        for cond, child in zip(_conditions(node, feature_names, category_names), node.children):
            lines.append(f"{indent}if {cond}:")
            walk(child, indent + "  ")
        lines.append(f"{indent}otherwise: Predict {_class(node.default, class_names)}")

    walk(tree, "")
    return "\n".join(lines)


def rules(tree: Node, feature_names=None, class_names=None, category_names=None) -> list[str]:
    """Every root-to-leaf path as ``"cond AND cond => class"``."""
    out: list[str] = []

    def collect(node: Node, parts: list[str]) -> None:
        if isinstance(node, Leaf):
            body = " AND ".join(parts) if parts else "<root>"
            out.append(f"{body} => {_class(node.prediction, class_names)}")
            return
        for cond, child in zip(_conditions(node, feature_names, category_names), node.children):
            collect(child, parts + [cond])

    collect(tree, [])
    return out


def trace(tree: Node, observation: Sequence, feature_names=None, category_names=None) -> str:
    """Conditions followed by ``observation`` from the root to its leaf."""
    parts: list[str] = []
    node = tree
    while not isinstance(node, Leaf):
        value = observation[node.feature]
        conds = _conditions(node, feature_names, category_names)
        if isinstance(node, CategoricalBranch):
            code = category_code(value, node.feature)
            if code is None or not 0 <= code < len(node.children):
                parts.append(f"{_name(node.feature, feature_names)} UNSEEN")
                break
            b = code
        else:
            b = 0 if is_missing(value) else bucket_of(numeric_value(value, node.feature), node.splits)
        parts.append(conds[b])
        node = node.children[b]
    return " AND ".join(parts) if parts else "<root>"
