# -*- coding: utf-8 -*-
"""
cartpy.tree
===========

CART-style binary decision trees built on the incremental impurity
calculators.

:class:`DepthFirstTreeBuilder` owns a single :class:`ImpurityCalculator` for
the whole fit.  For every node it rebinds the calculator to the node's sample
interval, and for every feature it sorts the node's samples, resets the
calculator and sweeps the split position over the points where the feature
value changes.  The split with the largest impurity improvement wins; on ties
the first candidate found is kept.

:class:`DecisionTreeClassifier` and :class:`DecisionTreeRegressor` wrap the
builder behind a scikit-learn style API (``fit``/``predict``/``predict_proba``
and a text dump via ``print_tree``).  Pruning, ensembles, persistence and
feature importances are not provided.
"""

from __future__ import annotations

import numpy as np
from loguru import logger
from sklearn.base import BaseEstimator, ClassifierMixin, RegressorMixin

from .checks import verify_indices, verify_observations_and_targets
from .classification import (
    EntropyClassificationImpurityCalculator,
    GiniClassificationImpurityCalculator,
)
from .exceptions import ArgumentValidationError
from .impurity import ImpurityCalculator
from .interval import Interval1D
from .regression import RegressionImpurityCalculator


# -----------------------------------------------------------------------------
# Node
# -----------------------------------------------------------------------------
class TreeNode:
    """A single node of a fitted tree.

    Attributes
    ----------
    is_leaf : bool
        True if this node is terminal.
    value : float
        Leaf value of the node's samples: the weighted mean target for
        regression, the encoded majority class for classification.  Stored on
        internal nodes as well.
    probabilities : dict[float, float]
        Weighted class frequencies (empty for regression).
    impurity : float
        Impurity of the node's samples.
    n_samples : int
        Number of samples that reached the node during fitting.
    weighted_n_samples : float
        Their total sample weight.
    feature_index : int or None
        Split feature; ``None`` for leaves.
    threshold : float or None
        Samples with ``x[feature_index] <= threshold`` go left.
    improvement : float or None
        Impurity improvement of the chosen split.
    children : dict
        ``{"left": TreeNode, "right": TreeNode}`` for internal nodes.
    """

    def __init__(self, *, value: float, probabilities: dict, impurity: float,
                 n_samples: int, weighted_n_samples: float):
        self.is_leaf: bool = True
        self.value = value
        self.probabilities = probabilities
        self.impurity = impurity
        self.n_samples = n_samples
        self.weighted_n_samples = weighted_n_samples
        self.feature_index: int | None = None
        self.threshold: float | None = None
        self.improvement: float | None = None
        self.children: dict = {}

    @property
    def n_leaves(self) -> int:
        if self.is_leaf:
            return 1
        return sum(ch.n_leaves for ch in self.children.values())

    @property
    def depth(self) -> int:
        if self.is_leaf:
            return 0
        return 1 + max(ch.depth for ch in self.children.values())


# -----------------------------------------------------------------------------
# Builder
# -----------------------------------------------------------------------------
class DepthFirstTreeBuilder:
    """Grow a tree depth first, scoring splits with one reused calculator.

    Parameters
    ----------
    calculator : ImpurityCalculator
        Calculator instance used for every node and feature of the run.
    max_depth : int or None, default=None
        Maximum depth; ``None`` means unbounded.
    min_samples_split : int, default=2
        Minimum number of samples in a node to attempt a split.
    min_samples_leaf : int, default=1
        Minimum number of samples on each side of a split.
    min_impurity_improvement : float, default=0.0
        A split is only made if its improvement is strictly larger.
    """

    def __init__(self, calculator: ImpurityCalculator, *, max_depth: int | None = None,
                 min_samples_split: int = 2, min_samples_leaf: int = 1,
                 min_impurity_improvement: float = 0.0):
        self.calculator = calculator
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.min_impurity_improvement = min_impurity_improvement

    def build(self, X: np.ndarray, y: np.ndarray, sample_weight: np.ndarray,
              unique_targets: np.ndarray, indices: np.ndarray | None = None) -> TreeNode:
        """Grow a tree over the rows of ``X`` selected by ``indices``.

        ``y`` must already be numeric (class codes for classification) and
        every value in it must be contained in ``unique_targets``.
        """
        self._X = X
        self._y = np.asarray(y, dtype=float)
        self._w = np.asarray(sample_weight, dtype=float)
        self._order = (np.arange(X.shape[0]) if indices is None
                       else np.array(indices, dtype=np.intp))
        n = self._order.shape[0]

        # work arrays are bound by reference; their content follows self._order
        self._work_targets = self._y[self._order]
        self._work_weights = self._w[self._order]
        root_interval = Interval1D(0, n)
        self.calculator.init(unique_targets, self._work_targets, self._work_weights, root_interval)
        return self._build_node(root_interval, depth=0)

    def _build_node(self, interval: Interval1D, depth: int) -> TreeNode:
        calc = self.calculator
        self._fill_work_arrays(interval)
        calc.update_interval(interval)

        node = TreeNode(value=calc.leaf_value(), probabilities=calc.leaf_probabilities(),
                        impurity=calc.node_impurity(), n_samples=interval.length,
                        weighted_n_samples=calc.weighted_total)

        depth_limit = self.max_depth is not None and depth >= self.max_depth
        too_small = interval.length < self.min_samples_split or interval.length < 2 * self.min_samples_leaf
        if depth_limit or too_small or node.impurity <= 0.0:
            logger.debug("Leaf", depth=depth, n_samples=interval.length, value=node.value)
            return node

        split = self._find_best_split(interval, node.impurity)
        if split is None:
            logger.debug("Leaf, no admissible split", depth=depth, n_samples=interval.length)
            return node
        feature, position, threshold, improvement = split
        logger.debug("Split", depth=depth, feature=feature, threshold=threshold,
                     improvement=improvement, n_left=position - interval.start,
                     n_right=interval.end - position)

        # partition the interval at the chosen position
        self._sort_interval(interval, feature)
        node.is_leaf = False
        node.feature_index = feature
        node.threshold = threshold
        node.improvement = improvement
        node.children["left"] = self._build_node(Interval1D(interval.start, position), depth + 1)
        node.children["right"] = self._build_node(Interval1D(position, interval.end), depth + 1)
        return node

    def _find_best_split(self, interval: Interval1D, parent_impurity: float):
        calc = self.calculator
        start, end = interval.start, interval.end
        best = None
        best_improvement = -np.inf

        for feature in range(self._X.shape[1]):
            values = self._sort_interval(interval, feature)
            self._fill_work_arrays(interval)
            calc.reset()

            # candidate positions: where the sorted feature value changes
            positions = np.nonzero(values[:-1] != values[1:])[0] + 1 + start
            admissible = ((positions - start >= self.min_samples_leaf)
                          & (end - positions >= self.min_samples_leaf))
            for position in positions[admissible]:
                calc.update_index(int(position))
                improvement = calc.impurity_improvement(parent_impurity)
                if improvement > best_improvement:
                    i = int(position) - start
                    best_improvement = improvement
                    best = (feature, int(position), _midpoint(values[i - 1], values[i]), float(improvement))

        if best is None or best_improvement <= self.min_impurity_improvement:
            return None
        return best

    def _sort_interval(self, interval: Interval1D, feature: int) -> np.ndarray:
        s = slice(interval.start, interval.end)
        idx = self._order[s]
        values = self._X[idx, feature]
        perm = np.argsort(values, kind="mergesort")
        self._order[s] = idx[perm]
        return values[perm]

    def _fill_work_arrays(self, interval: Interval1D) -> None:
        s = slice(interval.start, interval.end)
        idx = self._order[s]
        self._work_targets[s] = self._y[idx]
        self._work_weights[s] = self._w[idx]


def _midpoint(lower: float, upper: float) -> float:
    thr = 0.5 * (float(lower) + float(upper))
    # adjacent floats can round the midpoint up to the upper value
    if thr >= upper:
        thr = float(lower)
    return thr


# -----------------------------------------------------------------------------
# Estimators
# -----------------------------------------------------------------------------
class _BaseDecisionTree(BaseEstimator):

    def _make_calculator(self) -> ImpurityCalculator:
        raise NotImplementedError

    def _encode_targets(self, y):
        """Return ``(numeric targets, unique targets)`` for the builder."""
        raise NotImplementedError

    def _check_params(self):
        if self.max_depth is not None and int(self.max_depth) < 0:
            raise ValueError(f"max_depth must be non-negative or None, got {self.max_depth}")
        if int(self.min_samples_split) < 2:
            raise ValueError(f"min_samples_split must be at least 2, got {self.min_samples_split}")
        if int(self.min_samples_leaf) < 1:
            raise ValueError(f"min_samples_leaf must be at least 1, got {self.min_samples_leaf}")

    def fit(self, X, y, sample_weight=None, indices=None):
        """Fit the tree.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Numeric input samples.
        y : array-like of shape (n_samples,)
            Targets.
        sample_weight : array-like of shape (n_samples,), optional
            Non-negative sample weights; uniform when omitted.
        indices : array-like of int, optional
            Rows to train on (repetitions allowed); all rows when omitted.

        Returns
        -------
        self

        Raises
        ------
        ArgumentValidationError
            If the inputs are empty or their shapes do not match.
        """
        self._check_params()
        X = np.asarray(X, dtype=float)
        y = np.asarray(y)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        verify_observations_and_targets(X, y)
        if indices is not None:
            verify_indices(indices, X.shape[0], y.shape[0])

        if sample_weight is None:
            w = np.ones(len(y), dtype=float)
        else:
            w = np.asarray(sample_weight, dtype=float)
            if len(w) != len(y):
                raise ArgumentValidationError(
                    f"Sample weight length: {len(w)} and target length: {len(y)} does not match"
                )

        y_num, unique_targets = self._encode_targets(y)
        self.n_features_in_ = X.shape[1]

        builder = DepthFirstTreeBuilder(
            self._make_calculator(),
            max_depth=None if self.max_depth is None else int(self.max_depth),
            min_samples_split=int(self.min_samples_split),
            min_samples_leaf=int(self.min_samples_leaf),
            min_impurity_improvement=float(self.min_impurity_improvement),
        )
        self.tree_ = builder.build(X, y_num, w, unique_targets, indices=indices)
        logger.info("Fitted {}", type(self).__name__, n_samples=self.tree_.n_samples,
                    n_leaves=self.tree_.n_leaves, depth=self.tree_.depth)
        return self

    def _check_fitted(self, X):
        if getattr(self, "tree_", None) is None:
            raise ValueError("Estimator not fitted. Call fit(...) first.")
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.shape[1] != self.n_features_in_:
            raise ValueError(f"X has {X.shape[1]} features, but the tree was fitted with {self.n_features_in_}")
        return X

    def apply(self, X) -> list[TreeNode]:
        """Return the leaf reached by each sample."""
        X = self._check_fitted(X)
        return [self._leaf_for(x) for x in X]

    def _leaf_for(self, x) -> TreeNode:
        node = self.tree_
        while not node.is_leaf:
            node = node.children["left"] if x[node.feature_index] <= node.threshold else node.children["right"]
        return node

    def print_tree(self, feature_names=None):
        """
        Pretty-print the fitted tree to ``stdout``.

        Parameters
        ----------
        feature_names : list[str], optional
            Names for the input features; ``X[i]`` is used otherwise.

        Raises
        ------
        ValueError
            If the estimator has not been fitted.
        """
        if getattr(self, "tree_", None) is None:
            raise ValueError("Estimator not fitted. Call fit(...) first.")
        self._print_node(self.tree_, "", feature_names)

    def _leaf_label(self, node: TreeNode) -> str:
        return f"{node.value:.4f}"

    def _print_node(self, node: TreeNode, indent="", fn=None):
        if node.is_leaf:
            print(f"{indent}Predict {self._leaf_label(node)} (N={node.weighted_n_samples:.2f})")
            return
        name = (fn[node.feature_index] if (fn is not None and 0 <= node.feature_index < len(fn))
                else f"X[{node.feature_index}]")
        print(f"{indent}if {name} <= {node.threshold:.6g}:")
        self._print_node(node.children["left"], indent + "  ", fn)
        print(f"{indent}else:")
        self._print_node(node.children["right"], indent + "  ", fn)


class DecisionTreeClassifier(ClassifierMixin, _BaseDecisionTree):
    """
    Binary decision tree classifier.

    Parameters
    ----------
    criterion : {"gini", "entropy"}, default="gini"
        Impurity measure used to score splits.
    max_depth : int or None, default=None
        Maximum depth of the tree.  ``None`` grows until the leaves are pure
        or too small to split.
    min_samples_split : int, default=2
        Minimum number of samples required to attempt a split.
    min_samples_leaf : int, default=1
        Minimum number of samples on each side of a split.
    min_impurity_improvement : float, default=0.0
        Splits must improve the impurity by strictly more than this.

    Attributes
    ----------
    tree_ : TreeNode
        Root of the fitted tree.
    classes_ : ndarray of shape (n_classes,)
        Sorted class labels seen in ``fit``.

    Notes
    -----
    When two classes carry the same weight in a leaf the one that sorts first
    in ``classes_`` is predicted.
    """

    _criteria = {
        "gini": GiniClassificationImpurityCalculator,
        "entropy": EntropyClassificationImpurityCalculator,
    }

    def __init__(self, *, criterion: str = "gini", max_depth: int | None = None,
                 min_samples_split: int = 2, min_samples_leaf: int = 1,
                 min_impurity_improvement: float = 0.0):
        self.criterion = criterion
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.min_impurity_improvement = min_impurity_improvement

    def _make_calculator(self):
        try:
            return self._criteria[self.criterion]()
        except KeyError:
            raise ValueError(
                f"Unknown criterion {self.criterion!r}; expected one of {sorted(self._criteria)}"
            ) from None

    def _encode_targets(self, y):
        self.classes_, y_enc = np.unique(y, return_inverse=True)
        return y_enc.astype(float), np.arange(len(self.classes_), dtype=float)

    def predict(self, X):
        """Predict class labels for ``X``."""
        X = self._check_fitted(X)
        codes = np.array([int(self._leaf_for(x).value) for x in X], dtype=int)
        return self.classes_[codes]

    def predict_proba(self, X):
        """
        Predict class probabilities for ``X``.

        Returns
        -------
        ndarray of shape (n_samples, n_classes)
            Weighted class frequencies of the reached leaf, columns ordered
            like ``classes_``.
        """
        X = self._check_fitted(X)
        out = np.zeros((X.shape[0], len(self.classes_)), dtype=float)
        for i, x in enumerate(X):
            probabilities = self._leaf_for(x).probabilities
            for code, p in probabilities.items():
                out[i, int(code)] = p
        return out

    def _leaf_label(self, node):
        return str(self.classes_[int(node.value)])


class DecisionTreeRegressor(RegressorMixin, _BaseDecisionTree):
    """
    Binary decision tree regressor scored by weighted variance reduction.

    Parameters
    ----------
    max_depth : int or None, default=None
        Maximum depth of the tree.
    min_samples_split : int, default=2
        Minimum number of samples required to attempt a split.
    min_samples_leaf : int, default=1
        Minimum number of samples on each side of a split.
    min_impurity_improvement : float, default=0.0
        Splits must reduce the variance by strictly more than this.

    Attributes
    ----------
    tree_ : TreeNode
        Root of the fitted tree.  Leaves predict the weighted mean target.
    """

    def __init__(self, *, max_depth: int | None = None, min_samples_split: int = 2,
                 min_samples_leaf: int = 1, min_impurity_improvement: float = 0.0):
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.min_impurity_improvement = min_impurity_improvement

    def _make_calculator(self):
        return RegressionImpurityCalculator()

    def _encode_targets(self, y):
        return np.asarray(y, dtype=float), np.empty(0)

    def predict(self, X):
        """Predict regression targets for ``X``."""
        X = self._check_fitted(X)
        return np.array([self._leaf_for(x).value for x in X], dtype=float)
