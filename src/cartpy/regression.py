"""Regression impurity calculator (weighted variance)."""

from __future__ import annotations

from .impurity import ChildImpurities, ImpurityCalculator


def _variance(sw: float, sy: float, sy2: float) -> float:
    # Var = sum w*y^2 / W - (sum w*y / W)^2
    if sw <= 0.0:
        return 0.0
    mean = sy / sw
    return max(sy2 / sw - mean * mean, 0.0)


class RegressionImpurityCalculator(ImpurityCalculator):
    """Impurity calculator for continuous targets.

    Keeps the weighted sum and weighted sum of squares of the interval and of
    the left side; the right side is their difference, so :meth:`reset` is
    O(1).  Impurity is the weighted variance of the targets and the leaf value
    their weighted mean (``0.0`` for an interval without weight).
    """

    def __init__(self):
        super().__init__()
        self._sum_total = 0.0
        self._sum_sq_total = 0.0
        self._sum_left = 0.0
        self._sum_sq_left = 0.0

    def _compute_totals(self, unique, targets, weights):
        wy = weights * targets
        return float(wy.sum()), float((wy * targets).sum())

    def _commit_totals(self, totals):
        self._sum_total, self._sum_sq_total = totals

    def _reset_accumulators(self):
        self._sum_left = 0.0
        self._sum_sq_left = 0.0

    def _move_to_left(self, targets, weights):
        wy = weights * targets
        self._sum_left += float(wy.sum())
        self._sum_sq_left += float((wy * targets).sum())

    def _move_all_to_left(self):
        self._sum_left = self._sum_total
        self._sum_sq_left = self._sum_sq_total

    def _node_impurity(self):
        return _variance(self._weighted_total, self._sum_total, self._sum_sq_total)

    def _child_impurities(self):
        weighted_left = self._weighted_left
        weighted_right = self._weighted_total - weighted_left
        left = _variance(weighted_left, self._sum_left, self._sum_sq_left)
        if weighted_right <= 0.0:
            right = 0.0
        else:
            right = _variance(weighted_right,
                              self._sum_total - self._sum_left,
                              self._sum_sq_total - self._sum_sq_left)
        return ChildImpurities(left=left, right=right)

    def _leaf_value(self):
        if self._weighted_total <= 0.0:
            return 0.0
        return self._sum_total / self._weighted_total

    def _leaf_probabilities(self):
        return {}
