"""Classification impurity calculators (Gini and entropy)."""

from __future__ import annotations

from abc import abstractmethod

import numpy as np

from .exceptions import ArgumentValidationError
from .impurity import ChildImpurities, ImpurityCalculator


class ClassificationImpurityCalculator(ImpurityCalculator):
    """Impurity calculator backed by per-class weighted counts.

    The unique targets are stored sorted; each sample is mapped to its class
    slot with :func:`numpy.searchsorted` and accumulated with
    :func:`numpy.bincount`.  Subclasses only define :meth:`_impurity` over a
    count vector.

    ``leaf_value`` returns the label with the largest weighted count; ties go
    to the smallest label.
    """

    def __init__(self):
        super().__init__()
        self._weighted_target_count: np.ndarray | None = None
        self._weighted_target_count_left: np.ndarray | None = None
        self._weighted_target_count_right: np.ndarray | None = None

    @property
    def unique_targets(self) -> np.ndarray:
        self._check_initialized("unique_targets")
        return self._unique_targets

    @abstractmethod
    def _impurity(self, counts: np.ndarray) -> float:
        """Impurity of a weighted class-count vector; ``0.0`` when it is empty."""

    def _prepare_unique_targets(self, unique_targets):
        unique = np.unique(np.asarray(unique_targets, dtype=float))
        if unique.size == 0:
            raise ArgumentValidationError("Unique targets does not contain any values")
        return unique

    @staticmethod
    def _class_counts(unique: np.ndarray, targets: np.ndarray, weights: np.ndarray) -> np.ndarray:
        k = unique.size
        codes = np.minimum(np.searchsorted(unique, targets), k - 1)
        unknown = unique[codes] != targets
        if np.any(unknown):
            raise ArgumentValidationError(
                f"Targets contains values not present in unique targets: {np.unique(targets[unknown]).tolist()}"
            )
        return np.bincount(codes, weights=weights, minlength=k)

    def _compute_totals(self, unique, targets, weights):
        return self._class_counts(unique, targets, weights)

    def _commit_totals(self, totals):
        if self._weighted_target_count is None or self._weighted_target_count.shape != totals.shape:
            self._weighted_target_count_left = np.zeros_like(totals)
            self._weighted_target_count_right = np.zeros_like(totals)
        self._weighted_target_count = totals

    def _reset_accumulators(self):
        self._weighted_target_count_left[:] = 0.0
        self._weighted_target_count_right[:] = self._weighted_target_count

    def _move_to_left(self, targets, weights):
        counts = self._class_counts(self._unique_targets, targets, weights)
        self._weighted_target_count_left += counts
        self._weighted_target_count_right -= counts
        np.maximum(self._weighted_target_count_right, 0.0, out=self._weighted_target_count_right)

    def _move_all_to_left(self):
        self._weighted_target_count_left[:] = self._weighted_target_count
        self._weighted_target_count_right[:] = 0.0

    def _node_impurity(self):
        return self._impurity(self._weighted_target_count)

    def _child_impurities(self):
        return ChildImpurities(
            left=self._impurity(self._weighted_target_count_left),
            right=self._impurity(self._weighted_target_count_right),
        )

    def _leaf_value(self):
        return float(self._unique_targets[int(np.argmax(self._weighted_target_count))])

    def _leaf_probabilities(self):
        total = self._weighted_total
        if total <= 0.0:
            return {float(t): 0.0 for t in self._unique_targets}
        return {float(t): float(c / total)
                for t, c in zip(self._unique_targets, self._weighted_target_count)}


class GiniClassificationImpurityCalculator(ClassificationImpurityCalculator):
    """Gini impurity ``1 - sum(p_c ** 2)``."""

    def _impurity(self, counts):
        total = counts.sum()
        if total <= 0.0:
            return 0.0
        p = counts / total
        return float(max(1.0 - np.sum(p * p), 0.0))


class EntropyClassificationImpurityCalculator(ClassificationImpurityCalculator):
    """Shannon entropy ``-sum(p_c * log2(p_c))`` in bits."""

    def _impurity(self, counts):
        total = counts.sum()
        if total <= 0.0:
            return 0.0
        p = counts / total
        p = p[p > 0]
        return float(max(-np.sum(p * np.log2(p)), 0.0))
