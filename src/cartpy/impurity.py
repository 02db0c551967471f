"""
cartpy.impurity
===============

The impurity calculator contract shared by the classification and regression
strategies.

A calculator is bound once to caller-owned ``targets``/``weights`` arrays and
a working :class:`~cartpy.interval.Interval1D`.  It keeps the sufficient
statistics of the whole interval plus a left/right partition at a split
position.  A tree builder sweeps the split position forward with
:meth:`ImpurityCalculator.update_index`, which only folds the samples between
the old and the new position into the left side, so scanning every candidate
threshold of one feature costs O(n) instead of O(n²).

One instance is meant to be reused for the whole tree: ``init`` once, then
``update_interval`` per node and ``reset`` per feature.  The calculator keeps
references to the bound arrays, not copies; the caller may reorder the samples
inside the current interval between sweeps (e.g. after sorting by another
feature) and call ``reset`` without a rescan, since the set of samples in the
interval is unchanged.  Instances are not thread-safe.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from .exceptions import ArgumentValidationError, PreconditionError
from .interval import Interval1D


@dataclass(frozen=True)
class ChildImpurities:
    """Impurities of the left and right side of a split.

    An empty side reports ``0.0``.
    """

    left: float
    right: float


class ImpurityCalculator(ABC):
    """Incremental impurity statistics over a sorted sample interval.

    Subclasses provide the accumulator shape (per-class histogram or running
    sums) through the ``_``-prefixed hooks; the interval and split position
    bookkeeping lives here.

    Attributes
    ----------
    interval : Interval1D
        The bound working interval.
    position : int
        Current split position, ``interval.start <= position <= interval.end``.
    weighted_left, weighted_right, weighted_total : float
        Sample weight left of, right of, and across the split position.
    """

    def __init__(self):
        self._targets: np.ndarray | None = None
        self._weights: np.ndarray | None = None
        self._unique_targets = None
        self._interval: Interval1D | None = None
        self._position: int = 0
        self._weighted_total: float = 0.0
        self._weighted_left: float = 0.0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def init(self, unique_targets, targets, weights, interval: Interval1D) -> None:
        """Bind the calculator to its inputs and compute the interval statistics.

        Parameters
        ----------
        unique_targets : array-like of float
            All target values that can occur during this run.  Sizes the
            per-class accumulators of classification calculators; ignored by
            regression.
        targets : ndarray of shape (n_samples,)
            Target per sample.  Kept by reference when already ``float64``.
        weights : ndarray of shape (n_samples,)
            Non-negative weight per sample.  Kept by reference when already
            ``float64``.
        interval : Interval1D
            Working interval; the split position starts at ``interval.start``.

        Raises
        ------
        ArgumentValidationError
            If the arrays differ in shape, a weight is negative or the interval
            does not fit inside the arrays.
        """
        targets = np.asarray(targets, dtype=float)
        weights = np.asarray(weights, dtype=float)
        if targets.ndim != 1:
            raise ArgumentValidationError(f"Targets must be one-dimensional, got shape {targets.shape}")
        if weights.shape != targets.shape:
            raise ArgumentValidationError(
                f"Target length: {targets.shape[0]} and weight length: {weights.shape[0]} does not match"
            )
        if np.any(weights < 0):
            raise ArgumentValidationError("Weights contains negative values")
        interval.check_bounds(targets.shape[0])

        unique = self._prepare_unique_targets(unique_targets)
        self._rebind(unique, targets, weights, interval)

    def update_interval(self, new_interval: Interval1D) -> None:
        """Move to a new working interval and recompute its statistics from scratch."""
        self._check_initialized("update_interval")
        new_interval.check_bounds(self._targets.shape[0])
        self._rebind(self._unique_targets, self._targets, self._weights, new_interval)

    def update_index(self, new_position: int) -> None:
        """Sweep the split position forward to ``new_position``.

        Samples in ``[position, new_position)`` move from the right side to the
        left side.  Moving to the current position is a no-op.

        Raises
        ------
        PreconditionError
            If ``new_position`` lies outside ``[interval.start, interval.end]``
            or behind the current position.
        """
        self._check_initialized("update_index")
        if not self._interval.contains_position(new_position):
            raise PreconditionError(
                f"Split position {new_position} is outside the interval "
                f"[{self._interval.start}, {self._interval.end}]"
            )
        if new_position < self._position:
            raise PreconditionError(
                f"Split position can only move forward: current {self._position}, requested {new_position}"
            )
        if new_position == self._position:
            return

        if new_position == self._interval.end:
            # everything on the left; avoids rounding residue on the right
            self._move_all_to_left()
            self._weighted_left = self._weighted_total
        else:
            w = self._weights[self._position:new_position]
            self._move_to_left(self._targets[self._position:new_position], w)
            self._weighted_left += float(w.sum())
        self._position = new_position

    def reset(self) -> None:
        """Put all the interval's mass on the right side, at ``interval.start``."""
        self._check_initialized("reset")
        self._position = self._interval.start
        self._weighted_left = 0.0
        self._reset_accumulators()

    def _rebind(self, unique, targets, weights, interval: Interval1D) -> None:
        # nothing is assigned until the new totals have been computed
        s = slice(interval.start, interval.end)
        w = weights[s]
        totals = self._compute_totals(unique, targets[s], w)
        self._unique_targets = unique
        self._targets = targets
        self._weights = weights
        self._commit_totals(totals)
        self._weighted_total = float(w.sum())
        self._interval = interval
        self.reset()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def is_initialized(self) -> bool:
        return self._interval is not None

    @property
    def interval(self) -> Interval1D:
        self._check_initialized("interval")
        return self._interval

    @property
    def position(self) -> int:
        self._check_initialized("position")
        return self._position

    @property
    def weighted_total(self) -> float:
        self._check_initialized("weighted_total")
        return self._weighted_total

    @property
    def weighted_left(self) -> float:
        self._check_initialized("weighted_left")
        return self._weighted_left

    @property
    def weighted_right(self) -> float:
        self._check_initialized("weighted_right")
        return max(self._weighted_total - self._weighted_left, 0.0)

    def node_impurity(self) -> float:
        """Impurity of the whole working interval; independent of the split position."""
        self._check_initialized("node_impurity")
        return self._node_impurity()

    def child_impurities(self) -> ChildImpurities:
        """Impurities of ``[start, position)`` and ``[position, end)``."""
        self._check_initialized("child_impurities")
        return self._child_impurities()

    def impurity_improvement(self, impurity: float) -> float:
        """Weighted impurity reduction of the current split against ``impurity``.

        ``impurity - wl/wt * left - wr/wt * right`` with ``wt = wl + wr``;
        ``0.0`` when the interval carries no weight.
        """
        self._check_initialized("impurity_improvement")
        weighted_left = self._weighted_left
        weighted_right = self.weighted_right
        weighted_total = weighted_left + weighted_right
        if weighted_total <= 0.0:
            return 0.0
        children = self._child_impurities()
        return (impurity
                - weighted_left / weighted_total * children.left
                - weighted_right / weighted_total * children.right)

    def leaf_value(self) -> float:
        """Prediction of a leaf covering the whole working interval."""
        self._check_initialized("leaf_value")
        return self._leaf_value()

    def leaf_probabilities(self) -> dict[float, float]:
        """Weighted frequency of each target value over the working interval.

        Only meaningful for classification; regression returns an empty dict.
        """
        self._check_initialized("leaf_probabilities")
        return self._leaf_probabilities()

    def _check_initialized(self, operation: str) -> None:
        if self._interval is None:
            raise PreconditionError(
                f"{type(self).__name__}.{operation}() called before init()"
            )

    # ------------------------------------------------------------------
    # Accumulator hooks
    # ------------------------------------------------------------------
    def _prepare_unique_targets(self, unique_targets):
        """Validate ``unique_targets`` and return the form kept by the calculator.

        Must not touch the calculator state; ignored (``None``) by default.
        """
        return None

    @abstractmethod
    def _compute_totals(self, unique, targets: np.ndarray, weights: np.ndarray):
        """Return the interval statistics without storing them."""

    @abstractmethod
    def _commit_totals(self, totals) -> None:
        ...

    @abstractmethod
    def _reset_accumulators(self) -> None:
        ...

    @abstractmethod
    def _move_to_left(self, targets: np.ndarray, weights: np.ndarray) -> None:
        ...

    @abstractmethod
    def _move_all_to_left(self) -> None:
        ...

    @abstractmethod
    def _node_impurity(self) -> float:
        ...

    @abstractmethod
    def _child_impurities(self) -> ChildImpurities:
        ...

    @abstractmethod
    def _leaf_value(self) -> float:
        ...

    @abstractmethod
    def _leaf_probabilities(self) -> dict[float, float]:
        ...
