"""
Argument checks run once before a tree is fitted.

Each check raises :class:`~cartpy.exceptions.ArgumentValidationError` with a
message naming the dimension that is at fault.  None of them run inside the
split search.
"""

from __future__ import annotations

import numpy as np

from .exceptions import ArgumentValidationError


def verify_observations_and_targets(observations, targets) -> None:
    """Verify that an observation matrix and a target vector fit together.

    Parameters
    ----------
    observations : array-like of shape (n_samples, n_features)
    targets : array-like of shape (n_samples,)
    """
    observations = np.asarray(observations)
    if observations.ndim != 2:
        raise ArgumentValidationError(
            f"Observations must be two-dimensional, got {observations.ndim} dimension(s)"
        )
    verify_observations_and_targets_shape(observations.shape[0], observations.shape[1], len(targets))


def verify_observations_and_targets_shape(observations_row_count: int,
                                          observations_column_count: int,
                                          target_length: int) -> None:
    verify_observations(observations_row_count, observations_column_count)
    verify_targets(target_length)
    verify_observations_row_count_and_targets_length_match(observations_row_count, target_length)


def verify_observations(row_count: int, column_count: int) -> None:
    """Verify that the observation matrix has at least one row and one column."""
    if row_count == 0:
        raise ArgumentValidationError("Observations does not contain any rows")
    if column_count == 0:
        raise ArgumentValidationError("Observations does not contain any columns")


def verify_targets(target_length: int) -> None:
    """Verify that the target vector is not empty."""
    if target_length == 0:
        raise ArgumentValidationError("Targets does not contain any rows")


def verify_observations_row_count_and_targets_length_match(observation_row_count: int,
                                                           target_length: int) -> None:
    if observation_row_count != target_length:
        raise ArgumentValidationError(
            f"Observation row count: {observation_row_count} and target length: "
            f"{target_length} does not match"
        )


def verify_indices(indices, observation_row_count: int, target_length: int) -> None:
    """Verify that every index addresses a row of both observations and targets.

    Parameters
    ----------
    indices : array-like of int
        Row indices selected for training.
    observation_row_count : int
        Number of rows in the observation matrix.
    target_length : int
        Number of entries in the target vector.

    Raises
    ------
    ArgumentValidationError
        If ``indices`` is empty, not of an integer dtype, contains negative
        entries or contains an entry ``>= min(observation_row_count, target_length)``.
    """
    indices = np.asarray(indices)
    if indices.size == 0:
        raise ArgumentValidationError("Indices does not contain any elements")
    if not np.issubdtype(indices.dtype, np.integer):
        raise ArgumentValidationError(f"Indices must be integers, got dtype {indices.dtype}")

    negative = indices[indices < 0]
    if negative.size:
        raise ArgumentValidationError(
            f"Indices contains negative values: {','.join(str(v) for v in negative)}"
        )

    max_index = int(indices.max())
    if max_index >= observation_row_count or max_index >= target_length:
        raise ArgumentValidationError(
            "Indices contains elements exceeding the row count of observations and targets. "
            f"Indices Max: {max_index}, observations row count: {observation_row_count}, "
            f"target length: {target_length}"
        )
