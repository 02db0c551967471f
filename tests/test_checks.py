import numpy as np
import pytest

from cartpy import ArgumentValidationError
from cartpy.checks import (
    verify_indices,
    verify_observations,
    verify_observations_and_targets,
    verify_observations_row_count_and_targets_length_match,
    verify_targets,
)


def test_valid_inputs_pass():
    verify_observations_and_targets(np.zeros((3, 2)), np.zeros(3))
    verify_indices([0, 2, 2], 3, 3)


def test_empty_observations():
    with pytest.raises(ArgumentValidationError, match="does not contain any rows"):
        verify_observations(0, 2)
    with pytest.raises(ArgumentValidationError, match="does not contain any columns"):
        verify_observations(2, 0)
    with pytest.raises(ArgumentValidationError, match="Observations does not contain any columns"):
        verify_observations_and_targets(np.zeros((3, 0)), np.zeros(3))


def test_empty_targets():
    with pytest.raises(ArgumentValidationError, match="Targets does not contain any rows"):
        verify_targets(0)


def test_length_mismatch_message():
    with pytest.raises(ArgumentValidationError) as exc:
        verify_observations_row_count_and_targets_length_match(4, 3)
    assert str(exc.value) == "Observation row count: 4 and target length: 3 does not match"


def test_argument_validation_error_is_value_error():
    with pytest.raises(ValueError):
        verify_observations_and_targets(np.zeros((2, 2)), np.zeros(3))


def test_negative_indices():
    with pytest.raises(ArgumentValidationError, match="negative values: -1,-3"):
        verify_indices([0, -1, 2, -3], 5, 5)


def test_indices_exceeding_rows():
    with pytest.raises(ArgumentValidationError, match="Indices Max: 4, observations row count: 5, target length: 4"):
        verify_indices([0, 4], 5, 4)


def test_empty_indices():
    with pytest.raises(ArgumentValidationError):
        verify_indices([], 5, 5)


def test_non_integer_indices():
    with pytest.raises(ArgumentValidationError, match="Indices must be integers"):
        verify_indices([0.0, 1.7], 5, 5)
    verify_indices(np.array([0, 1], dtype=np.int32), 5, 5)
