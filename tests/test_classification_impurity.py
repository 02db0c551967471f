import numpy as np
import pytest

from cartpy import (
    ArgumentValidationError,
    ChildImpurities,
    EntropyClassificationImpurityCalculator,
    GiniClassificationImpurityCalculator,
    Interval1D,
    PreconditionError,
)


def _two_class_calculator(cls=GiniClassificationImpurityCalculator):
    """Return a calculator over targets [0, 0, 1, 1] with unit weights."""
    targets = np.array([0.0, 0.0, 1.0, 1.0])
    weights = np.ones(4)
    calc = cls()
    calc.init(np.array([0.0, 1.0]), targets, weights, Interval1D(0, 4))
    return calc


def test_gini_perfect_split():
    calc = _two_class_calculator()
    calc.update_index(2)
    assert calc.weighted_left == 2.0
    assert calc.weighted_right == 2.0
    assert calc.child_impurities() == ChildImpurities(left=0.0, right=0.0)
    node = calc.node_impurity()
    assert node == pytest.approx(0.5)
    assert calc.impurity_improvement(node) == pytest.approx(node)


def test_entropy_perfect_split():
    calc = _two_class_calculator(EntropyClassificationImpurityCalculator)
    assert calc.node_impurity() == pytest.approx(1.0)
    calc.update_index(2)
    assert calc.child_impurities() == ChildImpurities(left=0.0, right=0.0)
    assert calc.impurity_improvement(1.0) == pytest.approx(1.0)


def test_gini_mixed_children():
    calc = _two_class_calculator()
    calc.update_index(1)
    children = calc.child_impurities()
    assert children.left == 0.0
    # right: [0, 1, 1] -> 1 - (1/9 + 4/9)
    assert children.right == pytest.approx(4.0 / 9.0)
    assert calc.impurity_improvement(0.5) == pytest.approx(0.5 - 0.75 * 4.0 / 9.0)


def test_boundary_positions_have_no_improvement():
    calc = _two_class_calculator()
    node = calc.node_impurity()
    children = calc.child_impurities()
    assert children.left == 0.0
    assert children.right == node
    assert calc.impurity_improvement(node) == 0.0

    calc.update_index(4)
    children = calc.child_impurities()
    assert children.left == node
    assert children.right == 0.0
    assert calc.weighted_right == 0.0
    assert calc.impurity_improvement(node) == 0.0


def test_node_impurity_ignores_split_position():
    calc = _two_class_calculator()
    before = calc.node_impurity()
    for position in (1, 2, 3, 4):
        calc.update_index(position)
        assert calc.node_impurity() == before


def test_leaf_value_majority_by_weight():
    calc = GiniClassificationImpurityCalculator()
    calc.init([1.0, 2.0], np.array([2.0, 1.0, 1.0]), np.array([5.0, 1.0, 1.0]), Interval1D(0, 3))
    assert calc.leaf_value() == 2.0


def test_leaf_value_tie_goes_to_smallest_label():
    calc = GiniClassificationImpurityCalculator()
    calc.init([7.0, 3.0], np.array([7.0, 3.0]), np.ones(2), Interval1D(0, 2))
    assert calc.leaf_value() == 3.0


def test_leaf_probabilities():
    calc = GiniClassificationImpurityCalculator()
    calc.init([0.0, 1.0, 2.0], np.array([0.0, 0.0, 1.0, 2.0]), np.ones(4), Interval1D(0, 4))
    probabilities = calc.leaf_probabilities()
    assert probabilities == pytest.approx({0.0: 0.5, 1.0: 0.25, 2.0: 0.25})
    assert sum(probabilities.values()) == pytest.approx(1.0)


def test_leaf_probabilities_cover_unseen_labels():
    calc = GiniClassificationImpurityCalculator()
    calc.init([0.0, 1.0, 2.0], np.array([1.0, 1.0]), np.ones(2), Interval1D(0, 2))
    assert calc.leaf_probabilities() == {0.0: 0.0, 1.0: 1.0, 2.0: 0.0}


def test_zero_weight_interval():
    calc = GiniClassificationImpurityCalculator()
    calc.init([0.0, 1.0], np.array([0.0, 1.0]), np.zeros(2), Interval1D(0, 2))
    calc.update_index(1)
    assert calc.node_impurity() == 0.0
    assert calc.impurity_improvement(0.3) == 0.0
    assert calc.leaf_probabilities() == {0.0: 0.0, 1.0: 0.0}


def test_zero_weight_samples_contribute_no_mass():
    calc = GiniClassificationImpurityCalculator()
    targets = np.array([0.0, 1.0, 1.0])
    calc.init([0.0, 1.0], targets, np.array([1.0, 0.0, 1.0]), Interval1D(0, 3))
    assert calc.weighted_total == 2.0
    calc.update_index(2)
    assert calc.weighted_left == 1.0
    assert calc.child_impurities() == ChildImpurities(left=0.0, right=0.0)


def test_update_interval_rebinds_statistics():
    targets = np.array([0.0, 0.0, 1.0, 1.0, 1.0, 0.0])
    calc = GiniClassificationImpurityCalculator()
    calc.init([0.0, 1.0], targets, np.ones(6), Interval1D(0, 6))
    assert calc.node_impurity() == pytest.approx(0.5)

    calc.update_interval(Interval1D(2, 5))
    assert calc.position == 2
    assert calc.weighted_total == 3.0
    assert calc.node_impurity() == 0.0
    assert calc.leaf_value() == 1.0


def test_unknown_target_rejected():
    calc = GiniClassificationImpurityCalculator()
    with pytest.raises(ArgumentValidationError, match="not present in unique targets"):
        calc.init([0.0, 1.0], np.array([0.0, 5.0]), np.ones(2), Interval1D(0, 2))


def test_empty_unique_targets_rejected():
    calc = GiniClassificationImpurityCalculator()
    with pytest.raises(ArgumentValidationError):
        calc.init([], np.array([0.0]), np.ones(1), Interval1D(0, 1))


def test_incremental_sweep_matches_from_scratch():
    rng = np.random.default_rng(0)
    targets = rng.integers(0, 3, size=40).astype(float)
    weights = rng.uniform(0.0, 2.0, size=40)
    unique = [0.0, 1.0, 2.0]
    interval = Interval1D(5, 35)

    calc = GiniClassificationImpurityCalculator()
    calc.init(unique, targets, weights, interval)
    reference = GiniClassificationImpurityCalculator()
    reference.init(unique, targets, weights, interval)

    for position in (6, 9, 10, 20, 34):
        calc.update_index(position)
        reference.update_interval(Interval1D(interval.start, position))
        left = reference.node_impurity()
        left_weight = reference.weighted_total
        reference.update_interval(Interval1D(position, interval.end))
        right = reference.node_impurity()

        children = calc.child_impurities()
        assert children.left == pytest.approx(left)
        assert children.right == pytest.approx(right)
        assert calc.weighted_left == pytest.approx(left_weight)
        assert calc.weighted_left + calc.weighted_right == pytest.approx(calc.weighted_total)


def test_failed_init_leaves_calculator_unbound():
    calc = GiniClassificationImpurityCalculator()
    with pytest.raises(ArgumentValidationError):
        calc.init([0.0, 1.0], np.array([0.0, 5.0]), np.ones(2), Interval1D(0, 2))
    assert not calc.is_initialized
    with pytest.raises(PreconditionError):
        calc.node_impurity()
    with pytest.raises(PreconditionError):
        calc.weighted_total


def test_failed_reinit_keeps_previous_binding():
    calc = GiniClassificationImpurityCalculator()
    calc.init([0.0, 1.0], np.array([0.0, 1.0]), np.ones(2), Interval1D(0, 2))
    with pytest.raises(ArgumentValidationError):
        calc.init([0.0, 1.0, 2.0], np.array([2.0, 7.0, 0.0]), np.ones(3), Interval1D(0, 3))
    assert list(calc.unique_targets) == [0.0, 1.0]
    assert calc.interval == Interval1D(0, 2)
    assert calc.node_impurity() == pytest.approx(0.5)
    calc.update_index(1)
    assert calc.child_impurities() == ChildImpurities(left=0.0, right=0.0)


def test_failed_update_interval_keeps_previous_interval():
    targets = np.array([0.0, 1.0, 5.0, 1.0])
    calc = GiniClassificationImpurityCalculator()
    calc.init([0.0, 1.0], targets, np.ones(4), Interval1D(0, 2))
    with pytest.raises(ArgumentValidationError, match="not present in unique targets"):
        calc.update_interval(Interval1D(1, 4))
    assert calc.interval == Interval1D(0, 2)
    assert calc.position == 0
    assert calc.weighted_total == 2.0
    assert calc.node_impurity() == pytest.approx(0.5)
