"""Scan every split position of one sorted feature with a single calculator."""
import numpy as np

from cartpy import GiniClassificationImpurityCalculator, Interval1D

feature = np.array([0.5, 1.0, 1.5, 2.0, 2.5, 3.0])
targets = np.array([0.0, 0.0, 1.0, 0.0, 1.0, 1.0])
weights = np.ones_like(targets)

calc = GiniClassificationImpurityCalculator()
calc.init(np.unique(targets), targets, weights, Interval1D(0, len(targets)))
parent = calc.node_impurity()

for position in range(1, len(targets)):
    calc.update_index(position)
    children = calc.child_impurities()
    print(f"x <= {feature[position - 1]:.2f}: left={children.left:.3f} right={children.right:.3f} "
          f"improvement={calc.impurity_improvement(parent):.3f}")
