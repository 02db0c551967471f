# cartpy/__init__.py
"""
cartpy: incremental split evaluation for CART-style decision trees.

Exports:
    - ImpurityCalculator, ChildImpurities, Interval1D
    - GiniClassificationImpurityCalculator, EntropyClassificationImpurityCalculator
    - RegressionImpurityCalculator
    - DecisionTreeClassifier, DecisionTreeRegressor
"""
from loguru import logger

from .classification import (
    ClassificationImpurityCalculator,
    EntropyClassificationImpurityCalculator,
    GiniClassificationImpurityCalculator,
)
from .exceptions import ArgumentValidationError, CartpyError, PreconditionError
from .impurity import ChildImpurities, ImpurityCalculator
from .interval import Interval1D
from .logging import PACKAGE_NAME, enable_logging
from .regression import RegressionImpurityCalculator
from .tree import DecisionTreeClassifier, DecisionTreeRegressor, DepthFirstTreeBuilder

logger.disable(PACKAGE_NAME)

__all__ = [
    "ArgumentValidationError",
    "CartpyError",
    "ChildImpurities",
    "ClassificationImpurityCalculator",
    "DecisionTreeClassifier",
    "DecisionTreeRegressor",
    "DepthFirstTreeBuilder",
    "EntropyClassificationImpurityCalculator",
    "GiniClassificationImpurityCalculator",
    "ImpurityCalculator",
    "Interval1D",
    "PreconditionError",
    "RegressionImpurityCalculator",
    "enable_logging",
]
__version__ = "0.1.0"
