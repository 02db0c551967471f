"""Exceptions raised by cartpy.

Two families are defined:

- ``PreconditionError`` (subclass of ``RuntimeError``): an impurity calculator
  was used outside its contract, e.g. queried before ``init`` or swept
  backwards with ``update_index``.  Continuing would produce silently wrong
  statistics, so these are never recovered internally.
- ``ArgumentValidationError`` (subclass of ``ValueError``): input arrays,
  intervals or index lists are inconsistent.  Raised before learning starts.
"""

from __future__ import annotations


class CartpyError(Exception):
    """Base class for all cartpy errors."""


class PreconditionError(CartpyError, RuntimeError):
    """Raised when an impurity calculator is used outside its contract.

    Examples
    --------
    >>> from cartpy import GiniClassificationImpurityCalculator
    >>> calc = GiniClassificationImpurityCalculator()
    >>> calc.node_impurity()  # doctest: +SKIP
    Traceback (most recent call last):
    ...
    cartpy.exceptions.PreconditionError: ...
    """


class ArgumentValidationError(CartpyError, ValueError):
    """Raised when inputs fail shape, range or consistency checks.

    The message identifies which dimension or value was at fault and is
    propagated unchanged to the caller.
    """
