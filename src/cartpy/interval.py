"""Half-open sample intervals used by the impurity calculators."""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ArgumentValidationError


@dataclass(frozen=True)
class Interval1D:
    """Half-open integer range ``[start, end)`` over a sample ordering.

    Parameters
    ----------
    start : int
        First index of the interval (inclusive).
    end : int
        One past the last index of the interval (exclusive).

    Raises
    ------
    ArgumentValidationError
        If ``start`` is negative or the interval is empty.
    """

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0:
            raise ArgumentValidationError(f"Interval start must be non-negative, got {self.start}")
        if self.start >= self.end:
            raise ArgumentValidationError(
                f"Interval start: {self.start} must be smaller than end: {self.end}"
            )

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains_position(self, position: int) -> bool:
        """Whether ``position`` is a valid split position (``end`` included)."""
        return self.start <= position <= self.end

    def check_bounds(self, n: int) -> None:
        if self.end > n:
            raise ArgumentValidationError(
                f"Interval end: {self.end} exceeds the length of the bound arrays: {n}"
            )

    def __len__(self) -> int:
        return self.length
