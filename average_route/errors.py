"""Error types raised by the average route pipeline."""

from __future__ import annotations

from typing import Optional


class AverageRouteError(ValueError):
    """Base class for pipeline failures."""


class EmptyInputError(AverageRouteError):
    """A computation that needs at least one element received none."""


class LengthMismatchError(AverageRouteError):
    """Two sequences that must be aligned have different lengths."""

    def __init__(self, message: str, route: Optional[object] = None) -> None:
        super().__init__(message)
        self.route = route


class MalformedRecordError(AverageRouteError):
    """A trajectory record whose coordinate payload could not be parsed."""
