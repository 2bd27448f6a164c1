"""Parse failures raised while extracting formula metrics."""

from __future__ import annotations


class MetricsParseError(ValueError):
    """The payload does not match the rendering service's format."""


class OutOfBounds(MetricsParseError):
    """A read ran past the end of the supplied bytes."""

    def __init__(self, *, position: int, requested: int, available: int) -> None:
        super().__init__(
            f"read of {requested} byte(s) at offset {position} exceeds buffer ({available} remaining)"
        )
        self.position = position
        self.requested = requested
        self.available = available


class InvalidEncoding(MetricsParseError):
    """Base64 input contains characters outside the standard alphabet."""
