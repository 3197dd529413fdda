"""Exception types raised by the markup engine.

Every failure raised while building or emitting a tree derives from
MarkupError so callers can catch engine problems with a single clause.
"""

from typing import Any, Optional


class MarkupError(Exception):
    """Base exception for markup building and emission errors."""


class InvalidArgumentError(MarkupError, ValueError):
    """Raised when element arguments, attributes or tree operations are malformed."""

    def __init__(self, message: str, argument: Optional[Any] = None) -> None:
        super().__init__(message)
        self.argument = argument


class SinkWriteError(MarkupError, OSError):
    """Raised when the output sink rejects markup during a flush.

    The original sink exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, element_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.element_name = element_name
