"""Writing rendered markup to text or binary sinks."""

import io
import sys
from typing import IO, Any, Optional

from streaming_sgml.shared.errors import SinkWriteError


def is_binary_sink(handle: Any) -> bool:
    """Check whether a sink expects bytes rather than text."""
    if isinstance(handle, (io.RawIOBase, io.BufferedIOBase)):
        return True
    if isinstance(handle, io.TextIOBase):
        return False
    return "b" in getattr(handle, "mode", "")


def write_markup(
    markup: str,
    handle: Optional[IO[Any]] = None,
    encoding: str = "utf-8",
    element_name: Optional[str] = None,
) -> int:
    """Write markup to a sink and return the number of characters written.

    Args:
        markup: Rendered markup text
        handle: Text or binary stream; defaults to ``sys.stdout``
        encoding: Encoding used when the sink is binary
        element_name: Name reported in errors

    Raises:
        SinkWriteError: If the sink is closed or fails to write
    """
    target = sys.stdout if handle is None else handle
    try:
        if is_binary_sink(target):
            target.write(markup.encode(encoding))
        else:
            target.write(markup)
    except (OSError, ValueError) as e:
        raise SinkWriteError(
            f"Failed to write markup for element {element_name!r}: {e}",
            element_name=element_name,
        ) from e
    return len(markup)
