"""Streaming SGML generator.

Builds SGML/HTML-style element trees programmatically and serializes them
minified or indented, including incremental flushing of documents that are
still being built.

Progressive API Disclosure:
- Level 1: Simple functions - element(), render()
- Level 2: Element trees - Element with RenderConfig and streaming flush()
"""

__version__ = "2.0.0"
__author__ = "Streaming SGML Team"

from typing import Any, Optional

from .shared.config import RenderConfig
from .shared.errors import InvalidArgumentError, MarkupError, SinkWriteError
from .tree.element import Element
from .tree.markup import COMMENT_NAME


def element(name: str, arguments: Any = None, is_void: bool = False) -> Element:
    """Create an element; shorthand for ``Element(name, arguments, is_void)``."""
    return Element(name, arguments, is_void)


def render(root: Element, pretty: bool = False, config: Optional[RenderConfig] = None) -> str:
    """Render an element tree, minified unless ``pretty`` is set."""
    return root.render(minimize=not pretty, indent_level=0, config=config)


__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "element",
    "render",

    # Level 2: Element trees and configuration
    "COMMENT_NAME",
    "Element",
    "RenderConfig",

    # Errors
    "InvalidArgumentError",
    "MarkupError",
    "SinkWriteError",
]
