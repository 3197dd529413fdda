"""Element tree engine for SGML generation.

This module provides the element abstraction that builds, renders and
incrementally flushes markup trees.

Key Components:
    Element: Tree node with content or children, attributes and flush state
    classify_arguments: Splits loose constructor arguments into content and attributes
    write_markup: Writes rendered markup to text or binary sinks
"""

from .arguments import (
    ArgumentSplit,
    classify_arguments,
    normalize_attribute_name,
    normalize_attribute_value,
    normalize_content,
)
from .element import Element
from .markup import COMMENT_NAME, escape_attribute_value
from .sink import is_binary_sink, write_markup

__all__ = [
    "ArgumentSplit",
    "COMMENT_NAME",
    "Element",
    "classify_arguments",
    "escape_attribute_value",
    "is_binary_sink",
    "normalize_attribute_name",
    "normalize_attribute_value",
    "normalize_content",
    "write_markup",
]
