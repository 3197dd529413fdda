"""Argument classification for element construction.

Element constructors accept a loose argument shape: a bare string is
content, a mapping holds attributes, and a list may mix both in any order::

    "my content"
    {"size": 5, "title": "test"}
    ["my content", {"size": 5, "title": "test"}]
    [{"size": 5, "title": "test"}, "my content"]
    [{"size": 5}, "my content", {"title": "test"}]

Inside a mapping, integer keys are positional content and any other key is a
single named attribute assignment.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from streaming_sgml.shared.errors import InvalidArgumentError

_SCALAR_TYPES = (str, int, float)


@dataclass
class ArgumentSplit:
    """Result of classifying element arguments.

    ``assignments`` are named pairs that must be applied to the element before
    the merged ``attributes``, so merged mappings win on key collisions.
    """

    content: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    assignments: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the arguments carried neither content nor attributes."""
        return not (self.content or self.attributes or self.assignments)


def normalize_attribute_value(value: Any) -> str:
    """Convert an attribute value to its stored string form.

    ``None`` and ``True`` select the boolean attribute form (empty value).

    Raises:
        InvalidArgumentError: If the value is not a scalar
    """
    if value is None or value is True:
        return ""
    if isinstance(value, bool):
        raise InvalidArgumentError(
            "False is not a valid attribute value; omit the attribute instead",
            argument=value,
        )
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise InvalidArgumentError(
        f"Attribute value must be a scalar, got {type(value).__name__}",
        argument=value,
    )


def normalize_attribute_name(name: Any) -> str:
    """Validate an attribute name."""
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError(
            "Attribute name must be a non-empty string", argument=name
        )
    return name


def _is_int_key(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


def normalize_content(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        raise InvalidArgumentError("Boolean values cannot be used as content", argument=value)
    if isinstance(value, _SCALAR_TYPES):
        return str(value)
    raise InvalidArgumentError(
        f"Content must be a string or number, got {type(value).__name__}",
        argument=value,
    )


def _entries(arguments: Any) -> Iterable[Tuple[Any, Any]]:
    if isinstance(arguments, Mapping):
        return arguments.items()
    return enumerate(arguments)


def classify_arguments(arguments: Any) -> ArgumentSplit:
    """Split raw element arguments into content and attributes.

    Args:
        arguments: None, a scalar, a mapping or a list/tuple of those

    Returns:
        ArgumentSplit with concatenated content, merged attribute mappings and
        named assignments in the order they were given

    Raises:
        InvalidArgumentError: If an entry is neither a scalar nor a mapping
    """
    split = ArgumentSplit()
    if arguments is None:
        return split

    if not isinstance(arguments, (Mapping, list, tuple)):
        split.content = normalize_content(arguments)
        return split

    fragments: List[str] = []
    for key, value in _entries(arguments):
        if isinstance(value, Mapping):
            for name, attribute_value in value.items():
                split.attributes[normalize_attribute_name(name)] = (
                    normalize_attribute_value(attribute_value)
                )
        elif not _is_int_key(key) or key < 0:
            # Negative indices name an attribute like any other key
            attribute_name = str(key) if _is_int_key(key) else key
            split.assignments.append(
                (normalize_attribute_name(attribute_name), normalize_attribute_value(value))
            )
        else:
            fragments.append(normalize_content(value))

    split.content = "".join(fragments)
    return split
