"""The element engine: tree building, rendering and streaming flushes.

An element consists of three parts: a start tag, a body and an end tag. The
body is either text content or a list of child elements, never both. Every
element renders itself and its descendants, and can flush its markup to a
sink while it is still being built:

    page = Element("body").block()
    page.child("h1", "Report")
    page.flush()                # <body><h1>Report</h1>
    page.child("p", "Done.")
    page.unblock().flush()      # <p>Done.</p></body>
"""

from collections.abc import Mapping
from typing import IO, Any, Dict, Iterator, List, Optional, Tuple, Union

from streaming_sgml.shared.config import DEFAULT_CONFIG, RenderConfig
from streaming_sgml.shared.errors import InvalidArgumentError, SinkWriteError
from streaming_sgml.shared.logging import get_logger
from streaming_sgml.tree.arguments import (
    classify_arguments,
    normalize_attribute_name,
    normalize_attribute_value,
    normalize_content,
)
from streaming_sgml.tree.markup import COMMENT_NAME, comment, end_tag, start_tag
from streaming_sgml.tree.sink import write_markup

_DICT_KEYS = frozenset({"name", "void", "minimize", "attributes", "content", "children", "comment"})

logger = get_logger(__name__, component="element")


class Element:
    """A named SGML element with attributes and either content or children.

    An empty name makes the element anonymous: it renders its body without
    surrounding tags.
    """

    def __init__(self, name: str = "", arguments: Any = None, is_void: bool = False) -> None:
        """Create an element.

        Args:
            name: Tag name, empty for an anonymous element
            arguments: Content and attributes, see ``classify_arguments``
            is_void: Elements like ``br`` never emit an end tag

        Raises:
            InvalidArgumentError: If the name or arguments are malformed
        """
        if not isinstance(name, str):
            raise InvalidArgumentError("Element name must be a string", argument=name)

        split = classify_arguments(arguments)

        self._name = name
        self._is_void = bool(is_void)
        self._minimized = False
        self._blocked = False
        self._start_flushed = False
        self._break_pending = False
        self._body: Union[str, List["Element"]] = split.content
        self._attributes: Dict[str, str] = {}

        for attribute_name, value in split.assignments:
            self._attributes[attribute_name] = value
        if split.attributes:
            self.set_attributes(split.attributes)

    @classmethod
    def _text(cls, text: str) -> "Element":
        anonymous = cls()
        anonymous._body = text
        return anonymous

    def __repr__(self) -> str:
        if self.has_elements:
            body = f"elements={len(self._body)}"
        else:
            body = f"content={self._body!r}"
        return f"Element(name={self._name!r}, {body})"

    # State

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_void(self) -> bool:
        return self._is_void

    @property
    def is_minimized(self) -> bool:
        return self._minimized

    @property
    def is_blocked(self) -> bool:
        return self._blocked

    @property
    def start_flushed(self) -> bool:
        """True once the start tag has been written by a flush."""
        return self._start_flushed

    @property
    def content(self) -> str:
        return self._body if isinstance(self._body, str) else ""

    @property
    def elements(self) -> Tuple["Element", ...]:
        return tuple(self._body) if isinstance(self._body, list) else ()

    @property
    def attributes(self) -> Dict[str, str]:
        return dict(self._attributes)

    @property
    def has_name(self) -> bool:
        return self._name != ""

    @property
    def has_content(self) -> bool:
        return isinstance(self._body, str) and self._body != ""

    @property
    def has_elements(self) -> bool:
        return isinstance(self._body, list) and len(self._body) > 0

    def minimize(self) -> "Element":
        """Always render the inside of this element minimized."""
        self._minimized = True
        return self

    def block(self) -> "Element":
        """Withhold the end tag until unblocked."""
        self._blocked = True
        return self

    def unblock(self) -> "Element":
        self._blocked = False
        return self

    # Content and children

    def write(self, content: Any) -> "Element":
        """Add text to this element.

        Text written after children were attached becomes an anonymous child,
        otherwise it extends the current content.
        """
        text = normalize_content(content)
        if not text:
            return self
        if self.has_elements:
            self.attach(Element._text(text))
        else:
            self._body = self.content + text
        return self

    def attach(self, element: "Element") -> "Element":
        """Append a child element and return it.

        Existing content is first moved into an anonymous child so that it
        keeps its place before the new child.

        Raises:
            InvalidArgumentError: If ``element`` is not an Element or would
                create a cycle
        """
        if not isinstance(element, Element):
            raise InvalidArgumentError(
                f"Only elements can be attached, got {type(element).__name__}",
                argument=element,
            )
        if any(node is self for node in element.iter_tree()):
            raise InvalidArgumentError(
                f"Attaching {element.name!r} to {self._name!r} would create a cycle",
                argument=element,
            )

        if self.has_content:
            self._body = [Element._text(self._body)]
        elif not isinstance(self._body, list):
            self._body = []
        self._body.append(element)
        return element

    def child(self, name: str, arguments: Any = None, is_void: bool = False) -> "Element":
        """Create a named child element, attach it and return it."""
        return self.attach(Element(name, arguments, is_void))

    def comment(self, text: Any) -> "Element":
        """Attach a comment; comments are dropped from minimized output.

        Empty text attaches nothing.
        """
        text = normalize_content(text)
        if text:
            self.attach(Element(COMMENT_NAME, text))
        return self

    def iter_tree(self) -> Iterator["Element"]:
        """Yield this element and all of its descendants depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.elements))

    # Attributes

    def set_attributes(self, attributes: Mapping) -> "Element":
        """Set several attributes, overwriting existing ones."""
        if not isinstance(attributes, Mapping):
            raise InvalidArgumentError(
                "Attributes must be given as a mapping", argument=attributes
            )
        for name, value in attributes.items():
            self.attribute(name, value)
        return self

    def attribute(self, name: str, value: Any, append: bool = False) -> "Element":
        """Set an attribute, or append to it space separated when ``append`` is set."""
        name = normalize_attribute_name(name)
        value = normalize_attribute_value(value)
        if append:
            value = f"{self._attributes.get(name, '')} {value}".strip()
        self._attributes[name] = value
        return self

    def get_attribute(self, name: str, default: str = "") -> str:
        return self._attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        return name in self._attributes

    # Markup

    def _start_tag(self) -> str:
        if self._start_flushed or not self.has_name:
            return ""
        return start_tag(self._name, self._attributes)

    def _end_tag(self) -> str:
        if self._is_void or self._blocked or not self.has_name:
            return ""
        return end_tag(self._name)

    def render(
        self,
        minimize: bool = True,
        indent_level: int = 0,
        config: Optional[RenderConfig] = None,
    ) -> str:
        """Produce the markup for this element and its descendants.

        Args:
            minimize: Omit line breaks and indentation
            indent_level: Nesting depth used for indentation
            config: Indent unit and line terminator, defaults to DEFAULT_CONFIG

        Returns:
            Markup text; non-minimized output ends with a line terminator
            unless the element is blocked
        """
        return self._render(minimize, indent_level, config or DEFAULT_CONFIG, top_level=True)

    def _render(
        self,
        minimize: bool,
        indent_level: int,
        config: RenderConfig,
        top_level: bool = False,
    ) -> str:
        indent = config.indent(indent_level)
        inner_minimize = self._minimized or minimize

        if self.has_content:
            if not self.has_name:
                markup = self._body
            elif self._name == COMMENT_NAME:
                markup = "" if inner_minimize else comment(self._body)
            else:
                markup = self._start_tag() + self._body + self._end_tag()
        elif self.has_elements:
            opening = self._start_tag()
            closing = self._end_tag()
            parts = [opening]
            if (opening or self._break_pending) and not inner_minimize:
                parts.append(config.line_terminator)
            for element in self._body:
                parts.append(element._render(inner_minimize, indent_level + 1, config))
            if closing:
                if not inner_minimize:
                    parts.append(indent)
                parts.append(closing)
            markup = "".join(parts)
        elif self.has_name:
            markup = self._start_tag() + self._end_tag()
        else:
            markup = ""

        if minimize:
            return markup
        if not top_level:
            return indent + markup + config.line_terminator
        # Flushed start tags already carried their indent, blocked elements
        # are continued by the next flush.
        prefix = "" if self._start_flushed else indent
        suffix = "" if self._blocked else config.line_terminator
        return prefix + markup + suffix

    # Streaming

    def flush(
        self,
        minimize: bool = True,
        handle: Optional[IO[Any]] = None,
        config: Optional[RenderConfig] = None,
    ) -> None:
        """Write the markup to a sink and release what was written.

        After a successful write the start tag is marked as flushed and the
        content, children and attributes are cleared, so the element can be
        extended and flushed again without repeating output. A failed write
        leaves the element unchanged.

        A pretty flush of a blocked element with an empty body ends on its
        start tag; the line break that belongs after it is written by the
        first later flush that has children.

        Args:
            minimize: Omit line breaks and indentation
            handle: Text or binary stream, defaults to ``sys.stdout``
            config: Render and encoding settings

        Raises:
            SinkWriteError: If the sink fails
        """
        config = config or DEFAULT_CONFIG
        log = logger.bind(element=self._name)
        markup = self._render(minimize, 0, config, top_level=True)
        try:
            written = write_markup(markup, handle, config.encoding, self._name)
        except SinkWriteError:
            log.error("Failed to flush element markup", extra={"characters": len(markup)})
            raise

        if not self.has_content and not self.has_elements:
            opened_bare = (
                not self._start_flushed
                and self.has_name
                and self._blocked
                and not (minimize or self._minimized)
            )
            self._break_pending = self._break_pending or opened_bare
        else:
            self._break_pending = False
        self._start_flushed = True
        self._body = ""
        self._attributes = {}

        log.debug(
            "Flushed element markup",
            extra={"characters": written, "blocked": self._blocked},
        )

    # Plain data

    def to_dict(self) -> Dict[str, Any]:
        """Convert the element tree to plain data accepted by ``from_dict``."""
        data: Dict[str, Any] = {"name": self._name}
        if self._is_void:
            data["void"] = True
        if self._minimized:
            data["minimize"] = True
        if self._attributes:
            data["attributes"] = dict(self._attributes)
        if self.has_content:
            data["content"] = self._body
        elif self.has_elements:
            data["children"] = [element.to_dict() for element in self._body]
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Element":
        """Build an element tree from plain data.

        A node is either a string (anonymous text) or a mapping with the keys
        ``name``, ``void``, ``minimize``, ``attributes``, ``content`` and
        ``children``; ``{"comment": text}`` creates a comment.

        Raises:
            InvalidArgumentError: If the data does not describe a tree
        """
        if isinstance(data, str):
            return cls._text(data)
        if not isinstance(data, Mapping):
            raise InvalidArgumentError(
                f"Element data must be a mapping or string, got {type(data).__name__}",
                argument=data,
            )

        unknown = set(data) - _DICT_KEYS
        if unknown:
            raise InvalidArgumentError(
                f"Unknown element keys: {sorted(unknown)}", argument=data
            )
        if "comment" in data:
            if set(data) != {"comment"}:
                raise InvalidArgumentError(
                    "A comment node cannot carry other keys", argument=data
                )
            text = normalize_content(data["comment"])
            if not text:
                raise InvalidArgumentError("A comment node needs text", argument=data)
            return cls(COMMENT_NAME, text)
        if "content" in data and data.get("children"):
            raise InvalidArgumentError(
                "An element holds either content or children, not both", argument=data
            )

        for flag in ("void", "minimize"):
            if not isinstance(data.get(flag, False), bool):
                raise InvalidArgumentError(f"{flag} must be true or false", argument=data)

        element = cls(data.get("name", ""), None, data.get("void", False))
        if data.get("minimize"):
            element.minimize()
        element.set_attributes(data.get("attributes") or {})
        element.write(data.get("content"))

        children = data.get("children") or []
        if not isinstance(children, list):
            raise InvalidArgumentError("children must be a list", argument=children)
        for child_data in children:
            if isinstance(child_data, str):
                element.write(child_data)
            else:
                element.attach(cls.from_dict(child_data))
        return element
