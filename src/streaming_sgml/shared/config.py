"""Configuration classes for markup rendering.

This module provides the configuration object that controls the whitespace
and encoding used when elements are rendered and flushed to a sink.
"""

import codecs
import json
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Optional

VALID_LINE_TERMINATORS = ("\n", "\r\n", "\r")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class RenderConfig:
    """Whitespace and encoding settings for rendering markup.

    Immutable so a single instance can be shared by every element of a tree.
    """

    indent_unit: str = "  "
    line_terminator: str = "\n"
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        """Validate render configuration."""
        for field_info in fields(self):
            if not isinstance(getattr(self, field_info.name), str):
                raise ValueError(f"{field_info.name} must be a string")
        if self.indent_unit.strip(" \t"):
            raise ValueError("indent_unit must contain only spaces or tabs")
        if self.line_terminator not in VALID_LINE_TERMINATORS:
            raise ValueError(
                f"line_terminator must be one of {list(VALID_LINE_TERMINATORS)!r}"
            )
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {self.encoding}") from e

    def indent(self, level: int) -> str:
        """Return the indent string for a nesting depth."""
        return self.indent_unit * level

    def override(self, **kwargs: Any) -> "RenderConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field values to replace

        Returns:
            New RenderConfig instance with overrides applied

        Raises:
            ConfigValidationError: If an override is unknown or invalid
        """
        known = {f.name for f in fields(self)}
        for key in kwargs:
            if key not in known:
                raise ConfigValidationError(
                    f"Unknown configuration field: {key}",
                    field_name=key,
                    suggestions=sorted(known),
                )
        try:
            return replace(self, **kwargs)
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string.

        Args:
            indent: JSON indentation level

        Returns:
            JSON string representation
        """
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenderConfig":
        """Create configuration from dictionary.

        Args:
            data: Dictionary containing configuration data

        Returns:
            RenderConfig instance created from dictionary

        Raises:
            ConfigValidationError: If the data holds unknown keys or invalid values
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration data must be a JSON object")
        return cls.default().override(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "RenderConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "RenderConfig":
        """Two-space indentation, LF line endings, UTF-8."""
        return cls()

    @classmethod
    def windows(cls) -> "RenderConfig":
        """CRLF line endings for consumers that expect them."""
        return cls(line_terminator="\r\n")

    @classmethod
    def tabs(cls) -> "RenderConfig":
        """One tab per nesting level."""
        return cls(indent_unit="\t")


DEFAULT_CONFIG = RenderConfig()
