"""Tag and attribute formatting for SGML output."""

from typing import Dict

COMMENT_NAME = "--"


def escape_attribute_value(value: str) -> str:
    """Backslash-escape backslashes and double quotes."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def format_attribute(name: str, value: str) -> str:
    # An empty value is written in boolean form: the bare name.
    if value == "":
        return name
    return f'{name}="{escape_attribute_value(value)}"'


def start_tag(name: str, attributes: Dict[str, str]) -> str:
    """Build an opening tag with attributes in stored order."""
    parts = ["<", name]
    for attribute_name, value in attributes.items():
        parts.append(" ")
        parts.append(format_attribute(attribute_name, value))
    parts.append(">")
    return "".join(parts)


def end_tag(name: str) -> str:
    return f"</{name}>"


def comment(text: str) -> str:
    return f"<!-- {text} -->"
