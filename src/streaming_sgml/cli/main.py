"""Main CLI entry point for the sgml-render command-line tool.

Renders JSON document descriptions to SGML markup, either in one pass or
through the streaming flush protocol, and checks descriptions for errors.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import IO, Any, Dict, List, Optional

from streaming_sgml import __version__
from streaming_sgml.shared.config import ConfigValidationError, RenderConfig
from streaming_sgml.shared.errors import InvalidArgumentError, SinkWriteError
from streaming_sgml.shared.logging import configure_logging, get_logger
from streaming_sgml.tree.element import Element

EXIT_OK = 0
EXIT_INVALID_DOCUMENT = 1
EXIT_USAGE = 2
EXIT_OUTPUT_FAILURE = 3


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self):
        self.render_config = RenderConfig.default()
        self.pretty = False
        self.stream = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        The file may hold a ``render`` object with RenderConfig fields and the
        ``pretty`` and ``stream`` flags.

        Raises:
            ConfigValidationError: If the file cannot be read or is invalid
        """
        config = cls()
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigValidationError(f"Could not load config file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Config file must contain a JSON object")

        if "render" in data:
            config.render_config = RenderConfig.from_dict(data["render"])
        config.pretty = bool(data.get("pretty", config.pretty))
        config.stream = bool(data.get("stream", config.stream))
        return config


class DocumentProcessor:
    """Core rendering logic for CLI operations."""

    def __init__(self, config: CLIConfig):
        self.config = config
        self.logger = get_logger(__name__, None, "cli_processor")

    def load_document(self, source: str) -> Element:
        """Build an element tree from a JSON file path or ``-`` for stdin.

        Raises:
            InvalidArgumentError: If the JSON is malformed or does not describe a tree
        """
        if source == "-":
            text = sys.stdin.read()
        else:
            text = Path(source).read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidArgumentError(f"Invalid JSON in {source}: {e}") from e
        return Element.from_dict(data)

    def render_document(self, root: Element, handle: Optional[IO[Any]] = None) -> None:
        """Write the whole document in a single flush."""
        root.flush(
            minimize=not self.config.pretty,
            handle=handle,
            config=self.config.render_config,
        )

    def stream_document(self, root: Element, handle: Optional[IO[Any]] = None) -> int:
        """Write the document child by child through the block/flush protocol.

        The root keeps its children; the stream is built from copies.

        Returns:
            Number of flushes performed
        """
        minimize = not self.config.pretty
        render_config = self.config.render_config
        children = root.elements
        if not children:
            root.flush(minimize=minimize, handle=handle, config=render_config)
            return 1

        shell_data = root.to_dict()
        shell_data.pop("children")
        shell = Element.from_dict(shell_data).block()

        flushes = 0
        for child in children:
            shell.attach(Element.from_dict(child.to_dict()))
            shell.flush(minimize=minimize, handle=handle, config=render_config)
            flushes += 1
        shell.unblock().flush(minimize=minimize, handle=handle, config=render_config)
        flushes += 1

        self.logger.bind(element=root.name).debug(
            "Streamed document", extra={"flushes": flushes}
        )
        return flushes

    def check_document(self, source: str) -> Dict[str, Any]:
        """Build a document and report on it without writing output."""
        log = self.logger.bind(file=source)
        try:
            root = self.load_document(source)
        except (InvalidArgumentError, OSError) as e:
            log.warning("Invalid document", extra={"error": str(e)})
            return {"file": source, "success": False, "error": str(e)}

        markup = root.render(minimize=not self.config.pretty, config=self.config.render_config)
        return {
            "file": source,
            "success": True,
            "elements": sum(1 for node in root.iter_tree() if node.has_name),
            "characters": len(markup),
        }


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="sgml-render",
        description="Render JSON document descriptions to SGML markup"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Render command
    render_parser = subparsers.add_parser("render", help="Render a document to markup")
    render_parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="JSON document description (default: stdin)"
    )
    render_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    render_parser.add_argument(
        "--pretty", "-p",
        action="store_true",
        help="Indent output instead of minimizing it"
    )
    render_parser.add_argument(
        "--stream", "-s",
        action="store_true",
        help="Flush the document incrementally, one child at a time"
    )
    render_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )

    # Check command
    check_parser = subparsers.add_parser("check", help="Check document descriptions")
    check_parser.add_argument(
        "inputs",
        nargs="+",
        help="JSON document descriptions to check"
    )
    check_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format check results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    if not results:
        return "No results to display."

    successful = sum(1 for r in results if r.get("success", False))
    lines = [f"Checked {len(results)} documents, {successful} valid", "-" * 50]
    for result in results:
        if result.get("success", False):
            lines.append(
                f"OK   {result['file']}: {result['elements']} elements, "
                f"{result['characters']} characters"
            )
        else:
            lines.append(f"FAIL {result['file']}: {result.get('error', '')}")
    return "\n".join(lines)


def cmd_render(args: argparse.Namespace) -> int:
    """Handle render command."""
    try:
        config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
    except ConfigValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    if args.pretty:
        config.pretty = True
    if args.stream:
        config.stream = True

    processor = DocumentProcessor(config)
    try:
        root = processor.load_document(args.input)
    except (InvalidArgumentError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID_DOCUMENT

    emit = processor.stream_document if config.stream else processor.render_document
    try:
        if args.output:
            with args.output.open("wb") as handle:
                emit(root, handle)
        else:
            emit(root)
    except (SinkWriteError, OSError) as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return EXIT_OUTPUT_FAILURE

    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    """Handle check command."""
    processor = DocumentProcessor(CLIConfig())
    results = [processor.check_document(source) for source in args.inputs]
    print(format_results(results, args.format))

    valid_count = sum(1 for r in results if r.get("success", False))
    return EXIT_OK if valid_count == len(results) else EXIT_INVALID_DOCUMENT


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    configure_logging(verbose=args.verbose, quiet=args.quiet)

    if args.command == "render":
        return cmd_render(args)
    if args.command == "check":
        return cmd_check(args)

    print(f"Unknown command: {args.command}", file=sys.stderr)
    return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
