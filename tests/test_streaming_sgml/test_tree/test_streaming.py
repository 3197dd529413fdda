"""Tests for the streaming flush protocol.

Flushing an element in several blocked steps must write exactly the markup a
single render of the finished element would produce.
"""

import io
import logging
from typing import Callable, List

import pytest

from streaming_sgml.shared.config import RenderConfig
from streaming_sgml.shared.errors import SinkWriteError
from streaming_sgml.tree import Element

Step = Callable[[Element], None]


def _streamed(name: str, phases: List[List[Step]], minimize: bool = True) -> str:
    """Apply phases to one element, flushing blocked between phases."""
    sink = io.StringIO()
    element = Element(name, [{"id": "doc"}]).block()
    for index, phase in enumerate(phases):
        for step in phase:
            step(element)
        if index == len(phases) - 1:
            element.unblock()
        element.flush(minimize=minimize, handle=sink)
    return sink.getvalue()


def _rendered(name: str, phases: List[List[Step]], minimize: bool = True) -> str:
    element = Element(name, [{"id": "doc"}])
    for phase in phases:
        for step in phase:
            step(element)
    return element.render(minimize)


def _child(name: str, text: str) -> Step:
    return lambda element: element.child(name, text)


def _write(text: str) -> Step:
    return lambda element: element.write(text)


def _nested(name: str) -> Step:
    def step(element: Element) -> None:
        section = element.child(name)
        section.child("h2", "title")
        section.child("p", "body")
    return step


class TestFlushState:
    """Test the state changes performed by flush."""

    def test_flush_writes_markup_and_clears_body(self) -> None:
        sink = io.StringIO()
        div = Element("div", ["x", {"id": "a"}])

        div.flush(handle=sink)

        assert sink.getvalue() == '<div id="a">x</div>'
        assert div.start_flushed
        assert div.content == ""
        assert div.elements == ()
        assert div.attributes == {}

    def test_flush_keeps_identity_flags(self) -> None:
        br = Element("br", None, True).minimize().block()

        br.flush(handle=io.StringIO())

        assert br.name == "br"
        assert br.is_void
        assert br.is_minimized
        assert br.is_blocked

    def test_start_tag_is_never_repeated(self) -> None:
        sink = io.StringIO()
        div = Element("div").block()
        div.child("p", "a")
        div.flush(handle=sink)

        div.unblock()
        div.flush(handle=sink)
        div.flush(handle=sink)

        assert sink.getvalue() == "<div><p>a</p></div></div>"
        assert div.start_flushed

    def test_attributes_set_after_flush_are_not_emitted(self) -> None:
        sink = io.StringIO()
        div = Element("div").block()
        div.flush(handle=sink)
        div.attribute("late", "1").unblock().flush(handle=sink)

        assert sink.getvalue() == "<div></div>"

    def test_flush_defaults_to_stdout(self, capsys: pytest.CaptureFixture) -> None:
        Element("p", "hi").flush()

        assert capsys.readouterr().out == "<p>hi</p>"

    def test_pretty_flush_to_stdout(self, capsys: pytest.CaptureFixture) -> None:
        ul = Element("ul")
        ul.child("li", "a")
        ul.flush(minimize=False)

        assert capsys.readouterr().out == "<ul>\n  <li>a</li>\n</ul>\n"

    def test_flush_to_binary_sink_uses_config_encoding(self) -> None:
        sink = io.BytesIO()

        Element("p", "café").flush(handle=sink, config=RenderConfig(encoding="latin-1"))

        assert sink.getvalue() == b"<p>caf\xe9</p>"

    def test_flush_logs_debug_record(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="streaming_sgml.tree.element"):
            Element("p", "x").flush(handle=io.StringIO())

        record = next(r for r in caplog.records if r.getMessage() == "Flushed element markup")
        assert record.element == "p"
        assert record.characters == len("<p>x</p>")
        assert record.component == "element"


class TestFlushFailure:
    """Test that failed flushes leave the element intact."""

    def test_failed_flush_raises_and_preserves_state(self) -> None:
        closed = io.StringIO()
        closed.close()
        div = Element("div", [{"id": "a"}])
        div.child("p", "x")

        with pytest.raises(SinkWriteError):
            div.flush(handle=closed)

        assert not div.start_flushed
        assert div.attributes == {"id": "a"}
        assert len(div.elements) == 1

    def test_flush_can_be_retried_after_failure(self) -> None:
        closed = io.StringIO()
        closed.close()
        sink = io.StringIO()
        div = Element("div", "x")

        with pytest.raises(SinkWriteError):
            div.flush(handle=closed)
        div.flush(handle=sink)

        assert sink.getvalue() == "<div>x</div>"

    def test_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        closed = io.StringIO()
        closed.close()

        with caplog.at_level(logging.ERROR, logger="streaming_sgml.tree.element"):
            with pytest.raises(SinkWriteError):
                Element("p", "x").flush(handle=closed)

        assert any(r.getMessage() == "Failed to flush element markup" for r in caplog.records)


class TestStreamingEquivalence:
    """Test that streamed output equals a single render."""

    PHASES = {
        "children_then_children": [[_child("p", "a")], [_child("p", "b"), _child("p", "c")]],
        "text_then_text": [[_write("Hello, ")], [_write("world")]],
        "text_then_child": [[_write("intro")], [_child("b", "bold")]],
        "child_then_text": [[_child("b", "bold")], [_write("tail")]],
        "nested_sections": [[_nested("section")], [_nested("aside")]],
        "empty_first_phase": [[], [_child("p", "late")]],
        "three_phases": [[_child("li", "1")], [_child("li", "2")], [_child("li", "3")]],
    }

    @pytest.mark.parametrize("case", sorted(PHASES))
    def test_minimized_streaming_matches_render(self, case: str) -> None:
        phases = self.PHASES[case]

        assert _streamed("div", phases) == _rendered("div", phases)

    @pytest.mark.parametrize(
        "case",
        [
            "children_then_children",
            "empty_first_phase",
            "nested_sections",
            "text_then_text",
            "three_phases",
        ],
    )
    def test_pretty_streaming_matches_render(self, case: str) -> None:
        phases = self.PHASES[case]

        assert _streamed("div", phases, minimize=False) == _rendered("div", phases, minimize=False)

    def test_document_example(self) -> None:
        sink = io.StringIO()
        page = Element("body").block()
        page.child("h1", "Report")
        page.flush(handle=sink)
        first = sink.getvalue()
        page.child("p", "Done.")
        page.unblock().flush(handle=sink)

        assert first == "<body><h1>Report</h1>"
        assert sink.getvalue() == "<body><h1>Report</h1><p>Done.</p></body>"

    def test_pretty_streaming_output(self) -> None:
        sink = io.StringIO()
        ul = Element("ul").block()
        ul.child("li", "a")
        ul.flush(minimize=False, handle=sink)
        ul.child("li", "b")
        ul.unblock().flush(minimize=False, handle=sink)

        assert sink.getvalue() == "<ul>\n  <li>a</li>\n  <li>b</li>\n</ul>\n"

    def test_pretty_flush_of_bare_start_tag_defers_line_break(self) -> None:
        sink = io.StringIO()
        div = Element("div").block()
        div.flush(minimize=False, handle=sink)
        div.flush(minimize=False, handle=sink)
        assert sink.getvalue() == "<div>"

        div.child("p", "late")
        div.unblock().flush(minimize=False, handle=sink)

        assert sink.getvalue() == "<div>\n  <p>late</p>\n</div>\n"

    def test_deferred_line_break_is_dropped_for_text(self) -> None:
        sink = io.StringIO()
        div = Element("div").block()
        div.flush(minimize=False, handle=sink)

        div.write("x")
        div.unblock().flush(minimize=False, handle=sink)

        assert sink.getvalue() == Element("div", "x").render(False)
