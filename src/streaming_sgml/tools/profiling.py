"""Performance profiling tools for markup rendering and flushing.

Measures render and flush operations with timing, resident memory and output
size, grouped into sessions that can be summarized and saved as JSON.
"""

import json
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Dict, List, Optional

import psutil

from streaming_sgml.shared.config import RenderConfig
from streaming_sgml.shared.logging import get_logger
from streaming_sgml.tree.element import Element
from streaming_sgml.tree.sink import is_binary_sink


@dataclass
class OperationProfile:
    """Performance metrics for a single render or flush."""

    operation: str
    element_name: str
    start_time: float
    end_time: float
    memory_start: int  # bytes
    memory_end: int  # bytes
    characters: int = 0

    @property
    def duration_ms(self) -> float:
        """Operation duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    @property
    def memory_delta(self) -> int:
        """Memory usage change in bytes."""
        return self.memory_end - self.memory_start

    @property
    def characters_per_second(self) -> float:
        duration_s = self.end_time - self.start_time
        return self.characters / duration_s if duration_s > 0 else 0.0


@dataclass
class ProfilingSession:
    """Container for a group of profiled operations."""

    session_id: str
    start_time: float
    end_time: float = 0.0
    operations: List[OperationProfile] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_duration_ms(self) -> float:
        """Total session duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    @property
    def total_characters(self) -> int:
        return sum(operation.characters for operation in self.operations)

    @property
    def flush_count(self) -> int:
        return sum(1 for operation in self.operations if operation.operation == "flush")


@dataclass
class PerformanceReport:
    """Summary of profiled sessions."""

    sessions: List[ProfilingSession]
    generation_time: float

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    @property
    def average_duration_ms(self) -> float:
        """Average session duration across sessions."""
        if not self.sessions:
            return 0.0
        return sum(s.total_duration_ms for s in self.sessions) / len(self.sessions)

    @property
    def total_characters(self) -> int:
        return sum(s.total_characters for s in self.sessions)


class _CountingSink:
    """Forwards writes to a sink while counting characters or bytes."""

    def __init__(self, handle: Optional[IO[Any]]):
        self.handle = handle
        self.count = 0

    @property
    def mode(self) -> str:
        return "wb" if is_binary_sink(self.handle) else "w"

    def write(self, data: Any) -> int:
        self.count += len(data)
        return self.handle.write(data)


class RenderProfiler:
    """Profiler for render and flush operations on element trees.

    Examples:
        >>> profiler = RenderProfiler()
        >>> session = profiler.start_session("report")
        >>> markup = profiler.profile_render(session, page, minimize=False)
        >>> profiler.end_session(session)
        >>> report = profiler.generate_report()
    """

    def __init__(self, enable_memory_tracking: bool = True):
        """Initialize render profiler.

        Args:
            enable_memory_tracking: Whether to sample resident memory with psutil
        """
        self.enable_memory_tracking = enable_memory_tracking
        self.sessions: List[ProfilingSession] = []
        self.current_session: Optional[ProfilingSession] = None
        self.logger = get_logger(__name__, None, "render_profiler")
        self._process = psutil.Process() if enable_memory_tracking else None

    def _memory(self) -> int:
        if self._process is None:
            return 0
        return self._process.memory_info().rss

    def start_session(self, session_id: str) -> ProfilingSession:
        """Start a new profiling session."""
        session = ProfilingSession(session_id=session_id, start_time=time.time())
        self.current_session = session
        self.logger.info(
            "Started profiling session",
            extra={
                "session_id": session_id,
                "memory_tracking": self.enable_memory_tracking
            }
        )
        return session

    def end_session(self, session: ProfilingSession) -> None:
        """End a profiling session and store results."""
        session.end_time = time.time()
        self.sessions.append(session)

        if self.current_session is session:
            self.current_session = None

        self.logger.info(
            "Ended profiling session",
            extra={
                "session_id": session.session_id,
                "duration_ms": session.total_duration_ms,
                "operation_count": len(session.operations)
            }
        )

    def profile_render(
        self,
        session: ProfilingSession,
        element: Element,
        minimize: bool = True,
        config: Optional[RenderConfig] = None,
    ) -> str:
        """Render an element and record the measurement.

        Returns:
            The rendered markup
        """
        memory_start = self._memory()
        start_time = time.time()
        markup = element.render(minimize=minimize, config=config)
        profile = OperationProfile(
            operation="render",
            element_name=element.name,
            start_time=start_time,
            end_time=time.time(),
            memory_start=memory_start,
            memory_end=self._memory(),
            characters=len(markup),
        )
        self._record(session, profile)
        return markup

    def profile_flush(
        self,
        session: ProfilingSession,
        element: Element,
        handle: Optional[IO[Any]] = None,
        minimize: bool = True,
        config: Optional[RenderConfig] = None,
    ) -> None:
        """Flush an element to a sink and record the measurement.

        Failed flushes propagate their error and are not recorded.
        """
        sink = _CountingSink(handle if handle is not None else sys.stdout)
        memory_start = self._memory()
        start_time = time.time()
        element.flush(minimize=minimize, handle=sink, config=config)
        profile = OperationProfile(
            operation="flush",
            element_name=element.name,
            start_time=start_time,
            end_time=time.time(),
            memory_start=memory_start,
            memory_end=self._memory(),
            characters=sink.count,
        )
        self._record(session, profile)

    def _record(self, session: ProfilingSession, profile: OperationProfile) -> None:
        session.operations.append(profile)
        self.logger.debug(
            "Recorded operation",
            extra={
                "session_id": session.session_id,
                "operation": profile.operation,
                "element": profile.element_name,
                "duration_ms": profile.duration_ms,
                "memory_delta": profile.memory_delta
            }
        )

    def generate_report(self) -> PerformanceReport:
        """Generate a report over all finished sessions."""
        return PerformanceReport(
            sessions=self.sessions.copy(),
            generation_time=time.time()
        )

    def save_report(self, report: PerformanceReport, output_path: Path) -> None:
        """Save performance report to a JSON file."""
        report_data = {
            "generation_time": report.generation_time,
            "summary": {
                "session_count": report.session_count,
                "average_duration_ms": report.average_duration_ms,
                "total_characters": report.total_characters
            },
            "sessions": [
                {
                    "session_id": session.session_id,
                    "total_duration_ms": session.total_duration_ms,
                    "flush_count": session.flush_count,
                    "metadata": session.metadata,
                    "operations": [
                        {
                            "operation": operation.operation,
                            "element": operation.element_name,
                            "duration_ms": operation.duration_ms,
                            "memory_delta": operation.memory_delta,
                            "characters": operation.characters
                        }
                        for operation in session.operations
                    ]
                }
                for session in report.sessions
            ]
        }

        output_path.write_text(json.dumps(report_data, indent=2))

        self.logger.info(
            "Saved performance report",
            extra={
                "output_path": str(output_path),
                "session_count": report.session_count
            }
        )

    def clear_sessions(self) -> None:
        """Clear all stored profiling sessions."""
        session_count = len(self.sessions)
        self.sessions.clear()
        self.current_session = None

        self.logger.info(
            "Cleared profiling sessions",
            extra={"cleared_count": session_count}
        )
