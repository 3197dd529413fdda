"""Developer tools module for the streaming SGML generator.

This module provides profiling of render and flush operations.
"""

from .profiling import OperationProfile, PerformanceReport, ProfilingSession, RenderProfiler

__all__ = [
    "OperationProfile",
    "PerformanceReport",
    "ProfilingSession",
    "RenderProfiler",
]
