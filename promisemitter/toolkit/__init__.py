"""Toolkit - tracing helpers."""

from promisemitter.toolkit.tracing import (
    TraceContext,
    TraceController,
    TraceMarker,
    trace_marker,
)

__all__ = [
    "TraceContext",
    "TraceController",
    "TraceMarker",
    "trace_marker",
]
