"""
Trace markers for emitter activity.

Emitters created with enable_tracing=True record a marker for each
subscribe, remove, emission start and attributed timeout, so tests can
assert on the fan-out without wiring extra listeners into the graph.
Collection is off by default; TraceContext switches it on for a block.

Usage:
    >>> with TraceContext() as tc:
    ...     emitter = create(enable_tracing=True)
    ...     emitter.subscribe(print)
    ...
    >>> assert tc.count_markers("emitter.subscribed") == 1
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceMarker:
    """A recorded marker: its name and the keyword data passed with it."""

    name: str
    data: dict[str, Any] = field(default_factory=dict)


class TraceController:
    """Process-wide marker collector, reached through get_instance()."""

    _instance: TraceController | None = None

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self._markers: list[TraceMarker] = []

    @classmethod
    def get_instance(cls) -> TraceController:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton (for tests)."""
        cls._instance = None

    def mark(self, name: str, **data: Any) -> TraceMarker | None:
        """
        Record a marker.

        Returns:
            The TraceMarker if collection is enabled, None otherwise
        """
        if not self.enabled:
            return None

        marker = TraceMarker(name=name, data=data)
        self._markers.append(marker)
        logger.debug(f"TRACE[{name}] {data if data else ''}")
        return marker

    def get_markers(self, pattern: str | None = None) -> list[TraceMarker]:
        """
        Get markers in recording order.

        Args:
            pattern: Exact name, or a prefix ending in "*" (e.g. "emitter.*")
        """
        if pattern is None:
            return list(self._markers)
        if pattern.endswith("*"):
            prefix = pattern[:-1]
            return [marker for marker in self._markers if marker.name.startswith(prefix)]
        return [marker for marker in self._markers if marker.name == pattern]

    def count_markers(self, pattern: str | None = None) -> int:
        return len(self.get_markers(pattern))

    def clear(self) -> None:
        self._markers.clear()

    def __repr__(self) -> str:
        return f"TraceController(enabled={self.enabled}, markers={len(self._markers)})"


def trace_marker(name: str, **data: Any) -> TraceMarker | None:
    """Record a marker on the global controller."""
    return TraceController.get_instance().mark(name, **data)


class TraceContext:
    """Enables and clears marker collection for the duration of a block."""

    def __init__(self) -> None:
        self.controller = TraceController.get_instance()
        self._was_enabled = self.controller.enabled

    def __enter__(self) -> TraceController:
        self.controller.enabled = True
        self.controller.clear()
        return self.controller

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.controller.enabled = self._was_enabled
        return False
