"""
Subscription Table - ordered registry of listeners and their child observables.

Entries are keyed by the identity of the child observable created at
subscribe time, never by the listener: subscribing the same function twice
yields two independent entries.

The table may shrink while an emission walks it (a next() listener removes
itself when it matches). Emitters therefore walk it by index and re-check
the current slot after each call instead of holding an iterator.
"""

import asyncio
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .emitter import Observable


def describe_listener(listener: Callable[..., Any]) -> str:
    """Best-effort textual form of a listener, used for timeout attribution."""
    qualname = getattr(listener, "__qualname__", None)
    if qualname is None:
        return repr(listener)
    module = getattr(listener, "__module__", None)
    return f"{module}.{qualname}" if module else qualname


@dataclass(frozen=True, eq=False)
class Subscription:
    """
    One table entry.

    Attributes:
        forward: Calls the listener with a value and emits its result into
            the child emitter; returns the child emission's future
        target: The child observable handed back to the subscriber
        listener: The original listener, kept for diagnostics
    """

    forward: Callable[[Any], asyncio.Future[None]]
    target: "Observable[Any]"
    listener: Callable[[Any], Any]

    @property
    def description(self) -> str:
        return describe_listener(self.listener)


class SubscriptionTable:
    """Ordered, mutable collection of subscriptions."""

    def __init__(self) -> None:
        self._entries: list[Subscription] = []

    def append(self, subscription: Subscription) -> None:
        self._entries.append(subscription)

    def find(self, target: "Observable[Any]") -> int | None:
        """Position of the entry whose child observable is target, if any."""
        for index, entry in enumerate(self._entries):
            if entry.target is target:
                return index
        return None

    def remove(self, target: "Observable[Any]") -> Subscription | None:
        """
        Remove the entry for target.

        Returns:
            The removed subscription, or None when target isn't registered
        """
        index = self.find(target)
        if index is None:
            return None
        return self._entries.pop(index)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> Subscription:
        return self._entries[index]

    def __iter__(self) -> Iterator[Subscription]:
        return iter(list(self._entries))

    def __contains__(self, target: object) -> bool:
        return any(entry.target is target for entry in self._entries)

    def __repr__(self) -> str:
        return f"SubscriptionTable(entries={len(self._entries)})"
