"""
Emitter - promise-aware publish/subscribe.

emit() returns a future that settles only when every listener, and
everything derived from it through chained subscriptions, has finished
processing the value.

Core Components:
- Emitter: owns a SubscriptionTable, exposes emit()
- Observable: subscribe()/next()/remove() over the same table
- LinkedObservable: Observable returned by subscribe(), adds unlink()

Fan-out:
    emitter.emit(v)
        -> listener(v) for each subscription, in registration order
        -> child.emit(listener result), recursively
        -> wait_all(every forwarded emission)

Caveat: a listener that waits on an emission which is itself waiting on
that listener (e.g. re-emitting into its own root and awaiting the root's
outstanding emission) never settles. Only emit_timeout ends such a cycle.

Caveat: the fan-out walk tolerates a listener removing itself or a later
entry. A listener that removes an earlier entry and itself in the same call
shifts the table by two, so the entry right after it is skipped for that
emission. For [a, b, c, d] where b removes a and b, the walk calls a, b, d.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
import inspect
import logging
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from promisemitter.core.config import EmitterConfig
from promisemitter.core.exceptions import UNKNOWN_LISTENER, ConfigurationError, ListenerTimeoutError
from promisemitter.toolkit.tracing import trace_marker

from .helpers import wait_all, with_timeout
from .subscriptions import Subscription, SubscriptionTable, describe_listener

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


def _track(config: EmitterConfig, stage: str, **extra: Any) -> None:
    if config.enable_tracing:
        trace_marker(f"emitter.{stage}", **extra)


async def _relay(result: Any, child: "Emitter[Any]") -> None:
    if inspect.isawaitable(result):
        result = await result
    await child.emit(result)


class Observable(Generic[T]):
    """
    Subscription side of an emitter.

    Shares its emitter's SubscriptionTable. Calling the observable directly
    is shorthand for subscribe().

    Usage:
        numbers = create()
        doubled = numbers.subscribe(lambda n: n * 2)
        doubled.subscribe(print)
        await numbers.emit(21)
    """

    def __init__(self, table: SubscriptionTable, config: EmitterConfig):
        self._table = table
        self._config = config

    def subscribe(self, listener: Callable[[T], U | Awaitable[U]]) -> "LinkedObservable[U]":
        """
        Add a sync or async listener.

        Emissions wait for the listener's result, and for everything
        subscribed to the returned observable, before settling.

        Args:
            listener: Called with each emitted value

        Returns:
            Observable of the listener's results
        """
        child: Emitter[U] = Emitter(self._config.without_timeout(), parent=self)

        def forward(value: T) -> asyncio.Future[None]:
            try:
                result = listener(value)
            except Exception as e:
                failed: asyncio.Future[None] = asyncio.get_running_loop().create_future()
                failed.set_exception(e)
                return failed
            return asyncio.ensure_future(_relay(result, child))

        subscription = Subscription(forward=forward, target=child.observable, listener=listener)
        self._table.append(subscription)

        logger.debug(f"Subscribed {subscription.description} ({len(self._table)} subscribers)")
        _track(self._config, "subscribed", listener=subscription.description)

        return child.observable

    __call__ = subscribe

    def next(self, predicate: Callable[[T], bool] | None = None) -> asyncio.Future[T]:
        """
        Wait for the next value matching predicate.

        No timeout is applied: if nothing matches, the future stays pending.
        Cancelling the future drops the temporary subscription.

        Args:
            predicate: Filter for values; None accepts the first value
        """
        found: asyncio.Future[T] = asyncio.get_running_loop().create_future()

        def _match(value: T) -> None:
            if found.done():
                return
            if predicate is None or predicate(value):
                self.remove(waiter)
                found.set_result(value)
                logger.debug("next() matched, temporary subscription removed")

        waiter = self.subscribe(_match)
        found.add_done_callback(lambda _: self.remove(waiter))
        return found

    def remove(self, child: "Observable[Any]") -> None:
        """Remove the subscription that produced child. No-op if absent."""
        removed = self._table.remove(child)
        if removed is None:
            return

        logger.debug(f"Removed {removed.description} ({len(self._table)} subscribers)")
        _track(self._config, "removed", listener=removed.description)

    @property
    def subscriber_count(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(subscribers={len(self._table)})"


class LinkedObservable(Observable[T]):
    """An Observable obtained from subscribe(), which can detach itself."""

    def __init__(self, table: SubscriptionTable, config: EmitterConfig, parent: Observable[Any]):
        super().__init__(table, config)
        self._parent = parent

    def unlink(self) -> None:
        """Stop listening. Equivalent to parent.remove(self)."""
        self._parent.remove(self)


class Emitter(Generic[T]):
    """
    Value-producing side: emit() fans out to every subscription.

    Attributes:
        config: Resolved options
        observable: Observable over this emitter's table
        subscribe: Same object as observable
    """

    def __init__(self, config: EmitterConfig, parent: Observable[Any] | None = None):
        self.config = config
        self._table = SubscriptionTable()

        if parent is None:
            self.observable: Observable[T] = Observable(self._table, config)
        else:
            self.observable = LinkedObservable(self._table, config, parent)
        self.subscribe = self.observable

    def emit(self, value: T) -> asyncio.Future[None]:
        """
        Notify all subscribers.

        Listeners are called before this method returns. The returned future
        resolves when all of them and their dependents finish, or fails with
        the first error (ListenerTimeoutError included) raised anywhere below.

        Must be called with a running event loop.
        """
        _track(self.config, "emit.started", subscriber_count=len(self._table))

        pending: list[asyncio.Future[Any]] = []
        k = 0
        while k < len(self._table):
            current = self._table[k]
            forwarded = current.forward(value)

            if self.config.emit_timeout is not None:
                raced = with_timeout(forwarded, self.config.emit_timeout)
                forwarded = asyncio.ensure_future(self._attribute(raced, current))

            pending.append(forwarded)

            # current may have removed itself; its successor now sits at k
            if k < len(self._table) and self._table[k] is current:
                k += 1

        return wait_all(pending)

    async def _attribute(self, raced: asyncio.Future[Any], subscription: Subscription) -> Any:
        try:
            return await raced
        except ListenerTimeoutError as e:
            if e.timed_out_listener == UNKNOWN_LISTENER:
                e.timed_out_listener = subscription.description
                logger.warning(
                    f"Listener {subscription.description} did not complete "
                    f"within {self.config.emit_timeout}ms"
                )
                _track(self.config, "listener.timed_out", listener=subscription.description)
            raise

    def __repr__(self) -> str:
        return f"Emitter(subscribers={len(self._table)}, emit_timeout={self.config.emit_timeout})"


def create(opts: EmitterConfig | Mapping[str, Any] | None = None, **overrides: Any) -> Emitter[Any]:
    """
    Create a new emitter.

    Args:
        opts: EmitterConfig, or a mapping of option names (emit_timeout,
            enable_tracing). Unset options come from PROMISEMITTER_* env vars.
        **overrides: Options taking precedence over opts

    Raises:
        ConfigurationError: If the options don't validate

    Example:
        >>> post_created = create(emit_timeout=5000)
        >>> categorized = post_created.subscribe(categorize)
    """
    if isinstance(opts, EmitterConfig):
        if not overrides:
            return Emitter(opts)
        data = opts.model_dump()
    else:
        data = dict(opts or {})
    data.update(overrides)

    try:
        config = EmitterConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid emitter options: {e}") from e

    return Emitter(config)


__all__ = [
    "Emitter",
    "LinkedObservable",
    "Observable",
    "create",
]
