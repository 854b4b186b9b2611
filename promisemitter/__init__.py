"""
promisemitter - observer / event emitter with promise support.

Notifying subscribers returns a future you can await: it settles once every
listener, and every listener chained behind it, has finished with the value.

Main Features:
- Sync and async listeners, handled uniformly
- Derived observables: each subscribe() returns a new observable of results
- next(predicate) to await a matching event without leaking a subscription
- Per-listener emit timeout with attribution of the slow listener

Quick Start:
    >>> from promisemitter import create
    >>> post_created = create(emit_timeout=5000)
    >>> categorized = post_created.subscribe(categorize)
    >>> indexed = post_created.subscribe(index)
    >>> await post_created.emit(post)  # categorize and index are both done here

Architecture:
    emit() → SubscriptionTable → listener → child Emitter → ... → wait_all
"""

__version__ = "0.1.0"

from promisemitter.core.config import EmitterConfig
from promisemitter.core.events import (
    Emitter,
    LinkedObservable,
    Observable,
    compose,
    create,
    wait_all,
    with_timeout,
)
from promisemitter.core.exceptions import (
    UNKNOWN_LISTENER,
    ConfigurationError,
    ListenerTimeoutError,
    PromisemitterError,
)

__all__ = [
    "UNKNOWN_LISTENER",
    "ConfigurationError",
    "Emitter",
    "EmitterConfig",
    "LinkedObservable",
    "ListenerTimeoutError",
    "Observable",
    "PromisemitterError",
    "__version__",
    "compose",
    "create",
    "wait_all",
    "with_timeout",
]
