"""
Event primitives - promise-aware emitters.

Core Components:
- Emitter: emit() returns a future settling once all listeners are done
- Observable / LinkedObservable: subscribe, next, remove, unlink
- SubscriptionTable: ordered listener registry tolerant to removal mid-emit
- wait_all / with_timeout / compose: future combinators

Quick Start:
    from promisemitter.core.events import create

    numbers = create(emit_timeout=1000)
    incremented = numbers.subscribe(lambda n: n + 1)
    incremented.subscribe(print)

    await numbers.emit(0)
"""

from .emitter import Emitter, LinkedObservable, Observable, create
from .helpers import compose, wait_all, with_timeout
from .subscriptions import Subscription, SubscriptionTable, describe_listener

__all__ = [
    "Emitter",
    "LinkedObservable",
    "Observable",
    "Subscription",
    "SubscriptionTable",
    "compose",
    "create",
    "describe_listener",
    "wait_all",
    "with_timeout",
]
