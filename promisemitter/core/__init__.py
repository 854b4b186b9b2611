"""Core module for promisemitter - emitters, options and errors."""

from promisemitter.core.config import EmitterConfig
from promisemitter.core.events import Emitter, LinkedObservable, Observable, create
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
    "create",
]
