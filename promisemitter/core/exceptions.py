"""Custom exceptions for promisemitter."""

UNKNOWN_LISTENER = "<unknown>"


class PromisemitterError(Exception):
    """Base exception for all promisemitter errors."""


class ConfigurationError(PromisemitterError):
    """Raised when emitter options are invalid."""


class ListenerTimeoutError(PromisemitterError, TimeoutError):
    """
    Raised when a listener (or anything it forwarded to) does not settle in time.

    The offending listener is filled in by the nearest emission that observes
    the timeout first; until then it holds UNKNOWN_LISTENER.
    """

    def __init__(
        self,
        message: str = "Timeout waiting for event listener to complete",
        timeout_ms: float | None = None,
    ) -> None:
        super().__init__(message)
        self.timeout_ms = timeout_ms
        self.timed_out_listener: str = UNKNOWN_LISTENER

    def __str__(self) -> str:
        message = super().__str__()
        if self.timed_out_listener == UNKNOWN_LISTENER:
            return message
        return f"{message} (listener: {self.timed_out_listener})"
