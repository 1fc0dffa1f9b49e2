"""Scribe exception hierarchy.

Base exceptions for the completion client and editing session with
correlation ID support.

Usage:
    from scribe.exceptions import TransportError

    try:
        async for fragment in client.complete(request):
            ...
    except TransportError as e:
        logger.warning("AI action failed (%s): %s", e.correlation_id, e)
"""

import uuid


class ScribeError(Exception):
    """Base exception for all Scribe errors.

    Carries a correlation_id for tracing a failed action across layers.
    """

    def __init__(self, message: str, *, correlation_id: str | None = None):
        self.correlation_id = correlation_id or str(uuid.uuid4())
        super().__init__(message)


class TransportError(ScribeError):
    """Errors talking to the AI proxy.

    Raised for non-2xx responses, connection failures, timeouts and
    malformed response envelopes. ``body`` holds a short excerpt of the
    error response for diagnostics only.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        correlation_id: str | None = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message, correlation_id=correlation_id)


class SessionBusyError(ScribeError):
    """An AI action was started while another one is still in flight."""

    pass


class ConfigurationError(ScribeError):
    """Errors from application configuration."""

    pass


class CompletionCancelledError(ScribeError):
    """The caller abandoned an in-flight completion."""

    pass
