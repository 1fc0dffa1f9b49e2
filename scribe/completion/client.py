"""Streaming completion client for the AI proxy.

Sends a ``CompletionRequest`` as a JSON POST and exposes the generated
text as an async sequence of fragments. Two transports are supported:

- streaming: the body is read line by line as server-sent events and
  every ``data:`` payload is decoded with ``decode_envelope``
- one-shot: the body is a single JSON object, reduced to one fragment

The client is constructed explicitly (usually once at startup via
``from_settings``) and passed to whoever needs it.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import httpx

from scribe.completion.envelopes import decode_envelope, extract_one_shot_text
from scribe.completion.request import CompletionMode, CompletionRequest
from scribe.exceptions import CompletionCancelledError, ConfigurationError, TransportError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator

    from scribe.settings import Settings

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 120.0
_CONNECT_TIMEOUT = 10.0
_ERROR_BODY_LIMIT = 500

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"

REQUEST_HEADERS = {
    "Content-Type": "application/json",
    # Sent for both transports; only the ``stream`` body flag changes
    # what the proxy returns.
    "Accept": "text/event-stream",
}


def parse_sse_line(line: str) -> list[str] | None:
    """Extract text fragments from one line of an SSE body.

    Lines without a ``data:`` prefix, unparseable payloads and payloads of
    an unknown shape give an empty list.

    Returns:
        The fragments carried by the line, or None for the ``[DONE]``
        sentinel that ends the stream.
    """
    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return []

    payload = line[len(DATA_PREFIX) :].strip()
    if payload == DONE_SENTINEL:
        return None

    try:
        obj = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("Skipping non-JSON SSE payload: %s", payload[:200])
        return []
    if not isinstance(obj, dict):
        return []

    return decode_envelope(obj).fragments()


class StreamingCompletionClient:
    """Client for the AI proxy's completion endpoint.

    Usage::

        async with StreamingCompletionClient.from_settings() as client:
            request = client.build_request(CompletionMode.CONTINUE, "Once upon")
            async for fragment in client.complete(request):
                print(fragment, end="")

    Every call performs a new POST; nothing is cached or retried.
    """

    _ALLOWED_SCHEMES = {"http", "https"}

    def __init__(
        self,
        endpoint: str,
        *,
        model: str = "gpt-4o-mini",
        stream: bool = False,
        timeout: float = _DEFAULT_TIMEOUT,
        connect_timeout: float = _CONNECT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: Proxy URL the completion request is POSTed to.
            model: Default model identifier for built requests.
            stream: Ask the proxy for SSE instead of a single JSON body.
            timeout: Read timeout in seconds.
            connect_timeout: Connect timeout in seconds.
            http_client: Injected ``httpx.AsyncClient``; the client creates
                and owns one when omitted.
        """
        parsed = urlparse(endpoint)
        if parsed.scheme not in self._ALLOWED_SCHEMES or not parsed.netloc:
            msg = f"Invalid proxy URL '{endpoint}'. Only {sorted(self._ALLOWED_SCHEMES)} URLs allowed."
            raise ConfigurationError(msg)

        self.endpoint = endpoint
        self.model = model
        self.stream = stream
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self._http_client = http_client
        self._owns_http_client = http_client is None

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> StreamingCompletionClient:
        """Build a client from application settings."""
        if settings is None:
            from scribe.settings import get_settings

            settings = get_settings()
        return cls(
            settings.proxy_url,
            model=settings.default_model,
            stream=settings.stream_enabled,
            timeout=settings.request_timeout,
            connect_timeout=settings.connect_timeout,
            http_client=http_client,
        )

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or lazily create the shared httpx.AsyncClient."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
            )
        return self._http_client

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> StreamingCompletionClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def build_request(
        self,
        mode: CompletionMode,
        prompt: str,
        *,
        selection: str | None = None,
        system_instruction: str | None = None,
        model: str | None = None,
    ) -> CompletionRequest:
        """Build a request using this client's model and transport defaults."""
        return CompletionRequest(
            mode=mode,
            prompt=prompt,
            selection=selection,
            system_instruction=system_instruction,
            model=model or self.model,
            stream_requested=self.stream,
        )

    async def complete(self, request: CompletionRequest) -> AsyncGenerator[str, None]:
        """Send the request and yield text fragments as they are decoded.

        Args:
            request: The completion to run.

        Yields:
            Text fragments in arrival order. One-shot responses yield
            exactly one (possibly empty) fragment.

        Raises:
            TransportError: On a non-2xx status or any network failure.
                Fragments yielded before the failure stay valid.
        """
        payload = request.to_payload()
        client = self._get_http_client()
        logger.debug(
            "POST %s mode=%s model=%s stream=%s",
            self.endpoint,
            request.mode.value,
            request.model,
            request.stream_requested,
        )

        try:
            if request.stream_requested:
                async with client.stream(
                    "POST", self.endpoint, json=payload, headers=REQUEST_HEADERS
                ) as response:
                    logger.debug("HTTP %s from %s", response.status_code, self.endpoint)
                    if not response.is_success:
                        await response.aread()
                        self._raise_for_status(response)

                    async for line in response.aiter_lines():
                        fragments = parse_sse_line(line)
                        if fragments is None:
                            return
                        for fragment in fragments:
                            yield fragment
            else:
                response = await client.post(self.endpoint, json=payload, headers=REQUEST_HEADERS)
                logger.debug("HTTP %s from %s", response.status_code, self.endpoint)
                self._raise_for_status(response)
                yield extract_one_shot_text(self._parse_json(response))
        except httpx.TimeoutException as e:
            raise TransportError(f"AI proxy timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"AI proxy request failed: {type(e).__name__}: {e}") from e

    def start(self, request: CompletionRequest) -> CompletionHandle:
        """Start a completion in the background and return a cancellable handle.

        Must be called from within a running event loop.
        """
        return CompletionHandle(self.complete(request))

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        body = response.text[:_ERROR_BODY_LIMIT]
        logger.warning("AI proxy returned HTTP %s: %s", response.status_code, body)
        raise TransportError(
            f"AI proxy returned HTTP {response.status_code}",
            status_code=response.status_code,
            body=body,
        )

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            logger.debug("One-shot body is not JSON: %s", response.text[:200])
            return None


class _Failure:
    def __init__(self, error: BaseException) -> None:
        self.error = error


_END = object()
_CANCELLED = object()


class CompletionHandle:
    """An in-flight completion that the caller can consume or abandon.

    A background task drains the fragment generator into a queue so that
    ``cancel()`` can tear down the HTTP request from any point, including
    while the consumer is waiting for the next fragment. Fragments can be
    consumed once; issue a new request to regenerate.

    Use it as an async context manager to make sure the request is torn
    down when the consumer stops early::

        async with client.start(request) as handle:
            async for fragment in handle:
                if enough(fragment):
                    break
    """

    def __init__(self, fragments: AsyncIterator[str]) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._consumed = False
        self.cancelled = False
        self._task = asyncio.create_task(self._pump(fragments))

    async def _pump(self, fragments: AsyncIterator[str]) -> None:
        try:
            async for fragment in fragments:
                self._queue.put_nowait(fragment)
        except Exception as e:
            self._queue.put_nowait(_Failure(e))
        else:
            self._queue.put_nowait(_END)

    @property
    def done(self) -> bool:
        """True once the underlying request has finished, failed or been cancelled."""
        return self._task.done()

    def cancel(self) -> None:
        """Abandon the completion and close its connection.

        A consumer waiting on the handle gets ``CompletionCancelledError``.
        """
        if self.cancelled or self._task.done():
            return
        self.cancelled = True
        self._task.cancel()
        self._queue.put_nowait(_CANCELLED)

    async def aclose(self) -> None:
        """Cancel if still running and wait until the connection is closed."""
        self.cancel()
        await asyncio.wait({self._task})

    async def __aenter__(self) -> CompletionHandle:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def __aiter__(self) -> AsyncGenerator[str, None]:
        if self._consumed:
            raise RuntimeError("Completion fragments can only be consumed once")
        self._consumed = True

        finished = False
        try:
            while True:
                item = await self._queue.get()
                if item is _END:
                    finished = True
                    return
                if item is _CANCELLED:
                    raise CompletionCancelledError("Completion was cancelled")
                if isinstance(item, _Failure):
                    finished = True
                    raise item.error
                yield item
        finally:
            # Consumer stopped early (cancelled, raised, or the iterator was closed)
            if not finished:
                self.cancel()

    async def text(self) -> str:
        """Wait for the whole completion and return the joined fragments."""
        return "".join([fragment async for fragment in self])
