"""Bridge a callback-driven Socket.IO connection into asyncio.

The Homely realtime API is a Socket.IO (protocol v2) endpoint scoped to one
location. The synchronous ``socketio.Client`` delivers events and failures on
its own threads, so the bridge:

* forwards every inbound event to a sink callable on the transport thread,
* records the first failure in a :class:`FailureSignal`,
* runs connect-and-wait on a worker thread via ``asyncio.to_thread`` so the
  event loop keeps serving the liveness check while the stream is alive.

``stream_events`` never returns normally; it raises :class:`StreamError` once
the connection ends for any reason.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, NoReturn
from urllib.parse import urlencode

from homely_bridge.api.client import bearer_headers
from homely_bridge.api.schemas import AuthToken, Location
from homely_bridge.config import Settings
from homely_bridge.errors import StreamError
from homely_bridge.obs.redaction import redact_headers
from homely_bridge.realtime.failure import FailureSignal

logger = logging.getLogger(__name__)

# Homely pushes every device and alarm change on this event name.
DEFAULT_EVENT_NAMES = ("event",)


@dataclass(frozen=True, slots=True)
class Event:
    """One realtime message, textual or binary."""

    name: str
    payload: str | bytes

    @property
    def is_binary(self) -> bool:
        return isinstance(self.payload, bytes)


EventSink = Callable[[Event], None]
FailureCallback = Callable[[BaseException], None]
ClientFactory = Callable[[], Any]


def to_event(name: str, data: Any) -> Event:
    """Classify a transport payload. Structured data is serialised to JSON text."""
    if isinstance(data, bytes | bytearray | memoryview):
        return Event(name=name, payload=bytes(data))
    if isinstance(data, str):
        return Event(name=name, payload=data)
    return Event(name=name, payload=json.dumps(data, default=str))


def logging_sink(event: Event) -> None:
    """Default sink: log the event and drop it."""
    if event.is_binary:
        logger.info("received binary event %r (%d bytes)", event.name, len(event.payload))
    else:
        logger.info("received event %r: %s", event.name, event.payload)


def _default_client_factory() -> Any:
    # Imported lazily: the 4.x client line is pinned for the server's protocol
    # version and is only needed once the pipeline reaches the stream.
    import socketio

    return socketio.Client(reconnection=False)


def realtime_url(base_url: str, location: Location) -> str:
    """Return the connection URL scoped to *location*."""
    return f"{base_url.rstrip('/')}?{urlencode({'locationId': location.location_id})}"


def _describe(args: Sequence[Any], fallback: str) -> str:
    if not args or args[0] is None:
        return fallback
    data = args[0]
    if isinstance(data, dict) and "message" in data:
        return str(data["message"])
    return str(data)


class EventBridge:
    """Owns a single realtime subscription for the lifetime of the pipeline."""

    def __init__(
        self,
        settings: Settings,
        *,
        client_factory: ClientFactory | None = None,
        event_names: Sequence[str] = DEFAULT_EVENT_NAMES,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory or _default_client_factory
        self._event_names = tuple(event_names)

    async def stream_events(
        self,
        token: AuthToken,
        location: Location,
        on_event: EventSink | None = None,
        on_failure: FailureCallback | None = None,
    ) -> NoReturn:
        """Stream events for *location* until the connection fails.

        Raises
        ------
        StreamError
            Always, once the first failure is recorded.
        """
        sink = on_event or logging_sink
        signal = FailureSignal()
        client = self._client_factory()
        fail = self._register(client, signal, sink, on_failure)

        url = realtime_url(self._settings.realtime_url, location)
        headers = bearer_headers(token)
        logger.info("connecting to realtime API for location %s", location.location_id)
        logger.debug("realtime headers: %s", redact_headers(headers))

        try:
            error = await asyncio.to_thread(self._run, client, signal, fail, url, headers)
        except asyncio.CancelledError:
            # Release the worker thread so interpreter shutdown is not blocked on it.
            signal.set(StreamError("stream cancelled"))
            raise

        if isinstance(error, StreamError):
            raise error
        raise StreamError(str(error) or type(error).__name__) from error

    def _register(
        self,
        client: Any,
        signal: FailureSignal,
        sink: EventSink,
        on_failure: FailureCallback | None,
    ) -> FailureCallback:
        def fail(error: BaseException) -> None:
            if not signal.set(error):
                logger.debug("ignoring realtime failure after the first: %s", error)
                return
            logger.error("realtime connection failed: %s", error)
            if on_failure is not None:
                on_failure(error)

        def on_connect(*_args: Any) -> None:
            logger.info("realtime connection established")

        def on_connect_error(*args: Any) -> None:
            fail(StreamError(_describe(args, "connection refused")))

        def on_disconnect(*args: Any) -> None:
            fail(StreamError(_describe(args, "disconnected")))

        client.on("connect", on_connect)
        client.on("connect_error", on_connect_error)
        client.on("disconnect", on_disconnect)

        for name in self._event_names:
            client.on(name, self._make_event_handler(name, sink))
        return fail

    @staticmethod
    def _make_event_handler(name: str, sink: EventSink) -> Callable[..., None]:
        def handler(*args: Any) -> None:
            data = args[0] if len(args) == 1 else list(args)
            try:
                sink(to_event(name, data))
            except Exception:  # noqa: BLE001
                logger.exception("event sink failed for %r", name)

        return handler

    @staticmethod
    def _run(
        client: Any,
        signal: FailureSignal,
        fail: FailureCallback,
        url: str,
        headers: dict[str, str],
    ) -> BaseException:
        """Worker-thread body: connect, then block until the first failure."""
        try:
            client.connect(url, headers=headers, transports=["websocket"])
        except Exception as exc:  # noqa: BLE001
            fail(exc)

        error = signal.wait()
        try:
            client.disconnect()
        except Exception:  # noqa: BLE001
            logger.debug("error while closing realtime client", exc_info=True)
        if error is None:
            return StreamError("stream ended without a failure")
        return error
