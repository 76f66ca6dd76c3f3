"""Tests for the realtime event bridge (Socket.IO transport replaced by a fake)."""

from __future__ import annotations

import asyncio
import threading

import pytest

from homely_bridge.api.schemas import AuthToken, Location
from homely_bridge.errors import StreamError
from homely_bridge.realtime.bridge import Event, EventBridge, realtime_url, to_event
from homely_bridge.realtime.failure import FailureSignal
from tests.conftest import REALTIME_URL, FakeSocketIOClient, fail_with

TOKEN = AuthToken(access_token="tok1")
LOCATION = Location(location_id="loc1", name="Home")


def _bridge(settings, client: FakeSocketIOClient) -> EventBridge:
    return EventBridge(settings, client_factory=lambda: client)


# ---------------------------------------------------------------------------
# Payload classification
# ---------------------------------------------------------------------------


class TestToEvent:
    def test_text(self):
        event = to_event("event", "hello")
        assert event == Event(name="event", payload="hello")
        assert not event.is_binary

    def test_binary(self):
        event = to_event("event", bytearray(b"\x00\x01"))
        assert event.payload == b"\x00\x01"
        assert event.is_binary

    def test_structured_is_serialised_as_text(self):
        event = to_event("event", {"type": "device-state-changed", "data": {"id": "d1"}})
        assert not event.is_binary
        assert event.payload == '{"type": "device-state-changed", "data": {"id": "d1"}}'


def test_realtime_url_scopes_location():
    assert realtime_url("https://rt.test/", LOCATION) == "https://rt.test?locationId=loc1"


# ---------------------------------------------------------------------------
# stream_events
# ---------------------------------------------------------------------------


class TestStreamEvents:
    async def test_connects_with_bearer_header_and_location(self, settings):
        client = FakeSocketIOClient(fail_with("boom"))
        with pytest.raises(StreamError):
            await _bridge(settings, client).stream_events(TOKEN, LOCATION)

        url, headers, transports = client.connect_calls[0]
        assert url == f"{REALTIME_URL}?locationId=loc1"
        assert headers == {"Authorization": "Bearer tok1"}
        assert transports == ["websocket"]
        assert len(client.connect_calls) == 1

    async def test_failure_callback_once_reports_stream_error_once(self, settings):
        client = FakeSocketIOClient(fail_with("boom"))
        failures: list[BaseException] = []

        with pytest.raises(StreamError, match="^boom$"):
            await _bridge(settings, client).stream_events(
                TOKEN, LOCATION, on_failure=failures.append
            )

        assert [str(f) for f in failures] == ["boom"]
        assert client.disconnected.is_set()

    async def test_repeated_failures_are_idempotent(self, settings):
        def script(client: FakeSocketIOClient) -> None:
            client.trigger("connect_error", "first")
            client.trigger("connect_error", "second")
            client.trigger("disconnect")

        failures: list[BaseException] = []
        with pytest.raises(StreamError, match="^first$"):
            await _bridge(settings, FakeSocketIOClient(script)).stream_events(
                TOKEN, LOCATION, on_failure=failures.append
            )
        assert len(failures) == 1

    async def test_disconnect_is_terminal(self, settings):
        def script(client: FakeSocketIOClient) -> None:
            client.trigger("connect")
            client.trigger("disconnect")

        with pytest.raises(StreamError, match="disconnected"):
            await _bridge(settings, FakeSocketIOClient(script)).stream_events(TOKEN, LOCATION)

    async def test_connect_error_message_from_dict(self, settings):
        def script(client: FakeSocketIOClient) -> None:
            client.trigger("connect_error", {"message": "Unauthorized"})

        with pytest.raises(StreamError, match="^Unauthorized$"):
            await _bridge(settings, FakeSocketIOClient(script)).stream_events(TOKEN, LOCATION)

    async def test_connect_raising_becomes_stream_error(self, settings):
        class RefusingClient(FakeSocketIOClient):
            def connect(self, url, headers=None, transports=None):
                raise ConnectionError("Unexpected response from server")

        with pytest.raises(StreamError, match="Unexpected response") as excinfo:
            await _bridge(settings, RefusingClient()).stream_events(TOKEN, LOCATION)
        assert isinstance(excinfo.value.__cause__, ConnectionError)

    async def test_events_forwarded_to_sink(self, settings):
        def script(client: FakeSocketIOClient) -> None:
            client.trigger("connect")
            client.trigger("event", {"type": "alarm-state-changed"})
            client.trigger("event", "plain text")
            client.trigger("event", b"\xff\xfe")
            client.trigger("disconnect")

        received: list[Event] = []
        with pytest.raises(StreamError):
            await _bridge(settings, FakeSocketIOClient(script)).stream_events(
                TOKEN, LOCATION, on_event=received.append
            )

        assert [e.is_binary for e in received] == [False, False, True]
        assert received[0].payload == '{"type": "alarm-state-changed"}'
        assert received[1].payload == "plain text"
        assert received[2].payload == b"\xff\xfe"

    async def test_sink_failure_does_not_stop_stream(self, settings):
        def script(client: FakeSocketIOClient) -> None:
            client.trigger("event", "one")
            client.trigger("event", "two")
            client.trigger("connect_error", "boom")

        received: list[Event] = []

        def sink(event: Event) -> None:
            received.append(event)
            if event.payload == "one":
                raise RuntimeError("downstream unavailable")

        with pytest.raises(StreamError, match="boom"):
            await _bridge(settings, FakeSocketIOClient(script)).stream_events(
                TOKEN, LOCATION, on_event=sink
            )
        assert [e.payload for e in received] == ["one", "two"]

    async def test_events_from_transport_thread(self, settings):
        def script(client: FakeSocketIOClient) -> None:
            def deliver() -> None:
                for i in range(5):
                    client.trigger("event", f"msg-{i}")
                client.trigger("disconnect")

            threading.Thread(target=deliver).start()

        received: list[Event] = []
        with pytest.raises(StreamError):
            await _bridge(settings, FakeSocketIOClient(script)).stream_events(
                TOKEN, LOCATION, on_event=received.append
            )
        assert [e.payload for e in received] == [f"msg-{i}" for i in range(5)]

    async def test_stays_blocked_without_failure(self, settings):
        client = FakeSocketIOClient(lambda c: c.trigger("connect"))
        bridge = _bridge(settings, client)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(bridge.stream_events(TOKEN, LOCATION), timeout=0.2)

        # Cancellation releases the worker thread, which then closes the client.
        assert await asyncio.to_thread(client.disconnected.wait, 5)

    async def test_does_not_block_event_loop(self, settings):
        client = FakeSocketIOClient(lambda c: c.trigger("connect"))
        task = asyncio.create_task(_bridge(settings, client).stream_events(TOKEN, LOCATION))

        ticks = 0
        for _ in range(5):
            await asyncio.sleep(0.01)
            ticks += 1
        assert ticks == 5
        assert not task.done()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert await asyncio.to_thread(client.disconnected.wait, 5)


class _EmptySignal(FailureSignal):
    def wait(self, timeout: float | None = None) -> BaseException | None:
        return None


def test_worker_without_recorded_failure_still_reports_stream_error():
    client = FakeSocketIOClient()
    error = EventBridge._run(
        client, _EmptySignal(), lambda exc: None, "https://rt.test", {"Authorization": "x"}
    )
    assert isinstance(error, StreamError)
    assert str(error) == "stream ended without a failure"
    assert client.disconnected.is_set()
