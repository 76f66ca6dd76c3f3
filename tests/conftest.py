"""Common test fixtures and helpers."""

from __future__ import annotations

import json
import os
import subprocess
import sys
import threading
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from homely_bridge.config import Settings

AUTH_URL = "https://api.test/homely/oauth/token"
LOCATIONS_URL = "https://api.test/homely/locations"
HOME_URL = "https://api.test/homely/home"
REALTIME_URL = "https://rt.test"


def run_cli(*args: str, env_override: dict[str, str] | None = None) -> subprocess.CompletedProcess:
    """Run the CLI via ``python -m homely_bridge``."""
    env = os.environ.copy()
    if env_override:
        env.update(env_override)
    return subprocess.run(
        [sys.executable, "-m", "homely_bridge", *args],
        capture_output=True,
        text=True,
        env=env,
        timeout=30,
    )


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        listen_address="127.0.0.1:0",
        homely_username="user@example.com",
        homely_password="hunter2",
        auth_url=AUTH_URL,
        locations_url=LOCATIONS_URL,
        home_url=HOME_URL,
        realtime_url=REALTIME_URL,
        http_timeout=5.0,
    )


def homely_api(
    *,
    token: str = "tok1",
    locations: list[dict[str, Any]] | None = None,
    state: Any = None,
    auth_status: int = 200,
    seen: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """Return a mock transport that answers the three Homely REST endpoints."""
    if locations is None:
        locations = [{"locationId": "loc1", "name": "Home"}]
    if state is None:
        state = {"ok": True}

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        url = str(request.url)
        if request.method == "POST" and url == AUTH_URL:
            if auth_status != 200:
                return httpx.Response(auth_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": token, "expires_in": 60})
        if request.method == "GET" and url == LOCATIONS_URL:
            return httpx.Response(200, json=locations)
        if request.method == "GET" and url.startswith(HOME_URL + "/"):
            return httpx.Response(200, content=json.dumps(state).encode())
        return httpx.Response(404)

    return httpx.MockTransport(handler)


class FakeSocketIOClient:
    """Stand-in for ``socketio.Client`` driven by a script run inside ``connect``."""

    def __init__(self, script: Callable[[FakeSocketIOClient], None] | None = None) -> None:
        self.handlers: dict[str, Callable[..., Any]] = {}
        self.connect_calls: list[tuple[str, dict[str, str], list[str] | None]] = []
        self.disconnected = threading.Event()
        self._script = script

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.handlers[event] = handler

    def trigger(self, event: str, *args: Any) -> None:
        self.handlers[event](*args)

    def connect(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        transports: list[str] | None = None,
    ) -> None:
        self.connect_calls.append((url, dict(headers or {}), transports))
        if self._script is not None:
            self._script(self)

    def disconnect(self) -> None:
        self.disconnected.set()


def fail_with(message: str) -> Callable[[FakeSocketIOClient], None]:
    """Script: connect, then report a connection error carrying *message*."""

    def script(client: FakeSocketIOClient) -> None:
        client.trigger("connect")
        client.trigger("connect_error", message)

    return script
