"""Run the bridge as a race between its three long-lived units.

The units are the liveness server, the interrupt listener and the event
pipeline. A healthy process is one where none of them has exited; the first
to finish, cleanly or with an error, decides the outcome and the others are
cancelled.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable
from typing import Any, NoReturn, TypeVar

import httpx

from homely_bridge.api.client import HomelyClient, select_location
from homely_bridge.config import Settings
from homely_bridge.interrupt import wait_for_interrupt
from homely_bridge.realtime.bridge import ClientFactory, EventBridge, EventSink
from homely_bridge.server import serve

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def race(*aws: Awaitable[T]) -> T:
    """Run *aws* concurrently and adopt the outcome of the first to settle.

    The remaining units are cancelled and awaited before the winner's result
    is returned or its exception re-raised. When several settle in the same
    iteration, the one listed first wins.
    """
    if not aws:
        raise ValueError("race() needs at least one awaitable")
    tasks = []
    for aw in aws:
        task = asyncio.ensure_future(aw)
        if asyncio.iscoroutine(aw):
            task.set_name(aw.__qualname__)
        tasks.append(task)
    try:
        done, _pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    winner = next(task for task in tasks if task in done)
    logger.debug("%s exited first", winner.get_name())
    return winner.result()


async def consume_events(
    settings: Settings,
    *,
    sink: EventSink | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    client_factory: ClientFactory | None = None,
) -> NoReturn:
    """Authenticate, pick the first location, then stream its events.

    Never returns: the stream ends only by raising ``StreamError``, and any
    earlier step raises ``AuthError`` or ``ApiError``.
    """
    async with HomelyClient(settings, transport=transport) as client:
        token = await client.authenticate(
            settings.homely_username,
            settings.homely_password.get_secret_value(),
        )
        locations = await client.list_locations(token)
        for loc in locations:
            logger.debug("location %s (%s)", loc.location_id, loc.name)

        location = select_location(locations)
        state = await client.fetch_state(token, location)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("home state for %s: %s", location.location_id, json.dumps(state))

    bridge = EventBridge(settings, client_factory=client_factory)
    await bridge.stream_events(token, location, on_event=sink)


async def supervise(
    settings: Settings,
    *,
    sink: EventSink | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    client_factory: ClientFactory | None = None,
) -> Any:
    """Start the liveness server, interrupt listener and pipeline; first exit wins."""
    return await race(
        serve(settings),
        wait_for_interrupt(),
        consume_events(settings, sink=sink, transport=transport, client_factory=client_factory),
    )
