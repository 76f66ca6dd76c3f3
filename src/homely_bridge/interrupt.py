"""Operator interrupt listener."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Sequence

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def wait_for_interrupt(signals: Sequence[signal.Signals] = DEFAULT_SIGNALS) -> None:
    """Resolve once when any of *signals* is delivered to the process.

    Handlers are installed on the running loop and removed again before
    returning, so a second Ctrl-C falls back to the default behaviour.
    """
    loop = asyncio.get_running_loop()
    received: asyncio.Future[signal.Signals] = loop.create_future()

    def _on_signal(sig: signal.Signals) -> None:
        if not received.done():
            received.set_result(sig)

    for sig in signals:
        loop.add_signal_handler(sig, _on_signal, sig)
    try:
        sig = await received
    finally:
        for s in signals:
            loop.remove_signal_handler(s)

    logger.warning("termination signal %s received, stopping server...", sig.name)
