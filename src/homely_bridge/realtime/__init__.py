"""Realtime event streaming from the Homely Socket.IO endpoint."""

from homely_bridge.realtime.bridge import (
    DEFAULT_EVENT_NAMES,
    Event,
    EventBridge,
    logging_sink,
    realtime_url,
    to_event,
)
from homely_bridge.realtime.failure import FailureSignal

__all__ = [
    "DEFAULT_EVENT_NAMES",
    "Event",
    "EventBridge",
    "FailureSignal",
    "logging_sink",
    "realtime_url",
    "to_event",
]
