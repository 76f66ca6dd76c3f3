"""Run the bridge with a custom event sink.

Run:
    HOMELY_BRIDGE_HOMELY_USERNAME=me@example.com \
    HOMELY_BRIDGE_HOMELY_PASSWORD=... \
    uv run python examples/custom_sink.py

The sink is called on the realtime transport's thread, so it must not block.
Here it only decodes and prints; a message-bus publisher would enqueue instead.
"""

import asyncio
import json

from homely_bridge import Settings
from homely_bridge.obs import init_logging
from homely_bridge.realtime import Event
from homely_bridge.supervisor import supervise


def print_sink(event: Event) -> None:
    """Print device changes, one line each."""
    if event.is_binary:
        print(f"[{event.name}] <{len(event.payload)} bytes>")
        return
    body = json.loads(event.payload)
    print(f"[{event.name}] {body.get('type', '?')}: {json.dumps(body.get('data'))}")


if __name__ == "__main__":
    settings = Settings()
    init_logging(settings.verbose)
    asyncio.run(supervise(settings, sink=print_sink))
