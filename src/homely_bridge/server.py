"""Run the liveness app under uvicorn on a pre-bound socket.

Binding happens up front so an unusable listen address surfaces as
:class:`BindError` instead of uvicorn's own ``sys.exit``.
"""

from __future__ import annotations

import contextlib
import logging
import socket
from collections.abc import Iterator

import uvicorn

from homely_bridge.app import create_app
from homely_bridge.config import Settings
from homely_bridge.errors import BindError

logger = logging.getLogger(__name__)


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (``[v6]:port`` for IPv6) into its parts."""
    host, sep, port_text = address.strip().rpartition(":")
    if not sep or not host or not port_text:
        raise BindError(f"invalid listen address {address!r}: expected host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_text)
    except ValueError:
        raise BindError(f"invalid port in listen address {address!r}") from None
    if not 0 <= port <= 65535:
        raise BindError(f"port out of range in listen address {address!r}")
    return host, port


def pick_address(infos: list[tuple]) -> tuple:
    """Prefer an IPv4 result so ``localhost`` also answers checks sent to 127.0.0.1."""
    for info in infos:
        if info[0] == socket.AF_INET:
            return info
    return infos[0]


def bind_socket(address: str) -> socket.socket:
    """Create a listening TCP socket for *address*.

    Raises
    ------
    BindError
        When the address is malformed, cannot be resolved, or is in use.
    """
    host, port = parse_listen_address(address)
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
        family, _type, _proto, _canon, sockaddr = pick_address(infos)
        sock = socket.create_server(sockaddr, family=family)
    except OSError as exc:
        raise BindError(f"cannot bind {address}: {exc}") from exc
    sock.setblocking(False)
    return sock


class _Server(uvicorn.Server):
    """uvicorn server that leaves signal handling to the interrupt listener."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


async def serve(settings: Settings) -> None:
    """Serve the liveness app until the server stops."""
    sock = bind_socket(settings.listen_address)
    config = uvicorn.Config(
        create_app(),
        log_config=None,
        access_log=False,
        lifespan="off",
    )
    server = _Server(config)
    logger.info("liveness server listening on %s", settings.listen_address)
    try:
        await server.serve(sockets=[sock])
    finally:
        sock.close()
