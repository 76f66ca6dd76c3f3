"""homely-bridge command line.

Provides the ``homely-bridge`` console script and ``python -m homely_bridge``
entry point.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any

from pydantic import ValidationError

from homely_bridge.config import Settings
from homely_bridge.errors import ApiError, AuthError, BindError, BridgeError, StreamError
from homely_bridge.obs.redaction import redact_value
from homely_bridge.obs.setup import init_logging
from homely_bridge.supervisor import supervise
from homely_bridge.version import __version__

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_ARGS = 2
EXIT_AUTH = 10
EXIT_API = 11
EXIT_BIND = 12
EXIT_STREAM = 13

_EXIT_CODES: dict[type[BridgeError], int] = {
    AuthError: EXIT_AUTH,
    ApiError: EXIT_API,
    BindError: EXIT_BIND,
    StreamError: EXIT_STREAM,
}


def _err(msg: str) -> None:
    print(msg, file=sys.stderr)


def exit_code_for(exc: BaseException) -> int:
    """Map a terminal error to the process exit code."""
    for kind, code in _EXIT_CODES.items():
        if isinstance(exc, kind):
            return code
    return EXIT_FAILURE


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="homely-bridge",
        description="Collect events from the Homely API (REST and realtime) and forward them.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-l",
        "--listen-address",
        default=None,
        help="Liveness listen address as host:port (default: localhost:8080)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=None,
        help="Control verbosity of logs. Can be repeated",
    )
    parser.add_argument("--homely-username", default=None, help="Homely username")
    parser.add_argument("--homely-password", default=None, help="Homely password")
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    """Build settings from the environment, letting explicit flags win."""
    overrides: dict[str, Any] = {
        key: value
        for key, value in (
            ("listen_address", args.listen_address),
            ("verbose", args.verbose),
            ("homely_username", args.homely_username),
            ("homely_password", args.homely_password),
        )
        if value is not None
    }
    return Settings(**overrides)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns an integer exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _settings_from_args(args)
    except ValidationError as exc:
        _err(f"invalid configuration: {exc}")
        return EXIT_BAD_ARGS

    if not settings.has_credentials():
        _err(
            "--homely-username and --homely-password are required "
            "(or set HOMELY_BRIDGE_HOMELY_USERNAME / HOMELY_BRIDGE_HOMELY_PASSWORD)"
        )
        return EXIT_BAD_ARGS

    init_logging(settings.verbose)

    try:
        asyncio.run(supervise(settings))
    except KeyboardInterrupt:
        logger.warning("interrupted before signal handlers were installed")
        return EXIT_OK
    except BridgeError as exc:
        _err(f"error: {redact_value(exc.detail)}")
        return exit_code_for(exc)
    except Exception:
        logger.exception("bridge terminated unexpectedly")
        return EXIT_FAILURE

    return EXIT_OK
