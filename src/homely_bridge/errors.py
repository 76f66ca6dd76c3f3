"""Error kinds surfaced by the bridge.

Every error here is terminal for the process: nothing is retried, and the
supervisor turns whichever one wins the race into the process exit status.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for bridge failures. ``detail`` is safe to log."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class AuthError(BridgeError):
    """Credential exchange was rejected or returned a malformed body."""


class ApiError(BridgeError):
    """Listing locations or fetching state failed in transport or decoding."""


class BindError(BridgeError):
    """The liveness server could not bind its listen address."""


class StreamError(BridgeError):
    """The realtime connection ended. Raised for every stream termination."""
