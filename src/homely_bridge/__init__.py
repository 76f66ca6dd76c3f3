"""homely-bridge – stream Homely home-automation events with a liveness endpoint."""

from homely_bridge.app import create_app
from homely_bridge.config import Settings
from homely_bridge.errors import ApiError, AuthError, BindError, BridgeError, StreamError
from homely_bridge.version import __version__

__all__ = [
    "ApiError",
    "AuthError",
    "BindError",
    "BridgeError",
    "Settings",
    "StreamError",
    "__version__",
    "create_app",
]
