"""Observability helpers – logging setup and secret redaction."""

from homely_bridge.obs.redaction import redact_headers, redact_value
from homely_bridge.obs.setup import init_logging, resolve_log_level

__all__ = [
    "init_logging",
    "redact_headers",
    "redact_value",
    "resolve_log_level",
]
