"""Redaction utilities – strip secrets from log output."""

from __future__ import annotations

import re

# Header names that must never appear in logs.
_SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "set-cookie",
    }
)

# Patterns matched in values.
_SECRET_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?i)bearer\s+[A-Za-z0-9._~+/=-]+"),  # Authorization header value
    re.compile(r"eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]+(?:\.[A-Za-z0-9_-]+)?"),  # JWT-like
    re.compile(r'(?i)"(?:password|access_token|refresh_token)"\s*:\s*"[^"]*"'),  # JSON secrets
]


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of *headers* with sensitive entries masked."""
    out: dict[str, str] = {}
    for k, v in headers.items():
        if k.lower() in _SENSITIVE_HEADERS:
            out[k] = "[REDACTED]"
        else:
            out[k] = v
    return out


def redact_value(value: str) -> str:
    """Replace known secret patterns in *value* with ``[REDACTED]``."""
    result = value
    for pat in _SECRET_PATTERNS:
        result = pat.sub("[REDACTED]", result)
    return result
