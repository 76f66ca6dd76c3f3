"""Homely REST API client and schemas."""

from homely_bridge.api.client import HomelyClient, bearer_headers, select_location
from homely_bridge.api.schemas import AuthToken, Location

__all__ = ["AuthToken", "HomelyClient", "Location", "bearer_headers", "select_location"]
