"""Async REST client for the Homely cloud API.

Covers the three short-lived calls the pipeline makes before streaming:
credential exchange, location listing and a point-in-time state fetch.
None of them retry; a failure is terminal for the pipeline.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from homely_bridge.api.schemas import AuthToken, Location
from homely_bridge.config import Settings
from homely_bridge.errors import ApiError, AuthError

logger = logging.getLogger(__name__)

_LOCATIONS = TypeAdapter(list[Location])


def bearer_headers(token: AuthToken) -> dict[str, str]:
    """Return the ``Authorization`` header for *token*."""
    return {"Authorization": f"Bearer {token.access_token}"}


def select_location(locations: list[Location]) -> Location:
    """Pick the location the bridge operates on: the first one the server listed."""
    if not locations:
        raise ApiError("no locations registered for this account")
    return locations[0]


class HomelyClient:
    """Thin wrapper around ``httpx.AsyncClient`` bound to the configured endpoints.

    Use as an async context manager so the connection pool is closed::

        async with HomelyClient(settings) as client:
            token = await client.authenticate(username, password)
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._http = httpx.AsyncClient(timeout=settings.http_timeout, transport=transport)

    async def __aenter__(self) -> HomelyClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def authenticate(self, username: str, password: str) -> AuthToken:
        """Exchange *username* / *password* for a bearer token.

        Raises
        ------
        AuthError
            On transport failure, a non-2xx status or a body without
            ``access_token``.
        """
        try:
            response = await self._http.post(
                self._settings.auth_url,
                json={"username": username, "password": password},
            )
        except httpx.HTTPError as exc:
            raise AuthError(f"authentication request failed: {exc}") from exc

        if not response.is_success:
            raise AuthError(f"authentication rejected with status {response.status_code}")

        try:
            token = AuthToken.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AuthError("malformed authentication response") from exc

        logger.info("authenticated against Homely API")
        return token

    async def list_locations(self, token: AuthToken) -> list[Location]:
        """Return the account's locations in the order the server sent them."""
        payload = await self._get_json(self._settings.locations_url, token)
        try:
            locations = _LOCATIONS.validate_python(payload)
        except ValidationError as exc:
            raise ApiError("malformed locations response") from exc
        logger.info("found %d location(s)", len(locations))
        return locations

    async def fetch_state(self, token: AuthToken, location: Location) -> Any:
        """Return the current home state document for *location*."""
        url = f"{self._settings.home_url.rstrip('/')}/{location.location_id}"
        return await self._get_json(url, token)

    async def _get_json(self, url: str, token: AuthToken) -> Any:
        try:
            response = await self._http.get(url, headers=bearer_headers(token))
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ApiError(f"GET {url} failed with status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ApiError(f"GET {url} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"GET {url} returned an undecodable body") from exc
