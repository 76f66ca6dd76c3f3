"""Pydantic schemas for the Homely REST API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AuthToken(BaseModel):
    """Bearer credential returned by the token endpoint. Held in memory only."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str = Field(..., min_length=1, repr=False, description="Opaque bearer token.")


class Location(BaseModel):
    """A registered Homely location (a home)."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    location_id: str = Field(..., alias="locationId", description="Opaque location identifier.")
    name: str | None = Field(None, description="Human-readable location name.")
