"""Environment-driven configuration using pydantic-settings."""

from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_AUTH_URL = "https://sdk.iotiliti.cloud/homely/oauth/token"
DEFAULT_LOCATIONS_URL = "https://sdk.iotiliti.cloud/homely/locations"
DEFAULT_HOME_URL = "https://sdk.iotiliti.cloud/homely/home"
DEFAULT_REALTIME_URL = "https://sdk.iotiliti.cloud"


class Settings(BaseSettings):
    """Central configuration.

    All values can be overridden via env vars prefixed ``HOMELY_BRIDGE_``;
    command-line flags take precedence over the environment.
    """

    model_config = SettingsConfigDict(
        env_prefix="HOMELY_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- liveness server ---
    listen_address: str = "localhost:8080"

    # --- logging ---
    verbose: int = 0

    # --- Homely account ---
    homely_username: str = ""
    homely_password: SecretStr = SecretStr("")

    # --- Homely endpoints ---
    auth_url: str = DEFAULT_AUTH_URL
    locations_url: str = DEFAULT_LOCATIONS_URL
    home_url: str = DEFAULT_HOME_URL
    realtime_url: str = DEFAULT_REALTIME_URL

    # Per-request timeout for REST calls, in seconds. The realtime stream has none.
    http_timeout: float = 30.0

    def has_credentials(self) -> bool:
        """Return True when both username and password are configured."""
        return bool(self.homely_username) and bool(self.homely_password.get_secret_value())
