"""
Carrier integration configuration

Settings are read from the environment (and an optional .env file) with
pydantic-settings. The carrier core never reads the environment itself: it
consumes a plain UPSConfig built by get_ups_config().

Credentials have no usable default. validate_ups_config() must pass before a
UPS carrier is constructed.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shipping_rates.core.exceptions import CarrierIntegrationError, ErrorKind

logger = logging.getLogger(__name__)

# UPS API URLs
UPS_PRODUCTION_URL = "https://onlinetools.ups.com"
UPS_SANDBOX_URL = "https://wwwcie.ups.com"

# OAuth endpoint
OAUTH_TOKEN_PATH = "/security/v1/oauth/token"

DEFAULT_HTTP_TIMEOUT_MS = 15_000
DEFAULT_OAUTH_TIMEOUT_MS = 10_000
DEFAULT_OAUTH_REFRESH_BUFFER_SECONDS = 60
DEFAULT_RATING_VERSION = "v2403"

_NUMERIC_DEFAULTS = {
    "HTTP_TIMEOUT_MS": DEFAULT_HTTP_TIMEOUT_MS,
    "OAUTH_TIMEOUT_MS": DEFAULT_OAUTH_TIMEOUT_MS,
    "OAUTH_REFRESH_BUFFER_SECONDS": DEFAULT_OAUTH_REFRESH_BUFFER_SECONDS,
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # UPS credentials - NO DEFAULT (validate_ups_config rejects blanks)
    UPS_CLIENT_ID: str = ""
    UPS_CLIENT_SECRET: str = ""

    # Endpoints - empty means "derive from UPS_USE_SANDBOX"
    UPS_USE_SANDBOX: bool = False
    UPS_API_BASE_URL: str = ""
    UPS_OAUTH_TOKEN_URL: str = ""
    UPS_RATING_VERSION: str = DEFAULT_RATING_VERSION
    UPS_TRANSACTION_SRC: str = "shipping-rates"

    # Per-call timeouts and token refresh
    HTTP_TIMEOUT_MS: int = DEFAULT_HTTP_TIMEOUT_MS
    OAUTH_TIMEOUT_MS: int = DEFAULT_OAUTH_TIMEOUT_MS
    OAUTH_REFRESH_BUFFER_SECONDS: int = DEFAULT_OAUTH_REFRESH_BUFFER_SECONDS

    LOG_LEVEL: str = "INFO"

    @field_validator(
        "HTTP_TIMEOUT_MS", "OAUTH_TIMEOUT_MS", "OAUTH_REFRESH_BUFFER_SECONDS",
        mode="before",
    )
    @classmethod
    def fallback_on_bad_number(cls, v, info):
        """Blank or non-numeric values fall back to the default instead of failing."""
        default = _NUMERIC_DEFAULTS[info.field_name]
        if v is None or (isinstance(v, str) and not v.strip()):
            return default
        try:
            return int(float(v))
        except (TypeError, ValueError):
            logger.warning(f"Invalid {info.field_name}={v!r}, using default {default}")
            return default

    @model_validator(mode="after")
    def resolve_endpoints(self):
        base = UPS_SANDBOX_URL if self.UPS_USE_SANDBOX else UPS_PRODUCTION_URL
        if not self.UPS_API_BASE_URL:
            self.UPS_API_BASE_URL = base
        if not self.UPS_OAUTH_TOKEN_URL:
            self.UPS_OAUTH_TOKEN_URL = f"{base}{OAUTH_TOKEN_PATH}"
        return self


settings = Settings()


@dataclass(frozen=True)
class UPSConfig:
    """Plain configuration struct consumed by the UPS carrier."""
    client_id: str
    client_secret: str
    api_base_url: str = UPS_PRODUCTION_URL
    oauth_token_url: str = f"{UPS_PRODUCTION_URL}{OAUTH_TOKEN_PATH}"
    request_timeout_ms: int = DEFAULT_HTTP_TIMEOUT_MS
    oauth_timeout_ms: int = DEFAULT_OAUTH_TIMEOUT_MS
    oauth_refresh_buffer_seconds: int = DEFAULT_OAUTH_REFRESH_BUFFER_SECONDS
    rating_version: str = DEFAULT_RATING_VERSION
    transaction_src: str = "shipping-rates"


def get_ups_config(source: Optional[Settings] = None) -> UPSConfig:
    """Build a UPSConfig from settings (module settings when not given)."""
    s = source or settings
    return UPSConfig(
        client_id=s.UPS_CLIENT_ID,
        client_secret=s.UPS_CLIENT_SECRET,
        api_base_url=s.UPS_API_BASE_URL.rstrip("/"),
        oauth_token_url=s.UPS_OAUTH_TOKEN_URL,
        request_timeout_ms=s.HTTP_TIMEOUT_MS,
        oauth_timeout_ms=s.OAUTH_TIMEOUT_MS,
        oauth_refresh_buffer_seconds=s.OAUTH_REFRESH_BUFFER_SECONDS,
        rating_version=s.UPS_RATING_VERSION,
        transaction_src=s.UPS_TRANSACTION_SRC,
    )


def validate_ups_config(config: UPSConfig) -> None:
    """Reject a config without usable credentials."""
    missing = []
    if not (config.client_id or "").strip():
        missing.append("UPS_CLIENT_ID")
    if not (config.client_secret or "").strip():
        missing.append("UPS_CLIENT_SECRET")

    if missing:
        raise CarrierIntegrationError(
            kind=ErrorKind.VALIDATION_ERROR,
            message=(
                "UPS_CLIENT_ID and UPS_CLIENT_SECRET must be set for UPS carrier. "
                f"Missing: {', '.join(missing)}"
            ),
            context={"missing": missing},
        )
