"""
UPS OAuth 2.0 token cache

Client-credentials flow: acquire a bearer token, cache it, and refresh it
transparently shortly before it expires. Callers only ever call
get_valid_token(); they never see expiry math or the token endpoint.

Token state lives on the UPSTokenCache instance, one per carrier client,
never process-wide. Under asyncio two callers can find the cache empty at the
same time and both acquire a token; the later one simply replaces the
earlier. No lock is taken.
"""
import asyncio
import base64
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from shipping_rates.core.config import UPSConfig
from shipping_rates.core.exceptions import CarrierIntegrationError, ErrorKind
from shipping_rates.core.http_client import HttpTransport, TransportTimeout
from shipping_rates.core.log_sanitizer import sanitize_for_logging
from shipping_rates.services.validation import format_validation_issues, validation_issues

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN_SECONDS = 3600


class UPSOAuthTokenResponse(BaseModel):
    """Token endpoint response body."""
    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    expires_in: int = Field(DEFAULT_EXPIRES_IN_SECONDS, gt=0)
    token_type: Optional[str] = None


@dataclass(frozen=True)
class CachedToken:
    access_token: str
    expires_at_ms: int


class UPSTokenCache:
    """
    Obtains and caches UPS access tokens.

    Args:
        config: UPS configuration (credentials, token URL, timeouts, buffer)
        transport: HTTP transport used for the token request
        clock: returns current wall-clock time in seconds (time.time by default)
    """

    def __init__(
        self,
        config: UPSConfig,
        transport: HttpTransport,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.transport = transport
        self._clock = clock
        self._refresh_buffer_ms = config.oauth_refresh_buffer_seconds * 1000
        self._cached: Optional[CachedToken] = None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def get_valid_token(self) -> str:
        """Return a usable access token, acquiring or refreshing as needed."""
        now_ms = self._now_ms()
        cached = self._cached
        if cached and cached.expires_at_ms - self._refresh_buffer_ms > now_ms:
            return cached.access_token

        token = await self._request_token()
        self._cached = CachedToken(
            access_token=token.access_token,
            expires_at_ms=now_ms + token.expires_in * 1000,
        )
        return token.access_token

    def clear_cache(self) -> None:
        """Discard the cached token so the next call re-acquires."""
        if self._cached is not None:
            logger.info("UPS OAuth token cache cleared")
        self._cached = None

    @property
    def has_cached_token(self) -> bool:
        return self._cached is not None

    def _basic_auth_header(self) -> str:
        auth_string = f"{self.config.client_id}:{self.config.client_secret}"
        return base64.b64encode(auth_string.encode("utf-8")).decode("ascii")

    async def _request_token(self) -> UPSOAuthTokenResponse:
        url = self.config.oauth_token_url

        try:
            response = await self.transport.request(
                "POST",
                url,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Authorization": f"Basic {self._basic_auth_header()}",
                    "x-merchant-id": self.config.client_id,
                },
                body=urlencode({"grant_type": "client_credentials"}),
                timeout_ms=self.config.oauth_timeout_ms,
            )
        except (TransportTimeout, asyncio.TimeoutError) as e:
            logger.error(f"UPS OAuth request timed out: {e}")
            raise CarrierIntegrationError(
                kind=ErrorKind.TIMEOUT,
                message=f"UPS OAuth: request timed out after {self.config.oauth_timeout_ms}ms",
                context={"url": url},
                cause=e,
            )
        except Exception as e:
            logger.error(f"UPS OAuth request failed: {e}")
            raise CarrierIntegrationError(
                kind=ErrorKind.NETWORK_ERROR,
                message=f"UPS OAuth: {e}",
                context={"url": url},
                cause=e,
            )

        if response.status == 401:
            logger.error("UPS OAuth failed: invalid client credentials (401)")
            raise CarrierIntegrationError(
                kind=ErrorKind.AUTH_FAILED,
                message="UPS OAuth: invalid client credentials (401)",
                http_status=401,
                context={"url": url},
            )

        if response.status == 429:
            logger.warning("UPS OAuth rate limited (429)")
            raise CarrierIntegrationError(
                kind=ErrorKind.RATE_LIMITED,
                message="UPS OAuth: rate limited (429)",
                http_status=429,
                context={"url": url},
            )

        if response.status < 200 or response.status >= 300:
            logger.error(
                f"UPS OAuth failed: {response.status} - {sanitize_for_logging(response.body)}"
            )
            raise CarrierIntegrationError(
                kind=ErrorKind.AUTH_FAILED,
                message=f"UPS OAuth failed: HTTP {response.status}",
                http_status=response.status,
                context={"url": url, "body": response.body},
            )

        try:
            token = UPSOAuthTokenResponse.model_validate(response.body)
        except ValidationError as e:
            issues = validation_issues(e)
            raise CarrierIntegrationError(
                kind=ErrorKind.MALFORMED_RESPONSE,
                message=f"UPS OAuth: invalid response - {format_validation_issues(issues)}",
                http_status=response.status,
                context={"body": response.body, "issues": issues},
                cause=e,
            )

        logger.info(f"UPS OAuth token obtained, expires in {token.expires_in}s")
        return token
