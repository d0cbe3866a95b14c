"""
UPS Carrier Implementation

- Implements BaseCarrier for the rate operation
- Owns one UPSTokenCache and one UPSRateClient over a shared transport
- Registered via @register_carrier decorator
"""
import logging
import time
from typing import Callable, FrozenSet

from shipping_rates.core.config import UPSConfig, validate_ups_config
from shipping_rates.core.exceptions import CarrierIntegrationError, ErrorKind
from shipping_rates.core.http_client import HttpTransport
from shipping_rates.modules.shipping.carriers import register_carrier
from shipping_rates.modules.shipping.carriers.base import BaseCarrier, CarrierOperation
from shipping_rates.schemas.shipping import RateRequest, RateResponse
from shipping_rates.services.ups_oauth import UPSTokenCache
from shipping_rates.services.ups_rating import UPSRateClient

logger = logging.getLogger(__name__)

UPS_CARRIER_ID = "ups"

SUPPORTED_OPERATIONS = frozenset({CarrierOperation.RATE})


@register_carrier(UPS_CARRIER_ID)
class UPSCarrier(BaseCarrier):
    """
    UPS shipping carrier implementation.

    The config is validated before any client is built; blank credentials
    raise VALIDATION_ERROR here rather than AUTH_FAILED on the first call.

    A 401 from the Rating API (AUTH_TOKEN_EXPIRED) clears the token cache
    before the error is re-raised, so the next call acquires a fresh token.
    The failed call itself is not retried.
    """

    def __init__(
        self,
        config: UPSConfig,
        transport: HttpTransport,
        clock: Callable[[], float] = time.time,
    ):
        validate_ups_config(config)
        self._config = config
        self._token_cache = UPSTokenCache(config, transport, clock=clock)
        self._rate_client = UPSRateClient(
            config,
            transport,
            get_token=self._token_cache.get_valid_token,
            carrier_id=UPS_CARRIER_ID,
        )

    @property
    def carrier_id(self) -> str:
        return UPS_CARRIER_ID

    @property
    def carrier_name(self) -> str:
        return "UPS"

    @property
    def supported_operations(self) -> FrozenSet[CarrierOperation]:
        return SUPPORTED_OPERATIONS

    @property
    def token_cache(self) -> UPSTokenCache:
        return self._token_cache

    async def get_rates(self, request: RateRequest) -> RateResponse:
        """Get shipping rates from UPS."""
        try:
            return await self._rate_client.get_rates(request)
        except CarrierIntegrationError as e:
            logger.error(f"UPS get rates error: {e.kind.value} - {e.message}")
            if e.kind == ErrorKind.AUTH_TOKEN_EXPIRED:
                # Next call re-acquires; this call is not retried
                self._token_cache.clear_cache()
            raise
