"""
Carrier Integration Service

Single carrier-agnostic entry point for rate shopping:
1. look up the carrier by id
2. confirm it supports the rate operation
3. validate the raw request against the RateRequest schema
4. execute and return the normalized RateResponse

Only CarrierIntegrationError leaves this service. Anything else raised below
is wrapped as UNKNOWN with the original message preserved.
"""
import logging
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from shipping_rates.core.exceptions import CarrierIntegrationError, ErrorKind
from shipping_rates.modules.shipping.carriers.base import BaseCarrier, CarrierOperation, RateInput, RateResult
from shipping_rates.schemas.shipping import RateRequest, RateResponse
from shipping_rates.services.validation import format_validation_issues, validation_issues

logger = logging.getLogger(__name__)


class CarrierIntegrationService:
    """
    Dispatches requests to carriers registered at construction time.

    Usage:
        service = CarrierIntegrationService([UPSCarrier(config, transport)])
        response = await service.get_rates("ups", {...})
    """

    def __init__(self, carriers: Iterable[BaseCarrier]):
        self._carriers: Dict[str, BaseCarrier] = {c.carrier_id: c for c in carriers}

    @property
    def carrier_ids(self) -> List[str]:
        return list(self._carriers.keys())

    def _get_carrier(self, carrier_id: str) -> BaseCarrier:
        carrier = self._carriers.get(carrier_id)
        if not carrier:
            raise CarrierIntegrationError(
                kind=ErrorKind.VALIDATION_ERROR,
                message=f"Unknown carrier: {carrier_id}",
                context={"available_carriers": self.carrier_ids},
            )
        return carrier

    async def get_rates(self, carrier_id: str, raw_request: Any) -> RateResponse:
        """
        Get shipping rates from the specified carrier.

        Input is validated before any external call.

        Args:
            carrier_id: Registered carrier id (e.g. "ups")
            raw_request: RateRequest or a mapping in the RateRequest shape

        Raises:
            CarrierIntegrationError
        """
        carrier = self._get_carrier(carrier_id)

        if not carrier.supports(CarrierOperation.RATE):
            raise CarrierIntegrationError(
                kind=ErrorKind.VALIDATION_ERROR,
                message=f"Carrier {carrier_id} does not support rate shopping",
                context={"carrier_id": carrier_id},
            )

        try:
            request = RateRequest.model_validate(raw_request)
        except ValidationError as e:
            issues = validation_issues(e)
            raise CarrierIntegrationError(
                kind=ErrorKind.VALIDATION_ERROR,
                message=f"Invalid rate request: {format_validation_issues(issues)}",
                context={"errors": issues},
                cause=e,
            )

        try:
            result = await carrier.execute(RateInput(request=request))
        except CarrierIntegrationError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error from carrier {carrier_id}")
            raise CarrierIntegrationError(
                kind=ErrorKind.UNKNOWN,
                message=str(e) or "Carrier request failed",
                context={"carrier_id": carrier_id},
                cause=e,
            )

        if not isinstance(result, RateResult):
            raise CarrierIntegrationError(
                kind=ErrorKind.UNKNOWN,
                message="Unexpected result type from carrier",
                context={"carrier_id": carrier_id},
            )

        logger.info(f"Rates from {carrier_id}: {len(result.response.quotes)} quote(s)")
        return result.response

    def list_rate_capable_carriers(self) -> List[str]:
        """List carrier ids that support rate shopping, in registration order."""
        return [
            carrier.carrier_id
            for carrier in self._carriers.values()
            if carrier.supports(CarrierOperation.RATE)
        ]
