"""
UPS Rating API integration

Two halves:
- Wire mapping (pure functions): build_ups_rate_request() turns a domain
  RateRequest into the UPS request body, parse_ups_rate_response() validates a
  UPS response body against declared wire schemas and turns it into a domain
  RateResponse. This module is the only place UPS field names appear.
- UPSRateClient: one "get rates" call. Token, request, status handling, parse.

Numeric safety when parsing quotes:
- MonetaryValue absent, empty, unparsable, non-finite or negative -> 0.0
- BusinessDaysInTransit absent, empty or unparsable -> None (never 0)
"""
import asyncio
import json
import logging
import math
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from shipping_rates.core.config import UPSConfig
from shipping_rates.core.exceptions import CarrierIntegrationError, ErrorKind
from shipping_rates.core.http_client import HttpTransport, TransportTimeout
from shipping_rates.core.log_sanitizer import sanitize_for_logging
from shipping_rates.schemas.shipping import Address, Package, RateQuote, RateRequest, RateResponse
from shipping_rates.services.validation import format_validation_issues, validation_issues

logger = logging.getLogger(__name__)

# /api/rating/{version}/{requestoption}; version is configurable (UPS_RATING_VERSION)
RATING_PATH_TEMPLATE = "/api/rating/{version}/{request_option}"

UPS_SUCCESS_STATUS_CODE = "1"
UNKNOWN_SERVICE_CODE = "UNKNOWN"
DEFAULT_CURRENCY = "USD"
CUSTOMER_SUPPLIED_PACKAGE = "02"

# Known UPS service code -> display name
UPS_SERVICE_NAMES: Dict[str, str] = {
    # Domestic US
    "01": "Next Day Air",
    "02": "2nd Day Air",
    "03": "Ground",
    "12": "3 Day Select",
    "13": "Next Day Air Saver",
    "14": "Next Day Air Early",
    "59": "2nd Day Air A.M.",
    # International
    "07": "Worldwide Express",
    "08": "Worldwide Expedited",
    "11": "Standard",
    "54": "Worldwide Express Plus",
    "65": "Worldwide Saver",
    "70": "Worldwide Express Sprint",
    "71": "Worldwide Express Sprint Plus",
    "96": "Worldwide Express Freight",
    # SurePost
    "92": "SurePost Less Than 1 lb",
    "93": "SurePost 1 lb or Greater",
    "94": "SurePost BPM",
    "95": "SurePost Media Mail",
    # Mail Innovations
    "M2": "First Class Mail",
    "M3": "Priority Mail",
    "M4": "Expedited Mail Innovations",
    "M5": "Priority Mail Innovations",
    "M6": "Economy Mail Innovations",
}


# ==================== Wire Schemas (response) ====================


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class UPSService(_WireModel):
    Code: Optional[str] = None
    Name: Optional[str] = None
    Description: Optional[str] = None


class UPSCharges(_WireModel):
    MonetaryValue: Optional[str] = None
    CurrencyCode: Optional[str] = None


class UPSGuaranteedDelivery(_WireModel):
    BusinessDaysInTransit: Optional[str] = None


class UPSEstimatedArrival(_WireModel):
    BusinessDaysInTransit: Optional[str] = None


class UPSServiceSummary(_WireModel):
    EstimatedArrival: Optional[UPSEstimatedArrival] = None


class UPSTimeInTransit(_WireModel):
    ServiceSummary: Optional[UPSServiceSummary] = None

    @field_validator("ServiceSummary", mode="before")
    @classmethod
    def first_summary(cls, v):
        # Multi-service responses carry a list; the rated shipment's own is first
        if isinstance(v, list):
            return v[0] if v else None
        return v


class UPSRatedShipment(_WireModel):
    Service: Optional[UPSService] = None
    TotalCharges: Optional[UPSCharges] = None
    GuaranteedDelivery: Optional[UPSGuaranteedDelivery] = None
    TimeInTransit: Optional[UPSTimeInTransit] = None


class UPSResponseStatus(_WireModel):
    Code: Optional[str] = None
    Description: Optional[str] = None


class UPSResponseMeta(_WireModel):
    ResponseStatus: Optional[UPSResponseStatus] = None


class UPSRateResponse(_WireModel):
    Response: Optional[UPSResponseMeta] = None
    RatedShipment: Optional[List[UPSRatedShipment]] = None

    @field_validator("RatedShipment", mode="before")
    @classmethod
    def single_shipment_as_list(cls, v):
        # UPS returns a bare object when only one service is rated
        if isinstance(v, dict):
            return [v]
        return v


class UPSRateResponseBody(_WireModel):
    RateResponse: UPSRateResponse


class UPSErrorDetail(_WireModel):
    code: Optional[Any] = None
    message: Optional[Any] = None


class UPSErrorResponse(_WireModel):
    # Only the first entry is validated
    errors: List[Any] = []


class UPSErrorBody(_WireModel):
    response: Optional[UPSErrorResponse] = None


# ==================== Request Mapping ====================


def _format_number(value: float) -> str:
    """UPS expects numeric strings; whole numbers go out without a trailing .0"""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _to_ups_address(address: Address) -> Dict[str, Any]:
    lines = [line for line in (address.line1, address.line2, address.line3) if line]
    ups_address: Dict[str, Any] = {
        "AddressLine": lines,
        "City": address.city,
        "PostalCode": address.postal_code,
        "CountryCode": address.country_code,
    }
    if address.state_province_code:
        ups_address["StateProvinceCode"] = address.state_province_code
    return {"Address": ups_address}


def _to_ups_package(package: Package) -> Dict[str, Any]:
    ups_package: Dict[str, Any] = {
        "Packaging": {"Code": CUSTOMER_SUPPLIED_PACKAGE},
        "PackageWeight": {
            "UnitOfMeasurement": {"Code": package.weight_unit.value},
            "Weight": _format_number(package.weight),
        },
    }

    if package.has_dimensions:
        ups_package["Dimensions"] = {
            "UnitOfMeasurement": {"Code": package.dimension_unit.value},
            "Length": _format_number(package.length),
            "Width": _format_number(package.width),
            "Height": _format_number(package.height),
        }

    return ups_package


def request_option_for(request: RateRequest) -> str:
    """'Rate' prices the requested service only, 'Shop' prices every available one."""
    return "Rate" if request.service_code else "Shop"


def build_ups_rate_request(request: RateRequest) -> Dict[str, Any]:
    """Build the UPS RateRequest body from a domain RateRequest."""
    shipment: Dict[str, Any] = {
        "ShipFrom": _to_ups_address(request.origin),
        "ShipTo": _to_ups_address(request.destination),
        "Package": [_to_ups_package(p) for p in request.packages],
    }

    if request.service_code:
        shipment["Service"] = {"Code": request.service_code}

    return {
        "RateRequest": {
            "Request": {"RequestOption": request_option_for(request)},
            "Shipment": shipment,
        }
    }


# ==================== Response Mapping ====================


def _parse_charge(value: Optional[str]) -> float:
    if value is None or not value.strip():
        return 0.0
    try:
        amount = float(value)
    except ValueError:
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


def _parse_transit_days(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        days = int(value.strip())
    except ValueError:
        return None
    return days if days >= 0 else None


def _raw_transit_days(shipment: UPSRatedShipment) -> Optional[str]:
    if shipment.GuaranteedDelivery and shipment.GuaranteedDelivery.BusinessDaysInTransit:
        return shipment.GuaranteedDelivery.BusinessDaysInTransit

    tit = shipment.TimeInTransit
    if tit and tit.ServiceSummary and tit.ServiceSummary.EstimatedArrival:
        return tit.ServiceSummary.EstimatedArrival.BusinessDaysInTransit
    return None


def ups_service_name(code: str) -> str:
    return UPS_SERVICE_NAMES.get(code, code)


def _to_quote(shipment: UPSRatedShipment, carrier_id: str) -> RateQuote:
    service = shipment.Service or UPSService()
    code = service.Code or UNKNOWN_SERVICE_CODE
    charges = shipment.TotalCharges or UPSCharges()

    return RateQuote(
        carrier=carrier_id,
        service_code=code,
        service_name=service.Name or service.Description or ups_service_name(code),
        total_charge=_parse_charge(charges.MonetaryValue),
        currency_code=charges.CurrencyCode or DEFAULT_CURRENCY,
        transit_days=_parse_transit_days(_raw_transit_days(shipment)),
        carrier_service_id=code,
    )


def parse_ups_rate_response(
    body: Any,
    carrier_id: str,
    request_id: Optional[str] = None,
) -> RateResponse:
    """
    Validate a UPS rate response body and normalize it.

    Raises:
        CarrierIntegrationError: MALFORMED_RESPONSE when the body does not match
            the wire schema, CARRIER_ERROR when UPS reports a non-success status.
    """
    try:
        parsed = UPSRateResponseBody.model_validate(body)
    except ValidationError as e:
        issues = validation_issues(e)
        raise CarrierIntegrationError(
            kind=ErrorKind.MALFORMED_RESPONSE,
            message=f"UPS rate response invalid - {format_validation_issues(issues)}",
            context={"body": body, "issues": issues},
            cause=e,
        )

    rate_response = parsed.RateResponse
    status = rate_response.Response.ResponseStatus if rate_response.Response else None
    if status and status.Code and status.Code != UPS_SUCCESS_STATUS_CODE:
        raise CarrierIntegrationError(
            kind=ErrorKind.CARRIER_ERROR,
            message=status.Description or f"UPS error: {status.Code}",
            carrier_error_code=status.Code,
            context={"body": body},
        )

    quotes = [_to_quote(s, carrier_id) for s in rate_response.RatedShipment or []]
    return RateResponse(quotes=quotes, request_id=request_id)


def extract_carrier_error(body: Any) -> Tuple[Optional[str], Optional[str]]:
    """Best-effort (code, message) from a UPS error body; (None, None) when absent."""
    try:
        parsed = UPSErrorBody.model_validate(body)
        if not parsed.response or not parsed.response.errors:
            return None, None
        first = UPSErrorDetail.model_validate(parsed.response.errors[0])
    except ValidationError:
        return None, None

    code = str(first.code) if first.code is not None else None
    message = first.message if isinstance(first.message, str) else None
    return code, message


# ==================== Client ====================


class UPSRateClient:
    """
    Client for the UPS Rating API.

    Args:
        config: UPS configuration
        transport: HTTP transport
        get_token: coroutine function returning a valid bearer token
        carrier_id: carrier id stamped on every quote
    """

    def __init__(
        self,
        config: UPSConfig,
        transport: HttpTransport,
        get_token: Callable[[], Awaitable[str]],
        carrier_id: str = "ups",
    ):
        self.config = config
        self.transport = transport
        self._get_token = get_token
        self.carrier_id = carrier_id

    def rating_path(self, request: RateRequest) -> str:
        return RATING_PATH_TEMPLATE.format(
            version=self.config.rating_version,
            request_option=request_option_for(request),
        )

    async def get_rates(self, request: RateRequest) -> RateResponse:
        """Get rate quotes for a validated RateRequest. No retry is attempted."""
        token = await self._get_token()
        path = self.rating_path(request)
        url = f"{self.config.api_base_url}{path}"
        trans_id = uuid.uuid4().hex

        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "transId": trans_id,
            "transactionSrc": self.config.transaction_src,
        }

        try:
            response = await self.transport.request(
                "POST",
                url,
                headers=headers,
                body=json.dumps(build_ups_rate_request(request)),
                timeout_ms=self.config.request_timeout_ms,
            )
        except (TransportTimeout, asyncio.TimeoutError) as e:
            logger.error(f"UPS rate request timed out: {path} ({trans_id})")
            raise CarrierIntegrationError(
                kind=ErrorKind.TIMEOUT,
                message=f"UPS rate request timed out after {self.config.request_timeout_ms}ms",
                context={"url": url, "trans_id": trans_id},
                cause=e,
            )
        except Exception as e:
            logger.error(f"UPS rate request failed: {e}")
            raise CarrierIntegrationError(
                kind=ErrorKind.NETWORK_ERROR,
                message=f"UPS rate request failed: {e}",
                context={"url": url, "trans_id": trans_id},
                cause=e,
            )

        logger.debug(f"UPS API POST {path} -> {response.status}")

        if response.status == 401:
            logger.warning(f"UPS rate request unauthorized (401), trans_id={trans_id}")
            raise CarrierIntegrationError(
                kind=ErrorKind.AUTH_TOKEN_EXPIRED,
                message="UPS rate request unauthorized (401); token may have expired",
                http_status=401,
                context={"trans_id": trans_id},
            )

        if response.status == 429:
            logger.warning(f"UPS rate request rate limited (429), trans_id={trans_id}")
            raise CarrierIntegrationError(
                kind=ErrorKind.RATE_LIMITED,
                message="UPS rate limited (429)",
                http_status=429,
                context={"trans_id": trans_id},
            )

        if response.status >= 400:
            carrier_code, carrier_message = extract_carrier_error(response.body)
            logger.error(
                f"UPS API error: {response.status} {carrier_code} - "
                f"{sanitize_for_logging(carrier_message or response.body)}"
            )
            message = f"UPS rate request failed: HTTP {response.status}"
            if carrier_message:
                message = f"{message} - {carrier_message}"
            raise CarrierIntegrationError(
                kind=ErrorKind.CARRIER_ERROR,
                message=message,
                http_status=response.status,
                carrier_error_code=carrier_code,
                context={"body": response.body, "trans_id": trans_id},
            )

        return parse_ups_rate_response(response.body, self.carrier_id, request_id=trans_id)
