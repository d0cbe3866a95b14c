"""
Shipping Rates

Carrier-agnostic shipping rate quotes. Callers submit a RateRequest and get
normalized RateQuotes back; carrier auth, wire formats and error codes stay
behind CarrierIntegrationService.
"""
from shipping_rates.core.exceptions import CarrierIntegrationError, ErrorKind
from shipping_rates.modules.shipping import CarrierFactory, CarrierIntegrationService
from shipping_rates.modules.shipping.carriers.ups import UPSCarrier
from shipping_rates.schemas.shipping import Address, Package, RateQuote, RateRequest, RateResponse

__version__ = "1.0.0"

__all__ = [
    "Address",
    "CarrierFactory",
    "CarrierIntegrationError",
    "CarrierIntegrationService",
    "ErrorKind",
    "Package",
    "RateQuote",
    "RateRequest",
    "RateResponse",
    "UPSCarrier",
]
