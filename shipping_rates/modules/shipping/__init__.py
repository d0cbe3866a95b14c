"""
Shipping Module

- BaseCarrier interface for all carrier implementations
- CarrierFactory / register_carrier for building carriers by id
- CarrierIntegrationService as the carrier-agnostic front door
"""
from shipping_rates.modules.shipping.carriers import CarrierFactory, register_carrier
from shipping_rates.modules.shipping.carriers.base import BaseCarrier, CarrierOperation
from shipping_rates.modules.shipping.service import CarrierIntegrationService

__all__ = [
    "CarrierFactory",
    "register_carrier",
    "BaseCarrier",
    "CarrierOperation",
    "CarrierIntegrationService",
]
