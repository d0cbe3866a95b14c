"""
Carrier Registry and Factory

- register_carrier() records a carrier implementation under its carrier id
- CarrierFactory.create() builds a carrier instance from its config and a
  shared HTTP transport
"""
from typing import Any, Dict, List, Type
import logging

from shipping_rates.core.exceptions import CarrierIntegrationError, ErrorKind
from shipping_rates.core.http_client import HttpTransport
from shipping_rates.modules.shipping.carriers.base import BaseCarrier

logger = logging.getLogger(__name__)

# Registry of carrier implementations
_CARRIER_REGISTRY: Dict[str, Type[BaseCarrier]] = {}


def register_carrier(carrier_id: str):
    """
    Decorator to register a carrier implementation.

    Usage:
        @register_carrier("ups")
        class UPSCarrier(BaseCarrier):
            ...
    """
    def decorator(cls: Type[BaseCarrier]):
        _CARRIER_REGISTRY[carrier_id] = cls
        logger.debug(f"Registered carrier: {carrier_id} -> {cls.__name__}")
        return cls
    return decorator


class CarrierFactory:
    """Factory for creating carrier instances by carrier id."""

    @classmethod
    def create(cls, carrier_id: str, config: Any, transport: HttpTransport, **kwargs) -> BaseCarrier:
        """
        Create a carrier instance.

        Args:
            carrier_id: Registered carrier id (e.g. "ups")
            config: Carrier-specific configuration struct
            transport: HTTP transport shared by the carrier's clients

        Raises:
            CarrierIntegrationError: VALIDATION_ERROR for an unregistered id
        """
        carrier_cls = _CARRIER_REGISTRY.get(carrier_id)
        if not carrier_cls:
            logger.warning(f"No implementation registered for carrier: {carrier_id}")
            raise CarrierIntegrationError(
                kind=ErrorKind.VALIDATION_ERROR,
                message=f"No implementation registered for carrier: {carrier_id}",
                context={"registered_carriers": cls.get_registered_carriers()},
            )

        return carrier_cls(config, transport, **kwargs)

    @classmethod
    def get_registered_carriers(cls) -> List[str]:
        """Get list of all registered carrier ids."""
        return list(_CARRIER_REGISTRY.keys())


# Import carriers to trigger registration
# These imports must be at the bottom to avoid circular imports
from shipping_rates.modules.shipping.carriers.ups import UPSCarrier  # noqa: E402, F401
