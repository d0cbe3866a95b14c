"""
Base Carrier Interface

Every carrier integration implements BaseCarrier:
- carrier_id / carrier_name
- supported_operations: which CarrierOperation values it implements
- execute(): single entry point taking an operation input and returning the
  matching operation result

Operations form a closed set. Only RATE has a concrete input/result pair
today. LABEL, TRACKING and ADDRESS_VALIDATION are extension points: they can
only be expressed as UnsupportedInput and every carrier rejects them.
"""
import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, FrozenSet, Union

from shipping_rates.core.exceptions import CarrierIntegrationError, ErrorKind
from shipping_rates.schemas.shipping import RateRequest, RateResponse


class CarrierOperation(str, enum.Enum):
    RATE = "rate"
    LABEL = "label"
    TRACKING = "tracking"
    ADDRESS_VALIDATION = "address_validation"


# =============================================================================
# Operation Inputs / Results
# =============================================================================

@dataclass(frozen=True)
class RateInput:
    """Input for the rate operation."""
    request: RateRequest
    operation: ClassVar[CarrierOperation] = CarrierOperation.RATE


@dataclass(frozen=True)
class RateResult:
    """Result of the rate operation."""
    response: RateResponse
    operation: ClassVar[CarrierOperation] = CarrierOperation.RATE


@dataclass(frozen=True)
class UnsupportedInput:
    """Placeholder for operations that have no implementation yet."""
    operation: CarrierOperation
    payload: Any = None


OperationInput = Union[RateInput, UnsupportedInput]
OperationResult = RateResult


# =============================================================================
# Base Carrier Interface
# =============================================================================

class BaseCarrier(ABC):
    """
    Abstract base class for all shipping carriers.

    Carriers keep their auth, wire format and error codes private; callers
    only see the schemas in shipping_rates.schemas.shipping and
    CarrierIntegrationError.
    """

    @property
    @abstractmethod
    def carrier_id(self) -> str:
        """Stable identifier used by the dispatcher (e.g. 'ups')."""
        pass

    @property
    @abstractmethod
    def carrier_name(self) -> str:
        """Return the human-readable carrier name."""
        pass

    @property
    @abstractmethod
    def supported_operations(self) -> FrozenSet[CarrierOperation]:
        pass

    def supports(self, operation: CarrierOperation) -> bool:
        return operation in self.supported_operations

    @abstractmethod
    async def get_rates(self, request: RateRequest) -> RateResponse:
        """
        Get shipping rates from the carrier.

        Args:
            request: validated carrier-agnostic rate request

        Returns:
            RateResponse with quotes in carrier order
        """
        pass

    async def execute(self, op_input: OperationInput) -> OperationResult:
        """Run one operation. Operations outside supported_operations are rejected."""
        if isinstance(op_input, RateInput) and self.supports(CarrierOperation.RATE):
            return RateResult(response=await self.get_rates(op_input.request))

        raise CarrierIntegrationError(
            kind=ErrorKind.VALIDATION_ERROR,
            message=f"{self.carrier_name} does not support operation: {op_input.operation.value}",
            context={
                "carrier_id": self.carrier_id,
                "supported": sorted(op.value for op in self.supported_operations),
            },
        )
