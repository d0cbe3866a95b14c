"""
Shipping Rates Error Model

Every failure that leaves the carrier integration core is a
CarrierIntegrationError. Callers never see raw HTTP, httpx, pydantic or
carrier-specific exceptions.

Each error carries:
- kind: one value of the closed ErrorKind taxonomy
- message: human-readable description
- http_status: HTTP status when the failure came from an HTTP exchange
- carrier_error_code: the carrier's own error code when it supplied one
- context: free-form diagnostic values for logging
- cause: the wrapped exception, if any
"""
import enum
import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    """Closed set of failure categories exposed to callers."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_FAILED = "AUTH_FAILED"
    AUTH_TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    CARRIER_ERROR = "CARRIER_ERROR"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    UNKNOWN = "UNKNOWN"


# P0-P3 severity per kind, used when routing error logs
ERROR_SEVERITY: Dict[ErrorKind, str] = {
    ErrorKind.VALIDATION_ERROR: "P3",
    ErrorKind.AUTH_FAILED: "P0",  # bad credentials stop every call
    ErrorKind.AUTH_TOKEN_EXPIRED: "P2",
    ErrorKind.RATE_LIMITED: "P2",
    ErrorKind.NETWORK_ERROR: "P1",
    ErrorKind.TIMEOUT: "P1",
    ErrorKind.CARRIER_ERROR: "P2",
    ErrorKind.MALFORMED_RESPONSE: "P1",
    ErrorKind.UNKNOWN: "P1",
}


class CarrierIntegrationError(Exception):
    """
    Structured failure for the carrier integration service.

    Attributes are read-only once constructed; the context mapping is exposed
    as a read-only view.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        http_status: Optional[int] = None,
        carrier_error_code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self._kind = ErrorKind(kind)
        self._message = message
        self._http_status = http_status
        self._carrier_error_code = carrier_error_code
        self._context = MappingProxyType(dict(context or {}))
        self._cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def http_status(self) -> Optional[int]:
        return self._http_status

    @property
    def carrier_error_code(self) -> Optional[str]:
        return self._carrier_error_code

    @property
    def context(self) -> Mapping[str, Any]:
        return self._context

    @property
    def cause(self) -> Optional[BaseException]:
        return self._cause

    @property
    def severity(self) -> str:
        return ERROR_SEVERITY[self._kind]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "kind": self._kind.value,
            "message": self._message,
            "severity": self.severity,
            "http_status": self._http_status,
            "carrier_error_code": self._carrier_error_code,
            "context": dict(self._context),
            "cause": repr(self._cause) if self._cause is not None else None,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(kind={self._kind.value!r}, "
            f"message={self._message!r}, http_status={self._http_status!r})"
        )


def is_carrier_integration_error(err: object) -> bool:
    """Type guard used at boundaries that receive arbitrary exceptions."""
    return isinstance(err, CarrierIntegrationError)
