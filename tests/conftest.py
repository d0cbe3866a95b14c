"""
Pytest configuration and fixtures for shipping rates tests.
"""
import copy
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Union

import pytest

from shipping_rates.core.config import UPSConfig
from shipping_rates.core.http_client import HttpResponse, HttpTransport
from shipping_rates.modules.shipping.carriers.ups import UPSCarrier
from shipping_rates.modules.shipping.service import CarrierIntegrationService

TOKEN_URL = "https://auth.example.com/token"
API_BASE_URL = "https://api.example.com"

# Realistic UPS OAuth response
UPS_OAUTH_SUCCESS = {
    "access_token": "test_token_abc123",
    "token_type": "Bearer",
    "expires_in": 3600,
}

# Realistic UPS Rating API success (Shop)
UPS_RATE_SUCCESS = {
    "RateResponse": {
        "Response": {
            "ResponseStatus": {"Code": "1", "Description": "Success"},
        },
        "RatedShipment": [
            {
                "Service": {"Code": "03", "Name": "Ground"},
                "TotalCharges": {"MonetaryValue": "12.50", "CurrencyCode": "USD"},
                "GuaranteedDelivery": {"BusinessDaysInTransit": "3"},
            },
            {
                "Service": {"Code": "07", "Name": "Worldwide Express"},
                "TotalCharges": {"MonetaryValue": "24.99", "CurrencyCode": "USD"},
                "GuaranteedDelivery": {"BusinessDaysInTransit": "1"},
            },
        ],
    }
}


class StubTransport(HttpTransport):
    """
    Recording HttpTransport for tests.

    Responses and exceptions are queued with stub_next()/stub_next_raise() and
    consumed in order; every request is recorded.
    """

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self._queue: Deque[Union[HttpResponse, BaseException]] = deque()

    def stub_next(self, status: int, body: Any = None, headers: Optional[Dict[str, str]] = None):
        self._queue.append(HttpResponse(status=status, headers=headers or {}, body=body))

    def stub_next_raise(self, exc: BaseException):
        self._queue.append(exc)

    async def request(self, method, url, headers=None, body=None, timeout_ms=None) -> HttpResponse:
        self.requests.append({
            "method": method,
            "url": url,
            "headers": dict(headers or {}),
            "body": body,
            "timeout_ms": timeout_ms,
        })
        if not self._queue:
            raise AssertionError("StubTransport: no stubbed response left")
        item = self._queue.popleft()
        if isinstance(item, BaseException):
            raise item
        return item


class FakeClock:
    """Controllable wall clock in seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def stub_transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ups_config() -> UPSConfig:
    return UPSConfig(
        client_id="test_client",
        client_secret="test_secret",
        api_base_url=API_BASE_URL,
        oauth_token_url=TOKEN_URL,
    )


@pytest.fixture
def ups_carrier(ups_config, stub_transport, fake_clock) -> UPSCarrier:
    return UPSCarrier(ups_config, stub_transport, clock=fake_clock)


@pytest.fixture
def service(ups_carrier) -> CarrierIntegrationService:
    return CarrierIntegrationService([ups_carrier])


@pytest.fixture
def oauth_success() -> dict:
    return copy.deepcopy(UPS_OAUTH_SUCCESS)


@pytest.fixture
def rate_success() -> dict:
    return copy.deepcopy(UPS_RATE_SUCCESS)


@pytest.fixture
def sample_rate_request() -> dict:
    """Atlanta -> New York, one 5 LBS 10x8x6 IN package."""
    return {
        "origin": {
            "line1": "123 Origin St",
            "city": "Atlanta",
            "stateProvinceCode": "GA",
            "postalCode": "30301",
            "countryCode": "US",
        },
        "destination": {
            "line1": "456 Dest Ave",
            "city": "New York",
            "stateProvinceCode": "NY",
            "postalCode": "10001",
            "countryCode": "US",
        },
        "packages": [
            {"weight": 5, "weightUnit": "LBS", "length": 10, "width": 8, "height": 6, "dimensionUnit": "IN"},
        ],
    }
