"""
Example: request UPS rates through CarrierIntegrationService.

By default runs against canned UPS responses (httpx.MockTransport), so no UPS
credentials are needed. Pass --live to call UPS with credentials from the
environment / .env (UPS_CLIENT_ID, UPS_CLIENT_SECRET, ...).

Usage:
    python scripts/example_rates.py
    python scripts/example_rates.py --live --sandbox
"""
import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

import httpx
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shipping_rates.core.config import Settings, UPSConfig, get_ups_config
from shipping_rates.core.exceptions import CarrierIntegrationError
from shipping_rates.core.http_client import HttpxTransport
from shipping_rates.modules.shipping import CarrierIntegrationService
from shipping_rates.modules.shipping.carriers.ups import UPSCarrier

logger = logging.getLogger(__name__)

RATE_REQUEST = {
    "origin": {
        "line1": "123 Origin Street",
        "line2": "Suite 100",
        "city": "Atlanta",
        "stateProvinceCode": "GA",
        "postalCode": "30301",
        "countryCode": "US",
    },
    "destination": {
        "line1": "456 Destination Ave",
        "city": "New York",
        "stateProvinceCode": "NY",
        "postalCode": "10001",
        "countryCode": "US",
    },
    "packages": [
        {"weight": 5, "weightUnit": "LBS", "length": 10, "width": 8, "height": 6, "dimensionUnit": "IN"},
    ],
}

CANNED_TOKEN = {"access_token": "stub_token", "token_type": "Bearer", "expires_in": 3600}

CANNED_RATES = {
    "RateResponse": {
        "Response": {"ResponseStatus": {"Code": "1", "Description": "Success"}},
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


def canned_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/oauth/token"):
        return httpx.Response(200, json=CANNED_TOKEN)
    return httpx.Response(200, json=CANNED_RATES)


def build_transport(live: bool) -> HttpxTransport:
    if live:
        return HttpxTransport()
    return HttpxTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(canned_handler)))


def build_config(live: bool, sandbox: bool) -> UPSConfig:
    if live:
        if sandbox:
            os.environ["UPS_USE_SANDBOX"] = "true"
        return get_ups_config(Settings())
    return UPSConfig(client_id="example", client_secret="example")


async def run(live: bool, sandbox: bool) -> int:
    config = build_config(live, sandbox)

    async with build_transport(live) as transport:
        try:
            service = CarrierIntegrationService([UPSCarrier(config, transport)])
            print("--- INPUT (RateRequest) ---")
            print(json.dumps(RATE_REQUEST, indent=2))

            result = await service.get_rates("ups", RATE_REQUEST)
        except CarrierIntegrationError as e:
            logger.error(f"Rate request failed: {e.kind.value} - {e.message}")
            print(json.dumps(e.to_dict(), indent=2, default=str))
            return 1

    print("\n--- OUTPUT (RateResponse) ---")
    print(result.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Request UPS rate quotes")
    parser.add_argument("--live", action="store_true", help="Call the real UPS API")
    parser.add_argument("--sandbox", action="store_true", help="Use the UPS CIE sandbox (with --live)")
    args = parser.parse_args()

    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    sys.exit(asyncio.run(run(args.live, args.sandbox)))
