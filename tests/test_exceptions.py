"""
Tests for the carrier integration error model.
"""
import pytest

from shipping_rates.core.exceptions import (
    CarrierIntegrationError,
    ErrorKind,
    is_carrier_integration_error,
)


def test_fields_are_exposed():
    cause = ValueError("bad")
    err = CarrierIntegrationError(
        kind=ErrorKind.CARRIER_ERROR,
        message="UPS said no",
        http_status=400,
        carrier_error_code="111210",
        context={"trans_id": "abc"},
        cause=cause,
    )

    assert err.kind == ErrorKind.CARRIER_ERROR
    assert err.message == "UPS said no"
    assert str(err) == "UPS said no"
    assert err.http_status == 400
    assert err.carrier_error_code == "111210"
    assert err.context["trans_id"] == "abc"
    assert err.cause is cause
    assert err.__cause__ is cause


def test_optional_fields_default_to_none():
    err = CarrierIntegrationError(ErrorKind.UNKNOWN, "boom")

    assert err.http_status is None
    assert err.carrier_error_code is None
    assert err.cause is None
    assert dict(err.context) == {}


def test_attributes_are_read_only():
    err = CarrierIntegrationError(ErrorKind.TIMEOUT, "slow", context={"url": "x"})

    with pytest.raises(AttributeError):
        err.kind = ErrorKind.UNKNOWN
    with pytest.raises(TypeError):
        err.context["url"] = "y"


def test_context_is_copied():
    context = {"a": 1}
    err = CarrierIntegrationError(ErrorKind.UNKNOWN, "boom", context=context)
    context["a"] = 2

    assert err.context["a"] == 1


def test_kind_accepts_string_value():
    assert CarrierIntegrationError("RATE_LIMITED", "slow down").kind is ErrorKind.RATE_LIMITED


def test_to_dict():
    err = CarrierIntegrationError(
        kind=ErrorKind.AUTH_FAILED,
        message="bad credentials",
        http_status=401,
        cause=RuntimeError("x"),
    )

    data = err.to_dict()

    assert data["error_type"] == "CarrierIntegrationError"
    assert data["kind"] == "AUTH_FAILED"
    assert data["severity"] == "P0"
    assert data["http_status"] == 401
    assert data["cause"] == "RuntimeError('x')"


def test_every_kind_has_a_severity():
    for kind in ErrorKind:
        assert CarrierIntegrationError(kind, "m").severity in {"P0", "P1", "P2", "P3"}


def test_type_guard():
    assert is_carrier_integration_error(CarrierIntegrationError(ErrorKind.UNKNOWN, "m"))
    assert not is_carrier_integration_error(ValueError("m"))
    assert not is_carrier_integration_error(None)
