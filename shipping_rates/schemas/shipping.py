"""
Carrier-agnostic shipping schemas.

Pydantic models for rate requests and normalized rate quotes. Carriers map
their own APIs to and from these; callers never see carrier wire formats.

Field names are snake_case. camelCase aliases (stateProvinceCode,
weightUnit, ...) are accepted on input.
"""
import enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class WeightUnit(str, enum.Enum):
    LBS = "LBS"
    KGS = "KGS"


class DimensionUnit(str, enum.Enum):
    IN = "IN"
    CM = "CM"


class _DomainModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ==================== Request Schemas ====================


class Address(_DomainModel):
    """Postal address for origin or destination."""
    line1: str = Field(..., min_length=1, description="Address line1 is required")
    line2: Optional[str] = None
    line3: Optional[str] = None
    city: str = Field(..., min_length=1)
    state_province_code: Optional[str] = Field(None, max_length=10)
    postal_code: str = Field(..., min_length=1)
    country_code: str = Field(..., min_length=2, max_length=2, description="ISO 3166-1 alpha-2")

    @field_validator("country_code")
    @classmethod
    def validate_country_code(cls, v):
        return v.upper()


class Package(_DomainModel):
    """Package weight and optional dimensions."""
    weight: float = Field(..., gt=0)
    weight_unit: WeightUnit = WeightUnit.LBS
    length: Optional[float] = Field(None, gt=0)
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    dimension_unit: DimensionUnit = DimensionUnit.IN

    @field_validator("weight", "length", "width", "height", mode="before")
    @classmethod
    def reject_non_numbers(cls, v):
        if isinstance(v, (bool, str)):
            raise ValueError("must be a number")
        return v

    @model_validator(mode="after")
    def check_dimensions_complete(self):
        dims = (self.length, self.width, self.height)
        present = [d is not None for d in dims]
        if any(present) and not all(present):
            raise ValueError("length, width and height must be given together or not at all")
        return self

    @property
    def has_dimensions(self) -> bool:
        return self.length is not None and self.width is not None and self.height is not None


class RateRequest(_DomainModel):
    """Request rate quotes for a shipment."""
    origin: Address
    destination: Address
    packages: Tuple[Package, ...] = Field(..., min_length=1)
    service_code: Optional[str] = Field(
        None,
        max_length=10,
        description="Restrict to one carrier service level (e.g. '03' for UPS Ground)",
    )


# ==================== Response Schemas ====================


class RateQuote(_DomainModel):
    """A single normalized rate quote."""
    carrier: str
    service_code: str
    service_name: str
    total_charge: float = Field(..., ge=0)
    currency_code: str
    transit_days: Optional[int] = Field(None, ge=0)
    carrier_service_id: Optional[str] = None


class RateResponse(_DomainModel):
    """Quotes in the order the carrier returned them."""
    quotes: Tuple[RateQuote, ...] = ()
    request_id: Optional[str] = None
