"""Pydantic schemas for ExchangeRate model."""

from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, Field

from fxrates.schemas.common import CamelModel


class ExchangeRateBase(CamelModel):
    """Base ExchangeRate schema with common fields."""

    base_currency: str = Field(..., min_length=3, max_length=3, description="ISO currency code")
    target_currency: str = Field(..., min_length=3, max_length=3, description="ISO currency code")
    rate: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=6,
        description="Units of target currency per unit of base currency",
    )
    date: datetime


class ExchangeRateCreate(ExchangeRateBase):
    """Schema for creating or replacing an ExchangeRate.

    An ``id`` in the request body is ignored; the store assigns identities.
    """

    pass


class ExchangeRateBulkUpdate(CamelModel):
    """Fields overwritten on every rate sharing a base currency."""

    target_currency: str = Field(..., min_length=3, max_length=3)
    rate: Decimal = Field(..., gt=0, max_digits=18, decimal_places=6)
    date: datetime


class ExchangeRate(ExchangeRateBase):
    """Schema for ExchangeRate responses.

    Frozen so a cached instance can be handed to concurrent requests.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int


class AverageRateResponse(CamelModel):
    """Arithmetic mean of matching rates."""

    average_rate: Decimal


class MinMaxRateResponse(CamelModel):
    """Lowest and highest matching rates."""

    min_rate: Decimal
    max_rate: Decimal
