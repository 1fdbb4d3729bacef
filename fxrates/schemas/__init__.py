"""Pydantic schemas for API validation."""

from fxrates.schemas.auth import TokenResponse, UserLogin, UserRegister
from fxrates.schemas.common import CamelModel, MessageResponse
from fxrates.schemas.exchange_rate import (
    AverageRateResponse,
    ExchangeRate,
    ExchangeRateBulkUpdate,
    ExchangeRateCreate,
    MinMaxRateResponse,
)

__all__ = [
    "AverageRateResponse",
    "CamelModel",
    "ExchangeRate",
    "ExchangeRateBulkUpdate",
    "ExchangeRateCreate",
    "MessageResponse",
    "MinMaxRateResponse",
    "TokenResponse",
    "UserLogin",
    "UserRegister",
]
