"""SQLAlchemy ORM models."""

from fxrates.models.currency import Currency
from fxrates.models.exchange_rate import ExchangeRate
from fxrates.models.user import User

__all__ = [
    "Currency",
    "ExchangeRate",
    "User",
]
