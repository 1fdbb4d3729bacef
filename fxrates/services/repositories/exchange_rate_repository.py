"""Exchange rate data access layer."""

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from fxrates.models import ExchangeRate

from .exceptions import NotFoundError

logger = logging.getLogger(__name__)

# Largest value an INTEGER primary key can hold on PostgreSQL
MAX_RATE_ID = 2**31 - 1


class ExchangeRateRepository:
    """Centralized exchange rate data access.

    Naming conventions:
    - find_* : Query that may return None or empty list
    - get_* : Query that raises exception if missing

    Mutating methods stage changes on the session; callers decide when to
    ``commit``.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_all(self) -> Sequence[ExchangeRate]:
        """Find every stored rate, ordered by identity."""
        return self._db.query(ExchangeRate).order_by(ExchangeRate.id).all()

    def find_by_id(self, rate_id: int) -> ExchangeRate | None:
        """Find rate by primary key.

        Ids outside the key range cannot match a row and are not sent to the
        database, which would reject them with an overflow error.
        """
        if not 1 <= rate_id <= MAX_RATE_ID:
            return None
        return self._db.get(ExchangeRate, rate_id)

    def get_by_id(self, rate_id: int) -> ExchangeRate:
        """Get rate by primary key or raise NotFoundError."""
        rate = self.find_by_id(rate_id)
        if rate is None:
            raise NotFoundError("ExchangeRate", rate_id)
        return rate

    def find_by_base_currency(self, base_currency: str) -> Sequence[ExchangeRate]:
        """Find rates whose base currency matches exactly."""
        return (
            self._db.query(ExchangeRate)
            .filter(ExchangeRate.base_currency == base_currency)
            .order_by(ExchangeRate.id)
            .all()
        )

    def find_in_range(
        self,
        base_currency: str,
        target_currency: str,
        start: datetime,
        end: datetime,
    ) -> Sequence[ExchangeRate]:
        """Find rates for a currency pair with start <= date <= end."""
        return (
            self._db.query(ExchangeRate)
            .filter(
                ExchangeRate.base_currency == base_currency,
                ExchangeRate.target_currency == target_currency,
                ExchangeRate.date >= start,
                ExchangeRate.date <= end,
            )
            .order_by(ExchangeRate.date)
            .all()
        )

    def create(
        self,
        base_currency: str,
        target_currency: str,
        rate: Decimal,
        date: datetime,
    ) -> ExchangeRate:
        """Stage a new rate and flush it so the store assigns its id."""
        exchange_rate = ExchangeRate(
            base_currency=base_currency,
            target_currency=target_currency,
            rate=rate,
            date=date,
        )
        self._db.add(exchange_rate)
        self._db.flush()
        return exchange_rate

    def delete(self, exchange_rate: ExchangeRate) -> None:
        """Stage removal of a rate."""
        self._db.delete(exchange_rate)

    def commit(self) -> None:
        """Commit staged changes, rolling back if the store rejects them."""
        try:
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise
