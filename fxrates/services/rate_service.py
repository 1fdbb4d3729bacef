"""Exchange rate CRUD and aggregate operations."""

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from fxrates.models import ExchangeRate as ExchangeRateModel
from fxrates.schemas.exchange_rate import (
    ExchangeRate,
    ExchangeRateBulkUpdate,
    ExchangeRateCreate,
)
from fxrates.services.rate_cache import CacheKeys, RateCache
from fxrates.services.repositories import ExchangeRateRepository, NotFoundError

logger = logging.getLogger(__name__)


class RateService:
    """Service for exchange rate reads and writes.

    Collection and by-id reads go through the rate cache. Every write commits
    to the store and then invalidates the cache keys it may have made stale.
    Invalidation also runs when the commit fails, since the outcome of a failed
    commit is not known to the cache.
    """

    def __init__(self, repository: ExchangeRateRepository, cache: RateCache) -> None:
        self._repository = repository
        self._cache = cache

    def list_rates(self) -> list[ExchangeRate]:
        """Get every stored rate."""
        return self._cache.get_or_load(
            CacheKeys.ALL_RATES,
            lambda: _to_schemas(self._repository.find_all()),
        )

    def get_rate(self, rate_id: int) -> ExchangeRate:
        """Get a single rate.

        Raises:
            NotFoundError: If no rate has this id (the miss is not cached)
        """
        return self._cache.get_or_load(
            CacheKeys.rate(rate_id),
            lambda: ExchangeRate.model_validate(self._repository.get_by_id(rate_id)),
        )

    def create_rate(self, data: ExchangeRateCreate) -> ExchangeRate:
        """Store a new rate and return it with its assigned id."""
        try:
            exchange_rate = self._repository.create(
                base_currency=data.base_currency,
                target_currency=data.target_currency,
                rate=data.rate,
                date=data.date,
            )
            self._repository.commit()
        finally:
            self._cache.invalidate(CacheKeys.ALL_RATES)

        logger.info(f"Created exchange rate {exchange_rate.id}: {exchange_rate!r}")
        return ExchangeRate.model_validate(exchange_rate)

    def update_rate(self, rate_id: int, data: ExchangeRateCreate) -> None:
        """Overwrite every mutable field of an existing rate in place.

        Raises:
            NotFoundError: If no rate has this id
        """
        exchange_rate = self._repository.get_by_id(rate_id)
        try:
            exchange_rate.base_currency = data.base_currency
            exchange_rate.target_currency = data.target_currency
            exchange_rate.rate = data.rate
            exchange_rate.date = data.date
            self._repository.commit()
        finally:
            self._invalidate_rate(rate_id)

        logger.info(f"Updated exchange rate {rate_id}")

    def delete_rate(self, rate_id: int) -> None:
        """Remove a rate.

        Raises:
            NotFoundError: If no rate has this id
        """
        exchange_rate = self._repository.get_by_id(rate_id)
        try:
            self._repository.delete(exchange_rate)
            self._repository.commit()
        finally:
            self._invalidate_rate(rate_id)

        logger.info(f"Deleted exchange rate {rate_id}")

    def list_by_base_currency(self, base_currency: str) -> list[ExchangeRate]:
        """Get rates with this exact base currency; may be empty."""
        return _to_schemas(self._repository.find_by_base_currency(base_currency))

    def update_by_base_currency(self, base_currency: str, data: ExchangeRateBulkUpdate) -> int:
        """Overwrite target currency, rate and date of every rate with this base.

        Returns:
            Number of rates updated

        Raises:
            NotFoundError: If no rate has this base currency
        """
        rates = self._repository.find_by_base_currency(base_currency)
        if not rates:
            raise NotFoundError("ExchangeRate", f"base_currency={base_currency}")

        try:
            for exchange_rate in rates:
                exchange_rate.target_currency = data.target_currency
                exchange_rate.rate = data.rate
                exchange_rate.date = data.date
            self._repository.commit()
        finally:
            self._cache.invalidate_all_for(CacheKeys.RATES)

        logger.info(f"Updated {len(rates)} exchange rates with base {base_currency}")
        return len(rates)

    def delete_by_base_currency(self, base_currency: str) -> int:
        """Remove every rate with this base currency.

        Returns:
            Number of rates deleted

        Raises:
            NotFoundError: If no rate has this base currency
        """
        rates = self._repository.find_by_base_currency(base_currency)
        if not rates:
            raise NotFoundError("ExchangeRate", f"base_currency={base_currency}")

        try:
            for exchange_rate in rates:
                self._repository.delete(exchange_rate)
            self._repository.commit()
        finally:
            self._cache.invalidate_all_for(CacheKeys.RATES)

        logger.info(f"Deleted {len(rates)} exchange rates with base {base_currency}")
        return len(rates)

    def average_rate(
        self,
        base_currency: str,
        target_currency: str,
        start: datetime,
        end: datetime,
    ) -> Decimal:
        """Arithmetic mean of rates for a pair within [start, end].

        Raises:
            NotFoundError: If no rate matches
        """
        values = self._rates_in_range(base_currency, target_currency, start, end)
        return sum(values, Decimal(0)) / len(values)

    def min_max_rate(
        self,
        base_currency: str,
        target_currency: str,
        start: datetime,
        end: datetime,
    ) -> tuple[Decimal, Decimal]:
        """Lowest and highest rate for a pair within [start, end].

        Raises:
            NotFoundError: If no rate matches
        """
        values = self._rates_in_range(base_currency, target_currency, start, end)
        return min(values), max(values)

    def _rates_in_range(
        self,
        base_currency: str,
        target_currency: str,
        start: datetime,
        end: datetime,
    ) -> list[Decimal]:
        rates = self._repository.find_in_range(base_currency, target_currency, start, end)
        if not rates:
            raise NotFoundError(
                "ExchangeRate",
                f"{base_currency}/{target_currency} between {start.isoformat()} and {end.isoformat()}",
            )
        return [Decimal(r.rate) for r in rates]

    def _invalidate_rate(self, rate_id: int) -> None:
        self._cache.invalidate(CacheKeys.ALL_RATES)
        self._cache.invalidate(CacheKeys.rate(rate_id))


def _to_schemas(rates: Sequence[ExchangeRateModel]) -> list[ExchangeRate]:
    return [ExchangeRate.model_validate(r) for r in rates]
