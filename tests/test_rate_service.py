"""Tests for RateService cache coherence and aggregates."""

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from fxrates.schemas.exchange_rate import ExchangeRateBulkUpdate, ExchangeRateCreate
from fxrates.services.rate_cache import CacheKeys, RateCache
from fxrates.services.rate_service import RateService
from fxrates.services.repositories import ExchangeRateRepository, NotFoundError


def make_rate(
    base: str = "EUR",
    target: str = "USD",
    rate: str = "1.10",
    date: datetime = datetime(2024, 1, 1),
) -> ExchangeRateCreate:
    return ExchangeRateCreate(base_currency=base, target_currency=target, rate=Decimal(rate), date=date)


@pytest.fixture
def cache(clock):
    return RateCache(absolute_ttl=300, sliding_ttl=120, clock=clock)


@pytest.fixture
def service(db, cache):
    return RateService(ExchangeRateRepository(db), cache)


class TestReads:
    def test_get_rate_is_served_from_cache(self, service, cache):
        created = service.create_rate(make_rate())

        first = service.get_rate(created.id)
        second = service.get_rate(created.id)

        assert first is second
        assert cache.stats()["hits"] == 1

    def test_get_missing_rate_raises_and_is_not_cached(self, service, cache):
        with pytest.raises(NotFoundError):
            service.get_rate(999)
        assert len(cache) == 0

    def test_list_rates_reads_store_once(self, cache):
        repository = MagicMock(spec=ExchangeRateRepository)
        repository.find_all.return_value = [
            SimpleNamespace(
                id=1,
                base_currency="EUR",
                target_currency="USD",
                rate=Decimal("1.1"),
                date=datetime(2024, 1, 1),
            )
        ]
        service = RateService(repository, cache)

        assert service.list_rates() == service.list_rates()
        repository.find_all.assert_called_once()

    def test_list_by_base_currency_is_exact_and_uncached(self, service, cache):
        service.create_rate(make_rate(base="EUR"))
        service.create_rate(make_rate(base="GBP"))

        rates = service.list_by_base_currency("EUR")

        assert [r.base_currency for r in rates] == ["EUR"]
        assert service.list_by_base_currency("eur") == []
        assert len(cache) == 0


class TestWriteInvalidation:
    def test_get_after_update_returns_new_value(self, service):
        created = service.create_rate(make_rate(rate="1.10"))
        assert service.get_rate(created.id).rate == Decimal("1.10")

        service.update_rate(created.id, make_rate(rate="1.25", target="GBP"))

        updated = service.get_rate(created.id)
        assert updated.id == created.id
        assert updated.rate == Decimal("1.25")
        assert updated.target_currency == "GBP"

    def test_list_reflects_create(self, service):
        assert service.list_rates() == []

        created = service.create_rate(make_rate())

        assert [r.id for r in service.list_rates()] == [created.id]

    def test_list_reflects_update(self, service):
        created = service.create_rate(make_rate(rate="1.10"))
        service.list_rates()

        service.update_rate(created.id, make_rate(rate="1.30"))

        assert service.list_rates()[0].rate == Decimal("1.30")

    def test_list_and_get_reflect_delete(self, service):
        created = service.create_rate(make_rate())
        service.list_rates()
        service.get_rate(created.id)

        service.delete_rate(created.id)

        assert service.list_rates() == []
        with pytest.raises(NotFoundError):
            service.get_rate(created.id)

    def test_delete_twice_raises_not_found(self, service):
        created = service.create_rate(make_rate())
        service.delete_rate(created.id)

        with pytest.raises(NotFoundError):
            service.delete_rate(created.id)

    def test_update_missing_raises_not_found(self, service):
        with pytest.raises(NotFoundError):
            service.update_rate(123, make_rate())

    def test_bulk_update_invalidates_collection_and_items(self, service):
        first = service.create_rate(make_rate(base="EUR", rate="1.10"))
        second = service.create_rate(make_rate(base="EUR", rate="1.20"))
        other = service.create_rate(make_rate(base="GBP", rate="1.40"))
        service.list_rates()
        service.get_rate(first.id)
        service.get_rate(second.id)

        count = service.update_by_base_currency(
            "EUR",
            ExchangeRateBulkUpdate(
                target_currency="JPY", rate=Decimal("160.5"), date=datetime(2024, 2, 1)
            ),
        )

        assert count == 2
        assert service.get_rate(first.id).target_currency == "JPY"
        assert service.get_rate(second.id).rate == Decimal("160.5")
        assert service.get_rate(other.id).rate == Decimal("1.40")
        by_id = {r.id: r for r in service.list_rates()}
        assert by_id[first.id].target_currency == "JPY"
        assert by_id[first.id].base_currency == "EUR"

    def test_bulk_update_without_matches_raises_not_found(self, service):
        with pytest.raises(NotFoundError):
            service.update_by_base_currency(
                "CHF",
                ExchangeRateBulkUpdate(
                    target_currency="USD", rate=Decimal("1"), date=datetime(2024, 1, 1)
                ),
            )

    def test_bulk_delete_invalidates_collection_and_items(self, service):
        doomed = service.create_rate(make_rate(base="EUR"))
        kept = service.create_rate(make_rate(base="GBP"))
        service.list_rates()
        service.get_rate(doomed.id)

        assert service.delete_by_base_currency("EUR") == 1

        assert [r.id for r in service.list_rates()] == [kept.id]
        with pytest.raises(NotFoundError):
            service.get_rate(doomed.id)
        with pytest.raises(NotFoundError):
            service.delete_by_base_currency("EUR")

    def test_failed_commit_still_invalidates(self, cache):
        repository = MagicMock(spec=ExchangeRateRepository)
        repository.get_by_id.return_value = SimpleNamespace(
            id=5, base_currency="EUR", target_currency="USD", rate=Decimal("1"), date=datetime(2024, 1, 1)
        )
        repository.commit.side_effect = OperationalError("UPDATE", {}, Exception("store down"))
        service = RateService(repository, cache)
        cache.get_or_load(CacheKeys.ALL_RATES, lambda: ["stale"])
        cache.get_or_load(CacheKeys.rate(5), lambda: "stale")

        with pytest.raises(OperationalError):
            service.update_rate(5, make_rate(rate="2"))

        assert len(cache) == 0


class TestAggregates:
    @pytest.fixture
    def seeded(self, service):
        service.create_rate(make_rate(rate="1.10", date=datetime(2024, 1, 1)))
        service.create_rate(make_rate(rate="1.20", date=datetime(2024, 1, 2)))
        # Outside the window or a different pair
        service.create_rate(make_rate(rate="9.99", date=datetime(2024, 3, 1)))
        service.create_rate(make_rate(target="GBP", rate="0.85", date=datetime(2024, 1, 1)))
        return service

    def test_average_is_exact(self, seeded):
        average = seeded.average_rate("EUR", "USD", datetime(2024, 1, 1), datetime(2024, 1, 31))
        assert average == Decimal("1.15")

    def test_min_max(self, seeded):
        low, high = seeded.min_max_rate("EUR", "USD", datetime(2024, 1, 1), datetime(2024, 1, 31))
        assert (low, high) == (Decimal("1.10"), Decimal("1.20"))

    def test_window_is_inclusive(self, seeded):
        average = seeded.average_rate("EUR", "USD", datetime(2024, 1, 2), datetime(2024, 1, 2))
        assert average == Decimal("1.20")

    def test_average_of_thirds_has_no_float_drift(self, service):
        for value in ("0.1", "0.2", "0.3"):
            service.create_rate(make_rate(base="USD", target="CHF", rate=value))

        average = service.average_rate("USD", "CHF", datetime(2024, 1, 1), datetime(2024, 1, 1))

        assert average == Decimal("0.2")

    def test_no_matches_raise_not_found(self, seeded):
        with pytest.raises(NotFoundError):
            seeded.average_rate("EUR", "JPY", datetime(2024, 1, 1), datetime(2024, 1, 31))
        with pytest.raises(NotFoundError):
            seeded.min_max_rate("EUR", "USD", datetime(2023, 1, 1), datetime(2023, 12, 31))
