"""Service dependencies wired from application state."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from fxrates.database import get_db
from fxrates.services.frankfurter_client import FrankfurterClient
from fxrates.services.rate_cache import RateCache
from fxrates.services.rate_service import RateService
from fxrates.services.repositories import ExchangeRateRepository


def get_rate_cache(request: Request) -> RateCache:
    """The process-wide rate cache created in the app lifespan."""
    return request.app.state.rate_cache


def get_rates_gateway(request: Request) -> FrankfurterClient:
    """The shared Frankfurter client created in the app lifespan."""
    return request.app.state.rates_gateway


def get_rate_service(
    db: Session = Depends(get_db),
    cache: RateCache = Depends(get_rate_cache),
) -> RateService:
    """Request-scoped rate service over the request's session and the shared cache."""
    return RateService(ExchangeRateRepository(db), cache)
