"""Business logic services."""

from fxrates.services.auth_service import AuthService
from fxrates.services.frankfurter_client import FrankfurterClient
from fxrates.services.rate_cache import CacheKeys, RateCache
from fxrates.services.rate_service import RateService

__all__ = [
    "AuthService",
    "CacheKeys",
    "FrankfurterClient",
    "RateCache",
    "RateService",
]
