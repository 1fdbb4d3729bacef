"""Frankfurter API client for latest published exchange rates.

Thin pass-through: one attempt, no caching, payload returned as parsed.
"""

import logging
from typing import Any

import httpx

from fxrates.services.shared.http_client import HTTPClient

logger = logging.getLogger(__name__)


class FrankfurterClient(HTTPClient):
    """Client for https://api.frankfurter.app."""

    def __init__(
        self,
        base_url: str = "https://api.frankfurter.app/",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            max_retries=1,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def get_latest_rates(self) -> Any:
        """Fetch the latest rates payload unmodified.

        Raises:
            HTTPClientError: On upstream HTTP errors, timeouts, or connection failures
        """
        logger.debug("Fetching latest rates from Frankfurter")
        return self.get_json("latest")
