"""Shared utilities for services."""

from fxrates.services.shared.http_client import HTTPClient, HTTPClientError

__all__ = [
    "HTTPClient",
    "HTTPClientError",
]
