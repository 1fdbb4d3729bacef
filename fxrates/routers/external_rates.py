"""External rates router - pass-through to the Frankfurter API."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from fxrates.dependencies.auth import get_current_user
from fxrates.dependencies.services import get_rates_gateway
from fxrates.services.frankfurter_client import FrankfurterClient
from fxrates.services.shared.http_client import HTTPClientError

router = APIRouter(tags=["external-rates"], dependencies=[Depends(get_current_user)])


@router.get("/external-rates")
def get_external_rates(gateway: FrankfurterClient = Depends(get_rates_gateway)) -> Any:
    """Latest rates from the external provider, returned as received."""
    try:
        return gateway.get_latest_rates()
    except HTTPClientError as e:
        upstream = f" (upstream status {e.status_code})" if e.status_code else ""
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"External rate provider error{upstream}: {e}",
        ) from e
