"""Exchange rates router - CRUD and aggregates over stored rates."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from fxrates.dependencies.auth import get_current_user
from fxrates.dependencies.services import get_rate_service
from fxrates.schemas.exchange_rate import (
    AverageRateResponse,
    ExchangeRate,
    ExchangeRateBulkUpdate,
    ExchangeRateCreate,
    MinMaxRateResponse,
)
from fxrates.services.rate_service import RateService
from fxrates.services.repositories import NotFoundError

router = APIRouter(
    prefix="/rates",
    tags=["rates"],
    dependencies=[Depends(get_current_user)],
)


def _not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# Fixed paths are registered before /{rate_id} so they are not shadowed


@router.get("/average", response_model=AverageRateResponse)
def get_average_rate(
    base_currency: str = Query(..., alias="baseCurrency"),
    target_currency: str = Query(..., alias="targetCurrency"),
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: RateService = Depends(get_rate_service),
) -> AverageRateResponse:
    """Average rate for a currency pair over an inclusive date window."""
    try:
        average = service.average_rate(base_currency, target_currency, start, end)
    except NotFoundError as e:
        raise _not_found(e) from e
    return AverageRateResponse(average_rate=average)


@router.get("/minmax", response_model=MinMaxRateResponse)
def get_min_max_rate(
    base_currency: str = Query(..., alias="baseCurrency"),
    target_currency: str = Query(..., alias="targetCurrency"),
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: RateService = Depends(get_rate_service),
) -> MinMaxRateResponse:
    """Minimum and maximum rate for a currency pair over an inclusive date window."""
    try:
        min_rate, max_rate = service.min_max_rate(base_currency, target_currency, start, end)
    except NotFoundError as e:
        raise _not_found(e) from e
    return MinMaxRateResponse(min_rate=min_rate, max_rate=max_rate)


@router.get("/currency/{base_currency}", response_model=list[ExchangeRate])
def list_rates_by_base_currency(
    base_currency: str,
    service: RateService = Depends(get_rate_service),
) -> list[ExchangeRate]:
    """All rates with this base currency (empty list when none)."""
    return service.list_by_base_currency(base_currency)


@router.put("/currency/{base_currency}", status_code=status.HTTP_204_NO_CONTENT)
def update_rates_by_base_currency(
    base_currency: str,
    data: ExchangeRateBulkUpdate,
    service: RateService = Depends(get_rate_service),
) -> Response:
    """Overwrite target currency, rate and date on every rate with this base."""
    try:
        service.update_by_base_currency(base_currency, data)
    except NotFoundError as e:
        raise _not_found(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/currency/{base_currency}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rates_by_base_currency(
    base_currency: str,
    service: RateService = Depends(get_rate_service),
) -> Response:
    """Delete every rate with this base currency."""
    try:
        service.delete_by_base_currency(base_currency)
    except NotFoundError as e:
        raise _not_found(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=list[ExchangeRate])
def list_rates(service: RateService = Depends(get_rate_service)) -> list[ExchangeRate]:
    """All stored rates."""
    return service.list_rates()


@router.post("", response_model=ExchangeRate, status_code=status.HTTP_201_CREATED)
def create_rate(
    data: ExchangeRateCreate,
    response: Response,
    service: RateService = Depends(get_rate_service),
) -> ExchangeRate:
    """Store a new rate; the store assigns its id."""
    created = service.create_rate(data)
    response.headers["Location"] = f"/rates/{created.id}"
    return created


@router.get("/{rate_id}", response_model=ExchangeRate)
def get_rate(rate_id: int, service: RateService = Depends(get_rate_service)) -> ExchangeRate:
    """A single rate by id."""
    try:
        return service.get_rate(rate_id)
    except NotFoundError as e:
        raise _not_found(e) from e


@router.put("/{rate_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_rate(
    rate_id: int,
    data: ExchangeRateCreate,
    service: RateService = Depends(get_rate_service),
) -> Response:
    """Replace the fields of an existing rate, keeping its id."""
    try:
        service.update_rate(rate_id, data)
    except NotFoundError as e:
        raise _not_found(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{rate_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rate(rate_id: int, service: RateService = Depends(get_rate_service)) -> Response:
    """Delete a rate."""
    try:
        service.delete_rate(rate_id)
    except NotFoundError as e:
        raise _not_found(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
