"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from fxrates import __version__
from fxrates.config import settings
from fxrates.rate_limiter import limiter
from fxrates.services.frankfurter_client import FrankfurterClient
from fxrates.services.rate_cache import RateCache

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared rate cache and external rates client."""
    app.state.rate_cache = RateCache(
        absolute_ttl=settings.cache_absolute_ttl_seconds,
        sliding_ttl=settings.cache_sliding_ttl_seconds,
    )
    app.state.rates_gateway = FrankfurterClient(
        base_url=settings.external_rates_base_url,
        timeout=settings.external_rates_timeout,
    )
    logger.info(
        f"Rate cache ready (absolute TTL {settings.cache_absolute_ttl_seconds}s, "
        f"sliding TTL {settings.cache_sliding_ttl_seconds}s)"
    )

    yield

    app.state.rates_gateway.close()
    logger.info("Shutting down")


# Create FastAPI app
app = FastAPI(
    title="FX Rates API",
    description="Exchange rate storage, aggregates and external rate lookup",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add rate limiter to app state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Map record store failures to 503 instead of an unhandled 500."""
    logger.error(f"Record store error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Record store unavailable"},
    )


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "FX Rates API", "version": __version__, "status": "running"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers
from fxrates.routers import auth, external_rates, rates  # noqa: E402

app.include_router(auth.router)
app.include_router(rates.router)
app.include_router(external_rates.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("fxrates.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
