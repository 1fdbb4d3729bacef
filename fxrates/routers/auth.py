"""Authentication router: registration and token login."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from fxrates.config import settings
from fxrates.database import get_db
from fxrates.rate_limiter import limiter
from fxrates.schemas.auth import TokenResponse, UserLogin, UserRegister
from fxrates.schemas.common import MessageResponse
from fxrates.services.auth_service import AuthService
from fxrates.services.repositories import DuplicateError, UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])

INVALID_CREDENTIALS = "Invalid username or password"


@router.post("/register", response_model=MessageResponse)
@limiter.limit(settings.auth_rate_limit)
def register(request: Request, data: UserRegister, db: Session = Depends(get_db)) -> dict:
    """Register a new user."""
    users = UserRepository(db)

    if users.find_by_username(data.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists",
        )

    # A concurrent registration can pass the check above; the unique
    # constraint catches it at insert time.
    try:
        users.create(data.username, AuthService.hash_password(data.password))
    except DuplicateError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already exists",
        ) from e

    logger.info(f"User registered: {data.username}")
    return {"message": "User registered successfully"}


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.auth_rate_limit)
def login(request: Request, data: UserLogin, db: Session = Depends(get_db)) -> TokenResponse:
    """Verify credentials and issue an access token.

    Unknown usernames and wrong passwords get the same response.
    """
    user = UserRepository(db).find_active_by_username(data.username)

    if user is None:
        # Dummy verification keeps response time independent of user existence
        AuthService.verify_password(data.password, AuthService.get_dummy_hash())
        logger.warning(f"Login failed for unknown user: {data.username}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    if not AuthService.verify_password(data.password, user.password_hash):
        logger.warning(f"Login failed for user: {data.username}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    lifetime = AuthService.access_token_lifetime()
    logger.info(f"User logged in: {user.username}")
    return TokenResponse(
        token=AuthService.create_access_token(user.username, lifetime),
        expires_in=int(lifetime.total_seconds()),
    )
