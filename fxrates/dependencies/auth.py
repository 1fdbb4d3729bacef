"""Authentication dependencies for protected routes."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from fxrates.database import get_db
from fxrates.models.user import User
from fxrates.services.auth_service import AuthService
from fxrates.services.repositories import UserRepository

# auto_error=False so a missing header yields 401 rather than HTTPBearer's 403
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Get current authenticated user from JWT token.

    Usage:
        @router.get("/protected")
        def protected_route(user: User = Depends(get_current_user)):
            return {"username": user.username}
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = AuthService.decode_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Invalid or expired token")

    user = UserRepository(db).find_active_by_username(payload["sub"])
    if not user:
        raise _unauthorized("User not found")

    return user
