"""User data access layer."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fxrates.models import User

from .exceptions import DuplicateError

logger = logging.getLogger(__name__)


class UserRepository:
    """Centralized user data access.

    Naming conventions:
    - find_* : Query that may return None
    - get_* : Query that raises exception if missing
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_username(self, username: str) -> User | None:
        """Find user by username (case-sensitive)."""
        return self._db.query(User).filter(User.username == username).first()

    def find_active_by_username(self, username: str) -> User | None:
        """Find active user by username."""
        return (
            self._db.query(User)
            .filter(User.username == username, User.is_active.is_(True))
            .first()
        )

    def create(self, username: str, password_hash: str) -> User:
        """Insert and commit a new user.

        Raises:
            DuplicateError: If the username is already taken at the store level
        """
        user = User(username=username, password_hash=password_hash)
        self._db.add(user)
        try:
            self._db.commit()
        except IntegrityError as e:
            self._db.rollback()
            logger.warning(f"Username already taken at insert: {username}")
            raise DuplicateError("User", "username", username) from e
        self._db.refresh(user)
        return user
