"""Currency model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from fxrates.database import Base


class Currency(Base):
    """Reference list of known currency codes."""

    __tablename__ = "currencies"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    code: Mapped[str] = mapped_column(String(3), unique=True)
    name: Mapped[str | None] = mapped_column(String(100))

    def __repr__(self) -> str:
        return f"<Currency(code='{self.code}')>"
