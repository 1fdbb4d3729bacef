"""Exchange Rate model - represents currency exchange rates."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from fxrates.database import Base


class ExchangeRate(Base):
    """Exchange rate from a base currency to a target currency at a point in time."""

    __tablename__ = "exchange_rates"
    __table_args__ = (
        Index("idx_rates_base_target_date", "base_currency", "target_currency", "date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    base_currency: Mapped[str] = mapped_column(String(3), index=True)
    target_currency: Mapped[str] = mapped_column(String(3))
    rate: Mapped[Decimal] = mapped_column(Numeric(18, 6))
    date: Mapped[datetime] = mapped_column(DateTime)

    def __repr__(self) -> str:
        return f"<ExchangeRate({self.base_currency}/{self.target_currency}={self.rate} on {self.date})>"
