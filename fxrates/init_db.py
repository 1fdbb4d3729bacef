"""Database initialization script with optional seed data.

Usage:
    python -m fxrates.init_db           # create tables
    python -m fxrates.init_db --seed    # create tables and seed sample data
"""

import argparse
import logging
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from fxrates.database import Base, SessionLocal, engine
from fxrates.models import Currency, ExchangeRate, User
from fxrates.services.auth_service import AuthService

logger = logging.getLogger(__name__)

SEED_CURRENCIES = {
    "EUR": "Euro",
    "USD": "US Dollar",
    "GBP": "British Pound",
    "JPY": "Japanese Yen",
    "CHF": "Swiss Franc",
}

DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo-password"


def create_tables(bind: Engine = engine) -> None:
    """Create all database tables."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=bind)
    logger.info("Tables created successfully")


def seed_data(db: Session) -> None:
    """Seed currencies, a week of EUR rates and a demo user. Skips rows that exist."""
    existing_codes = {c.code for c in db.query(Currency).all()}
    for code, name in SEED_CURRENCIES.items():
        if code not in existing_codes:
            db.add(Currency(code=code, name=name))

    if db.query(ExchangeRate).count() == 0:
        start = datetime(2024, 1, 1)
        for day in range(7):
            db.add(
                ExchangeRate(
                    base_currency="EUR",
                    target_currency="USD",
                    rate=Decimal("1.10") + Decimal(day) / Decimal(100),
                    date=start + timedelta(days=day),
                )
            )

    if db.query(User).filter(User.username == DEMO_USERNAME).first() is None:
        db.add(
            User(
                username=DEMO_USERNAME,
                password_hash=AuthService.hash_password(DEMO_PASSWORD),
            )
        )

    db.commit()
    logger.info("Seed data written")


def main() -> None:
    parser = argparse.ArgumentParser(description="Initialize the exchange rate database")
    parser.add_argument("--seed", action="store_true", help="Insert sample data")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    create_tables()
    if args.seed:
        db = SessionLocal()
        try:
            seed_data(db)
        finally:
            db.close()


if __name__ == "__main__":
    main()
