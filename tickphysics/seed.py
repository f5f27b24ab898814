"""Idempotent seeding of the symbol registry."""

import logging

from sqlmodel import Session, select

from tickphysics.models.symbol import Symbol

logger = logging.getLogger(__name__)

DEFAULT_SYMBOLS: list[tuple[str, str | None]] = [
    ("NAS100", "Nasdaq 100 index CFD"),
    ("US30", "Dow Jones 30 index CFD"),
    ("EURUSD", "Euro / US Dollar"),
    ("GBPUSD", "British Pound / US Dollar"),
    ("XAUUSD", "Gold / US Dollar"),
    ("BTCUSD", "Bitcoin / US Dollar"),
]


def seed_symbols(
    session: Session,
    symbols: list[tuple[str, str | None]] = DEFAULT_SYMBOLS,
) -> int:
    """Insert symbols that are not registered yet. Returns how many were added."""
    existing = set(session.exec(select(Symbol.name)).all())
    added = 0
    for name, description in symbols:
        if name in existing:
            continue
        session.add(Symbol(name=name, description=description))
        existing.add(name)
        added += 1
    session.commit()
    logger.info(f"Seeded {added} symbols ({len(symbols) - added} already present)")
    return added
