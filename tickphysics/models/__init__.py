"""Database models."""

from tickphysics.models.symbol import Symbol

__all__ = [
    "Symbol",
]
