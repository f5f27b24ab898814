"""Symbol model: registry of tradable instruments."""

from sqlmodel import SQLModel, Field


class Symbol(SQLModel, table=True):
    __tablename__ = "symbols"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=64, unique=True, index=True)  # e.g. "NAS100"
    description: str | None = Field(default=None, max_length=255)
