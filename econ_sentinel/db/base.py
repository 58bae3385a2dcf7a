"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - to_record() exposes every mapped column by its column name

Design Decisions:
    - Separate file for Base: avoids circular imports between models (ADR: SQLAlchemy best practice)
    - Ids are opaque strings: upstream economies hand us their own user and item ids
"""

import uuid

from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """Base class for all economy ORM models."""

    def to_record(self) -> dict:
        return {
            column.name: getattr(self, column.key)
            for column in self.__mapper__.columns
        }
