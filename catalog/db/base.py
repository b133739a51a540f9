"""SQLAlchemy Declarative Base — shared base class for the catalog ORM models.

Invariants:
    - All models inherit from Base
    - Base.metadata is the single source of truth for the catalog tables

Design Decisions:
    - Separate file for Base: models import it without importing each other
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all catalog ORM models."""
    pass
