"""ORM Models — SQLAlchemy declarative models for the four catalog tables.

Invariants:
    - All models inherit from Base (db/base.py)
    - ORM rows never leave infrastructure/: the SQL gateway maps them to core entities

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from catalog.models.author import AuthorModel  # noqa: F401
from catalog.models.genre import GenreModel  # noqa: F401
from catalog.models.work import WorkModel, work_genres  # noqa: F401
from catalog.models.copy import CopyModel  # noqa: F401
