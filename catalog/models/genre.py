"""Genre ORM — persists a classification tag.

Invariants:
    - name is non-nullable, max 100 chars
    - No unique constraint on name: duplicate prevention happens in the mutation
      controller's pre-commit lookup, which returns the existing row instead of failing
"""

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.domain_types import MAX_NAME_LENGTH
from catalog.db.base import Base


class GenreModel(Base):
    """Genre row."""
    __tablename__ = "genres"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH), nullable=False, index=True,
    )
