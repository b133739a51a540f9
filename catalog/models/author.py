"""Author ORM — persists an author of catalog works.

Invariants:
    - id is UUID primary key (client-side default)
    - first_name and family_name are non-nullable, max 100 chars
    - birth/death dates are optional and unordered (no check constraint)
"""

import uuid
from datetime import date

from sqlalchemy import Date, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.domain_types import MAX_NAME_LENGTH
from catalog.db.base import Base


class AuthorModel(Base):
    """Author row."""
    __tablename__ = "authors"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    first_name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    family_name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_of_death: Mapped[date | None] = mapped_column(Date, nullable=True)
