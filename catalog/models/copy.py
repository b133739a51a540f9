"""Copy ORM — persists a physical copy of a work.

Invariants:
    - Always references exactly one work (book_id FK, non-nullable)
    - status holds a CopyStatus value; defaults to Maintenance
"""

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.domain_types import CopyStatus
from catalog.db.base import Base


class CopyModel(Base):
    """Copy row."""
    __tablename__ = "copies"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("works.id"), nullable=False, index=True,
    )
    imprint: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CopyStatus.MAINTENANCE.value,
    )
    due_back: Mapped[date | None] = mapped_column(Date, nullable=True)
