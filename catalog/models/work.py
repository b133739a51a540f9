"""Work ORM — persists a catalog work and its genre links.

Invariants:
    - Always references exactly one author (author_id FK, non-nullable)
    - Genre links live in work_genres; (work_id, genre_id) is the primary key
    - Genres loaded eagerly (selectin) so entity mapping never lazy-loads

Design Decisions:
    - FKs without ON DELETE CASCADE: deletes of referenced rows are gated by the
      integrity guard first, and a lost race surfaces as a storage error
"""

import uuid

from sqlalchemy import Column, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.db.base import Base

work_genres = Table(
    "work_genres",
    Base.metadata,
    Column("work_id", Uuid(as_uuid=True), ForeignKey("works.id"), primary_key=True),
    Column("genre_id", Uuid(as_uuid=True), ForeignKey("genres.id"), primary_key=True),
)


class WorkModel(Base):
    """Work row."""
    __tablename__ = "works"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    isbn: Mapped[str] = mapped_column(String(255), nullable=False)
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("authors.id"), nullable=False, index=True,
    )

    # Relationships
    genres: Mapped[list["GenreModel"]] = relationship(
        "GenreModel", secondary=work_genres, lazy="selectin",
    )
