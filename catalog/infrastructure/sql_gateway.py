"""SQL Gateway — SQLAlchemy implementation of the catalog Repository protocol.

Invariants:
    - Each operation opens its own session: concurrent lookups from one fan-out
      never share an AsyncSession
    - ORM rows are mapped to frozen core entities before leaving this module
    - "No such id" is None (find/replace) or False (remove); every other failure
      is StorageError, raised by DatabaseSessionManager.session()
    - Writes commit before returning; a failed commit leaves nothing behind

Design Decisions:
    - One generic SqlRepository driven by a per-kind ModelMapping instead of four
      repository classes: the four collections differ only in columns
    - Filters are declared per kind as column-expression factories; an unknown
      filter key is a programming error (ValueError), not a storage failure
    - Work.genres filter uses relationship .any() so "works in genre X" is one query
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from catalog.core.domain_types import (
    AuthorId, CopyId, CopyStatus, EntityKind, GenreId, WorkId,
)
from catalog.core.entities import (
    Author, AuthorDraft, Copy, CopyDraft, Genre, GenreDraft, Work, WorkDraft,
)
from catalog.core.repository_protocols import Filter, Sort
from catalog.models.author import AuthorModel
from catalog.models.copy import CopyModel
from catalog.models.genre import GenreModel
from catalog.models.work import WorkModel

if TYPE_CHECKING:
    from catalog.infrastructure.database import DatabaseSessionManager

logger = logging.getLogger(__name__)


# ─── ROW ↔ ENTITY MAPPING ───────────────────────────────────────

def _genre_entity(row: GenreModel) -> Genre:
    return Genre(id=GenreId(row.id), name=row.name)


def _author_entity(row: AuthorModel) -> Author:
    return Author(
        id=AuthorId(row.id),
        first_name=row.first_name,
        family_name=row.family_name,
        date_of_birth=row.date_of_birth,
        date_of_death=row.date_of_death,
    )


def _work_entity(row: WorkModel) -> Work:
    return Work(
        id=WorkId(row.id),
        title=row.title,
        author=AuthorId(row.author_id),
        summary=row.summary,
        isbn=row.isbn,
        genres=tuple(GenreId(genre.id) for genre in row.genres),
    )


def _copy_entity(row: CopyModel) -> Copy:
    return Copy(
        id=CopyId(row.id),
        book=WorkId(row.book_id),
        imprint=row.imprint,
        status=CopyStatus(row.status),
        due_back=row.due_back,
    )


async def _write_genre(db: AsyncSession, row: GenreModel, draft: GenreDraft) -> None:
    row.name = draft.name


async def _write_author(db: AsyncSession, row: AuthorModel, draft: AuthorDraft) -> None:
    row.first_name = draft.first_name
    row.family_name = draft.family_name
    row.date_of_birth = draft.date_of_birth
    row.date_of_death = draft.date_of_death


async def _write_work(db: AsyncSession, row: WorkModel, draft: WorkDraft) -> None:
    row.title = draft.title
    row.author_id = draft.author
    row.summary = draft.summary
    row.isbn = draft.isbn
    genres: list[GenreModel] = []
    if draft.genres:
        result = await db.execute(
            select(GenreModel).where(GenreModel.id.in_(draft.genres)),
        )
        genres = list(result.scalars().all())
    row.genres = genres


async def _write_copy(db: AsyncSession, row: CopyModel, draft: CopyDraft) -> None:
    row.book_id = draft.book
    row.imprint = draft.imprint
    row.status = CopyStatus(draft.status).value
    row.due_back = draft.due_back


@dataclass(frozen=True)
class ModelMapping:
    """How one entity kind is stored: ORM model, converters, filters, sort columns."""
    model: type
    to_entity: Callable[[Any], Any]
    write: Callable[[AsyncSession, Any, Any], Awaitable[None]]
    filters: dict[str, Callable[[object], ColumnElement]] = field(default_factory=dict)
    sortable: frozenset[str] = frozenset()


MAPPINGS: dict[EntityKind, ModelMapping] = {
    EntityKind.GENRE: ModelMapping(
        model=GenreModel,
        to_entity=_genre_entity,
        write=_write_genre,
        filters={"name": lambda v: GenreModel.name == v},
        sortable=frozenset({"name"}),
    ),
    EntityKind.AUTHOR: ModelMapping(
        model=AuthorModel,
        to_entity=_author_entity,
        write=_write_author,
        sortable=frozenset({"family_name", "first_name", "date_of_birth"}),
    ),
    EntityKind.WORK: ModelMapping(
        model=WorkModel,
        to_entity=_work_entity,
        write=_write_work,
        filters={
            "author": lambda v: WorkModel.author_id == v,
            "genres": lambda v: WorkModel.genres.any(GenreModel.id == v),
        },
        sortable=frozenset({"title", "isbn"}),
    ),
    EntityKind.COPY: ModelMapping(
        model=CopyModel,
        to_entity=_copy_entity,
        write=_write_copy,
        filters={
            "book": lambda v: CopyModel.book_id == v,
            "status": lambda v: CopyModel.status == CopyStatus(v).value,
        },
        sortable=frozenset({"imprint", "status", "due_back"}),
    ),
}


# ─── REPOSITORY ─────────────────────────────────────────────────

class SqlRepository:
    """Repository over one table, one session per call."""

    def __init__(self, db_manager: "DatabaseSessionManager", kind: EntityKind):
        self._db_manager = db_manager
        self.kind = kind
        self._mapping = MAPPINGS[kind]

    def _conditions(self, filter: Filter | None) -> list[ColumnElement]:
        conditions = []
        for key, value in (filter or {}).items():
            build = self._mapping.filters.get(key)
            if build is None:
                raise ValueError(f"Unsupported {self.kind.value} filter: {key}")
            conditions.append(build(value))
        return conditions

    def _order_by(self, sort: Sort | None) -> list:
        if sort is None:
            return []
        if sort.field not in self._mapping.sortable:
            raise ValueError(f"Unsupported {self.kind.value} sort: {sort.field}")
        column = getattr(self._mapping.model, sort.field)
        return [column.desc() if sort.descending else column.asc()]

    async def find_by_id(self, entity_id: UUID):
        async with self._db_manager.session() as db:
            row = await db.get(self._mapping.model, entity_id)
            return self._mapping.to_entity(row) if row is not None else None

    async def find_many(
        self, filter: Filter | None = None, sort: Sort | None = None,
    ) -> list:
        stmt = (
            select(self._mapping.model)
            .where(*self._conditions(filter))
            .order_by(*self._order_by(sort))
        )
        async with self._db_manager.session() as db:
            result = await db.execute(stmt)
            return [self._mapping.to_entity(row) for row in result.scalars().all()]

    async def count(self, filter: Filter | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(self._mapping.model)
            .where(*self._conditions(filter))
        )
        async with self._db_manager.session() as db:
            return int((await db.execute(stmt)).scalar_one())

    async def insert(self, draft):
        async with self._db_manager.session() as db:
            row = self._mapping.model()
            await self._mapping.write(db, row, draft)
            db.add(row)
            await db.commit()
            logger.info(
                f"Inserted {self.kind.value}",
                extra={"entity_kind": self.kind.value, "entity_id": str(row.id)},
            )
            return self._mapping.to_entity(row)

    async def replace(self, entity_id: UUID, draft):
        async with self._db_manager.session() as db:
            row = await db.get(self._mapping.model, entity_id)
            if row is None:
                return None
            await self._mapping.write(db, row, draft)
            await db.commit()
            logger.info(
                f"Replaced {self.kind.value}",
                extra={"entity_kind": self.kind.value, "entity_id": str(entity_id)},
            )
            return self._mapping.to_entity(row)

    async def remove(self, entity_id: UUID) -> bool:
        async with self._db_manager.session() as db:
            row = await db.get(self._mapping.model, entity_id)
            if row is None:
                return False
            await db.delete(row)
            await db.commit()
            logger.info(
                f"Removed {self.kind.value}",
                extra={"entity_kind": self.kind.value, "entity_id": str(entity_id)},
            )
            return True


class SqlCatalogStore:
    """The four SQL-backed collections sharing one session manager."""

    def __init__(self, db_manager: "DatabaseSessionManager"):
        self.works = SqlRepository(db_manager, EntityKind.WORK)
        self.authors = SqlRepository(db_manager, EntityKind.AUTHOR)
        self.genres = SqlRepository(db_manager, EntityKind.GENRE)
        self.copies = SqlRepository(db_manager, EntityKind.COPY)

    def for_kind(self, kind: EntityKind) -> SqlRepository:
        return {
            EntityKind.WORK: self.works,
            EntityKind.AUTHOR: self.authors,
            EntityKind.GENRE: self.genres,
            EntityKind.COPY: self.copies,
        }[kind]
