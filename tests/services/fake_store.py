"""In-memory CatalogStore — repository protocol over plain dicts, for service tests.

Invariants:
    - Same filter semantics as the SQL gateway: scalar attrs match by equality,
      tuple attrs (Work.genres) match when they contain the value
    - Every write is recorded in store.writes as (kind, op, id)
    - fail_on(kind, method) makes that method raise StorageError until cleared
"""

import asyncio
import dataclasses
from uuid import uuid4

from catalog.core.domain_types import (
    AuthorId, CopyId, EntityKind, GenreId, WorkId,
)
from catalog.core.entities import Author, Copy, Genre, Work
from catalog.core.errors import StorageError

_ENTITY_TYPES = {
    EntityKind.GENRE: (Genre, GenreId),
    EntityKind.AUTHOR: (Author, AuthorId),
    EntityKind.WORK: (Work, WorkId),
    EntityKind.COPY: (Copy, CopyId),
}


def _matches(entity, filter) -> bool:
    for key, expected in (filter or {}).items():
        actual = getattr(entity, key)
        if isinstance(actual, tuple):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


class FakeRepository:
    def __init__(self, store: "FakeStore", kind: EntityKind):
        self._store = store
        self.kind = kind
        self.rows: dict = {}

    async def _enter(self, method: str) -> None:
        await asyncio.sleep(0)
        self._store.calls.append((self.kind, method))
        if (self.kind, method) in self._store.failures:
            raise StorageError(f"injected {method} failure", method)

    async def find_by_id(self, entity_id):
        await self._enter("find_by_id")
        return self.rows.get(entity_id)

    async def find_many(self, filter=None, sort=None) -> list:
        await self._enter("find_many")
        found = [e for e in self.rows.values() if _matches(e, filter)]
        if sort is not None:
            found.sort(key=lambda e: getattr(e, sort.field), reverse=sort.descending)
        return found

    async def count(self, filter=None) -> int:
        await self._enter("count")
        return sum(1 for e in self.rows.values() if _matches(e, filter))

    async def insert(self, draft):
        await self._enter("insert")
        entity_type, id_type = _ENTITY_TYPES[self.kind]
        entity = entity_type(id=id_type(uuid4()), **dataclasses.asdict(draft))
        self.rows[entity.id] = entity
        self._store.writes.append((self.kind, "insert", entity.id))
        return entity

    async def replace(self, entity_id, draft):
        await self._enter("replace")
        if entity_id not in self.rows:
            return None
        entity_type, _ = _ENTITY_TYPES[self.kind]
        entity = entity_type(id=entity_id, **dataclasses.asdict(draft))
        self.rows[entity_id] = entity
        self._store.writes.append((self.kind, "replace", entity_id))
        return entity

    async def remove(self, entity_id) -> bool:
        await self._enter("remove")
        if entity_id not in self.rows:
            return False
        del self.rows[entity_id]
        self._store.writes.append((self.kind, "remove", entity_id))
        return True

    def seed(self, entity):
        self.rows[entity.id] = entity
        return entity


class FakeStore:
    """Four in-memory collections plus call/write/failure bookkeeping."""

    def __init__(self):
        self.calls: list[tuple[EntityKind, str]] = []
        self.writes: list[tuple[EntityKind, str, object]] = []
        self.failures: set[tuple[EntityKind, str]] = set()
        self.works = FakeRepository(self, EntityKind.WORK)
        self.authors = FakeRepository(self, EntityKind.AUTHOR)
        self.genres = FakeRepository(self, EntityKind.GENRE)
        self.copies = FakeRepository(self, EntityKind.COPY)

    def for_kind(self, kind: EntityKind) -> FakeRepository:
        return {
            EntityKind.WORK: self.works,
            EntityKind.AUTHOR: self.authors,
            EntityKind.GENRE: self.genres,
            EntityKind.COPY: self.copies,
        }[kind]

    def fail_on(self, kind: EntityKind, method: str) -> None:
        self.failures.add((kind, method))


# --- Seed helpers -------------------------------------------------------------

def add_genre(store: FakeStore, name: str = "Fantasy") -> Genre:
    return store.genres.seed(Genre(id=GenreId(uuid4()), name=name))


def add_author(
    store: FakeStore, first_name: str = "Patrick", family_name: str = "Rothfuss",
    **dates,
) -> Author:
    return store.authors.seed(Author(
        id=AuthorId(uuid4()), first_name=first_name, family_name=family_name, **dates,
    ))


def add_work(
    store: FakeStore, author: Author, title: str = "The Name of the Wind",
    genres: tuple = (),
) -> Work:
    return store.works.seed(Work(
        id=WorkId(uuid4()), title=title, author=author.id,
        summary="A summary", isbn="9781473211896",
        genres=tuple(g.id for g in genres),
    ))


def add_copy(store: FakeStore, work: Work, imprint: str = "Gollancz, 2011", **fields) -> Copy:
    return store.copies.seed(Copy(id=CopyId(uuid4()), book=work.id, imprint=imprint, **fields))
