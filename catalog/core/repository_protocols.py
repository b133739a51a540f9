"""Boundary Protocols — contracts between core and the storage shell.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Every gateway failure surfaces as StorageError; "no such id" is None/False
    - Implementations provided by the shell and passed explicitly (no registry)

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: implementations do IO; core pure functions that decide on
      the results are never async themselves
    - Filter is a plain mapping: scalar attributes match by equality, collection
      attributes (Work.genres) match when they contain the value
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, TypeVar
from uuid import UUID

from catalog.core.domain_types import EntityKind

E = TypeVar("E", covariant=True)
D = TypeVar("D", contravariant=True)

Filter = Mapping[str, object]


@dataclass(frozen=True)
class Sort:
    field: str
    descending: bool = False


class Repository(Protocol[E, D]):
    """Contract for one entity collection — implemented by shell."""
    async def find_by_id(self, entity_id: UUID) -> E | None: ...
    async def find_many(
        self, filter: Filter | None = None, sort: Sort | None = None,
    ) -> list[E]: ...
    async def count(self, filter: Filter | None = None) -> int: ...
    async def insert(self, draft: D) -> E: ...
    async def replace(self, entity_id: UUID, draft: D) -> E | None: ...
    async def remove(self, entity_id: UUID) -> bool: ...


class CatalogStore(Protocol):
    """The four collections, handed to every controller by its caller."""
    works: Repository
    authors: Repository
    genres: Repository
    copies: Repository

    def for_kind(self, kind: EntityKind) -> Repository: ...
