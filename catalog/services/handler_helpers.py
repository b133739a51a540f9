"""Handler Helpers — shared plumbing for the per-entity handler classes.

Invariants:
    - Pure helpers, no IO
    - A malformed path id resolves to None, which handlers report as NotFound
"""

from collections.abc import Iterable, Mapping
from uuid import UUID

from catalog.core.domain_types import parse_entity_id

PathIds = Mapping[str, str]


def path_id(path: PathIds) -> tuple[str, UUID | None]:
    """(raw id as given, parsed id or None)."""
    raw = str(path.get("id", ""))
    return raw, parse_entity_id(raw)


def index_by_id(entities: Iterable) -> dict[UUID, object]:
    return {entity.id: entity for entity in entities}
