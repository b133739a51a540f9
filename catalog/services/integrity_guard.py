"""Referential Integrity Guard — delete gating and reference resolution over the store.

Invariants:
    - can_delete never writes; it only reads the target and its dependents
    - Target and dependents are fetched concurrently in one fan-out
    - resolve_references checks every candidate reference concurrently and reports
      misses as FieldErrors
    - StorageError from any lookup propagates unchanged

Design Decisions:
    - Best-effort check at decision time: a dependent inserted between this check and
      the delete's commit is not detected here (no transactional check-and-delete)
"""

import logging
from uuid import UUID

from catalog.core.domain_types import EntityKind
from catalog.core.integrity import (
    DEPENDENT_REFERENCES,
    DeleteDecision,
    ReferenceCheck,
    decide_delete,
    unresolved_reference_errors,
)
from catalog.core.repository_protocols import CatalogStore
from catalog.core.validation import FieldError
from catalog.services.aggregate_query import by_id, gather_lookups, matching

logger = logging.getLogger(__name__)


async def find_dependents(store: CatalogStore, kind: EntityKind, entity_id: UUID) -> list:
    """Records whose foreign reference points at (kind, entity_id)."""
    edge = DEPENDENT_REFERENCES[kind]
    if edge is None:
        return []
    return await matching(store.for_kind(edge.kind), {edge.attr: entity_id})


async def can_delete(
    store: CatalogStore, kind: EntityKind, entity_id: UUID | None,
) -> DeleteDecision:
    """Allowed | Blocked(dependents) for deleting (kind, entity_id)."""
    if entity_id is None:
        return decide_delete(None, [])

    bundle = await gather_lookups({
        "target": by_id(store.for_kind(kind), entity_id),
        "dependents": find_dependents(store, kind, entity_id),
    })
    decision = decide_delete(bundle["target"], bundle["dependents"])
    logger.info(
        f"Delete check for {kind.value} {entity_id}: {type(decision).__name__}",
        extra={"entity_kind": kind.value, "entity_id": str(entity_id)},
    )
    return decision


async def resolve_references(
    store: CatalogStore, checks: list[ReferenceCheck],
) -> list[FieldError]:
    """Confirm each candidate reference exists; misses become field errors."""
    if not checks:
        return []
    bundle = await gather_lookups({
        f"{i}:{check.field}": by_id(store.for_kind(check.kind), check.entity_id)
        for i, check in enumerate(checks)
    })
    resolved = [entity is not None for entity in bundle.values()]
    return unresolved_reference_errors(checks, resolved)
