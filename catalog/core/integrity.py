"""Referential Integrity Rules — pure decisions for deletes and reference resolution.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - An absent delete target is always Allowed (idempotent delete)
    - A present target with any dependent is Blocked, and carries every dependent
    - Unresolvable references become FieldErrors, never storage errors

Design Decisions:
    - Dependency edges declared once in DEPENDENT_REFERENCES: the guard in services/
      fans out lookups from this table instead of hard-coding per-kind queries
"""

from dataclasses import dataclass, field
from uuid import UUID

from catalog.core.domain_types import EntityKind
from catalog.core.entities import Entity
from catalog.core.validation import FieldError, reference_not_found_message


@dataclass(frozen=True)
class DependentReference:
    """`kind` records point at the guarded entity through filter key `attr`."""
    kind: EntityKind
    attr: str


# parent kind -> records that must not be orphaned by its deletion
DEPENDENT_REFERENCES: dict[EntityKind, DependentReference | None] = {
    EntityKind.GENRE: DependentReference(EntityKind.WORK, "genres"),
    EntityKind.AUTHOR: DependentReference(EntityKind.WORK, "author"),
    EntityKind.WORK: DependentReference(EntityKind.COPY, "book"),
    EntityKind.COPY: None,
}


@dataclass(frozen=True)
class DeleteAllowed:
    target: Entity | None


@dataclass(frozen=True)
class DeleteBlocked:
    target: Entity
    dependents: tuple[Entity, ...] = field(default_factory=tuple)


DeleteDecision = DeleteAllowed | DeleteBlocked


@dataclass(frozen=True)
class ReferenceCheck:
    """A candidate foreign reference submitted under input key `field`."""
    field: str
    kind: EntityKind
    entity_id: UUID


def decide_delete(target: Entity | None, dependents: list[Entity]) -> DeleteDecision:
    """Allowed when the target is gone or nothing references it."""
    if target is None or not dependents:
        return DeleteAllowed(target)
    return DeleteBlocked(target, tuple(dependents))


def unresolved_reference_errors(
    checks: list[ReferenceCheck], resolved: list[bool],
) -> list[FieldError]:
    """First unresolved reference per field becomes that field's error."""
    errors = []
    failed_fields = set()
    for check, exists in zip(checks, resolved):
        if not exists and check.field not in failed_fields:
            failed_fields.add(check.field)
            errors.append(FieldError(
                check.field,
                reference_not_found_message(check.kind),
                str(check.entity_id),
            ))
    return errors
