"""Operation Outcomes — the tagged result every dispatch operation returns.

Invariants:
    - Exactly one Outcome per operation call; no exception crosses this boundary
      except programming errors
    - ValidationFailed always carries the rejected draft values for redisplay
    - IntegrityBlocked always carries the full dependent list, not a boolean
    - InternalError carries the underlying cause unchanged

Design Decisions:
    - Frozen dataclasses + a Union alias: callers match on type, the HTTP binding
      maps each type to one status code
"""

from dataclasses import dataclass, field
from uuid import UUID

from catalog.core.domain_types import EntityKind
from catalog.core.entities import Entity
from catalog.core.errors import CatalogError
from catalog.core.validation import FieldError


@dataclass(frozen=True)
class Rendered:
    view: str
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Redirected:
    """Points at a single record, or at the collection when target_id is None."""
    kind: EntityKind
    target_id: UUID | None = None


@dataclass(frozen=True)
class NotFound:
    kind: EntityKind
    entity_id: str


@dataclass(frozen=True)
class ValidationFailed:
    view: str
    draft: dict
    errors: tuple[FieldError, ...]
    context: dict = field(default_factory=dict)


@dataclass(frozen=True)
class IntegrityBlocked:
    kind: EntityKind
    target: Entity
    dependents: tuple[Entity, ...]


@dataclass(frozen=True)
class InternalError:
    cause: CatalogError


Outcome = Rendered | Redirected | NotFound | ValidationFailed | IntegrityBlocked | InternalError
