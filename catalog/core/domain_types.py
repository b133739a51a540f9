"""Domain Types — identity, enum and bound types shared across the catalog.

Invariants:
    - WorkId, AuthorId, GenreId, CopyId wrap UUIDs — never use bare UUID in domain logic
    - Raw identifiers from the presentation layer are parsed once via parse_entity_id()
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

WorkId = NewType("WorkId", UUID)
AuthorId = NewType("AuthorId", UUID)
GenreId = NewType("GenreId", UUID)
CopyId = NewType("CopyId", UUID)


# ─── Bounds ──────────────────────────────────────────────────────

MAX_NAME_LENGTH = 100


# ─── Enums ───────────────────────────────────────────────────────

class EntityKind(str, Enum):
    """The four catalog record types. Value doubles as the URL segment."""
    WORK = "work"
    AUTHOR = "author"
    GENRE = "genre"
    COPY = "copy"

    @property
    def plural(self) -> str:
        return _PLURALS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_plural(cls, plural: str) -> "EntityKind | None":
        for kind, name in _PLURALS.items():
            if name == plural:
                return kind
        return None


_PLURALS = {
    EntityKind.WORK: "works",
    EntityKind.AUTHOR: "authors",
    EntityKind.GENRE: "genres",
    EntityKind.COPY: "copies",
}

# Presentation labels follow the catalog's public vocabulary (a Work is a "Book")
_LABELS = {
    EntityKind.WORK: "Book",
    EntityKind.AUTHOR: "Author",
    EntityKind.GENRE: "Genre",
    EntityKind.COPY: "Copy",
}


class CopyStatus(str, Enum):
    """Loan state of a physical copy."""
    AVAILABLE = "Available"
    MAINTENANCE = "Maintenance"
    LOANED = "Loaned"
    RESERVED = "Reserved"


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def parse_entity_id(raw: object) -> UUID | None:
    """Parse an opaque identifier. Malformed input resolves to nothing."""
    if isinstance(raw, UUID):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return UUID(raw.strip())
    except ValueError:
        return None
