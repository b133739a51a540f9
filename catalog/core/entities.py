"""Catalog Entities — immutable records for works, authors, genres and copies.

Invariants:
    - Every entity is frozen; updates replace the record, the id never changes
    - Drafts carry the mutable fields only; the gateway assigns ids on insert
    - Derived values (display name, lifespan, formatted dates) are computed, never stored
    - Work.genres is an ordered tuple without duplicates

Design Decisions:
    - Plain dataclasses instead of ORM-bound records: core stays free of IO and
      the gateway maps rows to these types at the boundary
    - Medium date format ("Oct 14, 1983") built by hand: strftime %d zero-pads
"""

from dataclasses import dataclass
from datetime import date

from catalog.core.domain_types import (
    AuthorId, CopyId, CopyStatus, GenreId, WorkId,
)

UNKNOWN_DATE = "Unknown"


def format_medium_date(value: date | None, missing: str = UNKNOWN_DATE) -> str:
    """Medium-length date for display, or `missing` when absent."""
    if value is None:
        return missing
    return f"{value:%b} {value.day}, {value.year}"


def format_iso_date(value: date | None) -> str:
    return value.isoformat() if value else ""


# ─── Drafts ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class GenreDraft:
    name: str


@dataclass(frozen=True)
class AuthorDraft:
    first_name: str
    family_name: str
    date_of_birth: date | None = None
    date_of_death: date | None = None


@dataclass(frozen=True)
class WorkDraft:
    title: str
    author: AuthorId
    summary: str
    isbn: str
    genres: tuple[GenreId, ...] = ()


@dataclass(frozen=True)
class CopyDraft:
    book: WorkId
    imprint: str
    status: CopyStatus = CopyStatus.MAINTENANCE
    due_back: date | None = None


# ─── Entities ────────────────────────────────────────────────────

@dataclass(frozen=True)
class Genre:
    id: GenreId
    name: str


@dataclass(frozen=True)
class Author:
    id: AuthorId
    first_name: str
    family_name: str
    date_of_birth: date | None = None
    date_of_death: date | None = None

    @property
    def name(self) -> str:
        return f"{self.family_name}, {self.first_name}"

    @property
    def date_of_birth_formatted(self) -> str:
        return format_medium_date(self.date_of_birth)

    @property
    def date_of_death_formatted(self) -> str:
        return format_medium_date(self.date_of_death)

    @property
    def date_of_birth_iso(self) -> str:
        return format_iso_date(self.date_of_birth)

    @property
    def date_of_death_iso(self) -> str:
        return format_iso_date(self.date_of_death)

    @property
    def lifespan(self) -> str:
        return f"{self.date_of_birth_formatted} - {self.date_of_death_formatted}"


@dataclass(frozen=True)
class Work:
    id: WorkId
    title: str
    author: AuthorId
    summary: str
    isbn: str
    genres: tuple[GenreId, ...] = ()


@dataclass(frozen=True)
class Copy:
    id: CopyId
    book: WorkId
    imprint: str
    status: CopyStatus = CopyStatus.MAINTENANCE
    due_back: date | None = None

    @property
    def due_back_formatted(self) -> str:
        return format_medium_date(self.due_back, missing="")

    @property
    def due_back_iso(self) -> str:
        return format_iso_date(self.due_back)


Entity = Genre | Author | Work | Copy
Draft = GenreDraft | AuthorDraft | WorkDraft | CopyDraft
