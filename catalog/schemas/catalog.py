"""Catalog Schemas — Pydantic response models for the four catalog entities.

Invariants:
    - Built from core entities via from_attributes (no hand-copied fields)
    - Derived display values (name, lifespan, formatted dates) included so clients
      never re-implement date formatting

Design Decisions:
    - Response-only: inbound mutation payloads stay raw maps and go through the
      validation pipeline, so field errors come back in one envelope with the draft
"""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from catalog.core.domain_types import CopyStatus


class GenreOut(BaseModel):
    """Genre response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class AuthorOut(BaseModel):
    """Author response — includes display name and lifespan."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str
    family_name: str
    date_of_birth: date | None = None
    date_of_death: date | None = None
    name: str
    lifespan: str
    date_of_birth_formatted: str
    date_of_death_formatted: str


class WorkOut(BaseModel):
    """Work response — author and genres as identifiers."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    author: UUID
    summary: str
    isbn: str
    genres: list[UUID] = []


class CopyOut(BaseModel):
    """Copy response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    book: UUID
    imprint: str
    status: CopyStatus
    due_back: date | None = None
    due_back_formatted: str
