"""Entity Schemas — field rules, draft builders and form views per entity kind.

Invariants:
    - Field order here IS the order validation failures are reported in
    - Every reference field names the entity kind it must resolve to
    - unique_attr is only honoured on create (idempotent-by-value Genre creation)

Design Decisions:
    - Explicit dict over class-level registration: every schema visible in one place
    - Raw keys follow the catalog form names ("genre" for the multi-valued Work field,
      "book" for a Copy's Work) while draft attributes use domain names
"""

from dataclasses import dataclass

from catalog.core.domain_types import CopyStatus, EntityKind, MAX_NAME_LENGTH
from catalog.core.entities import AuthorDraft, CopyDraft, Draft, GenreDraft, WorkDraft
from catalog.core.validation import FieldRule, FieldType, ValidationResult


@dataclass(frozen=True)
class EntitySchema:
    kind: EntityKind
    fields: tuple[FieldRule, ...]
    draft_type: type
    form_view: str
    unique_attr: str | None = None

    def build_draft(self, result: ValidationResult) -> Draft:
        """Build the typed draft from a successful validation result."""
        return self.draft_type(**result.values)

    def reference_fields(self) -> tuple[FieldRule, ...]:
        return tuple(rule for rule in self.fields if rule.references is not None)


GENRE_SCHEMA = EntitySchema(
    kind=EntityKind.GENRE,
    fields=(
        FieldRule(
            "name", "name", "Genre name required.",
            max_length=MAX_NAME_LENGTH,
            too_long_message=f"Genre name must be at most {MAX_NAME_LENGTH} characters.",
        ),
    ),
    draft_type=GenreDraft,
    form_view="genre_form",
    unique_attr="name",
)

AUTHOR_SCHEMA = EntitySchema(
    kind=EntityKind.AUTHOR,
    fields=(
        FieldRule(
            "first_name", "first_name", "First name must be specified.",
            max_length=MAX_NAME_LENGTH,
            too_long_message=f"First name must be at most {MAX_NAME_LENGTH} characters.",
        ),
        FieldRule(
            "family_name", "family_name", "Family name must be specified.",
            max_length=MAX_NAME_LENGTH,
            too_long_message=f"Family name must be at most {MAX_NAME_LENGTH} characters.",
        ),
        FieldRule(
            "date_of_birth", "date_of_birth", "Invalid date of birth",
            required=False, field_type=FieldType.DATE, escape=False,
        ),
        FieldRule(
            "date_of_death", "date_of_death", "Invalid date of death",
            required=False, field_type=FieldType.DATE, escape=False,
        ),
    ),
    draft_type=AuthorDraft,
    form_view="author_form",
)

WORK_SCHEMA = EntitySchema(
    kind=EntityKind.WORK,
    fields=(
        FieldRule("title", "title", "Title must not be empty."),
        FieldRule(
            "author", "author", "Author must not be empty.",
            field_type=FieldType.REFERENCE, references=EntityKind.AUTHOR,
        ),
        FieldRule("summary", "summary", "Summary must not be empty."),
        FieldRule("isbn", "isbn", "ISBN must not be empty"),
        FieldRule(
            "genre", "genres", "Invalid genre",
            required=False, many=True, default=(),
            field_type=FieldType.REFERENCE, references=EntityKind.GENRE,
        ),
    ),
    draft_type=WorkDraft,
    form_view="book_form",
)

COPY_SCHEMA = EntitySchema(
    kind=EntityKind.COPY,
    fields=(
        FieldRule(
            "book", "book", "Book must be specified",
            field_type=FieldType.REFERENCE, references=EntityKind.WORK,
        ),
        FieldRule("imprint", "imprint", "Imprint must be specified"),
        FieldRule(
            "status", "status", "Invalid status",
            required=False, default=CopyStatus.MAINTENANCE,
            field_type=FieldType.CHOICE, choices=CopyStatus,
        ),
        FieldRule(
            "due_back", "due_back", "Invalid date",
            required=False, field_type=FieldType.DATE, escape=False,
        ),
    ),
    draft_type=CopyDraft,
    form_view="bookinstance_form",
)

ENTITY_SCHEMAS: dict[EntityKind, EntitySchema] = {
    EntityKind.GENRE: GENRE_SCHEMA,
    EntityKind.AUTHOR: AUTHOR_SCHEMA,
    EntityKind.WORK: WORK_SCHEMA,
    EntityKind.COPY: COPY_SCHEMA,
}
