"""Validation Pipeline — field rules, normalization and per-entity schemas.

Tests cover:
    - Required fields: all failures reported, in declaration order
    - Trim then escape then length check
    - Multi-valued coercion (absent / scalar / list) with de-duplication
    - Dates, choices and malformed references
    - Failed fields keep their normalized text for redisplay
"""

from datetime import date
from uuid import uuid4

import pytest

from catalog.core.domain_types import CopyStatus, EntityKind
from catalog.core.entity_schemas import (
    AUTHOR_SCHEMA, COPY_SCHEMA, GENRE_SCHEMA, WORK_SCHEMA,
)
from catalog.core.entities import GenreDraft, WorkDraft
from catalog.core.validation import (
    FieldError, FieldRule, coerce_many, normalize_text, order_errors, parse_date,
    validate,
)


def _work_input(**overrides):
    raw = {
        "title": "The Name of the Wind",
        "author": str(uuid4()),
        "summary": "A summary",
        "isbn": "9781473211896",
    }
    raw.update(overrides)
    return raw


# --- normalize_text / coerce_many / parse_date --------------------------------

def test_normalize_text_trims_then_escapes():
    assert normalize_text("  <b>Fantasy</b>  ") == "&lt;b&gt;Fantasy&lt;/b&gt;"


def test_normalize_text_escapes_quotes():
    assert normalize_text("O'Brien \"x\"") == "O&#x27;Brien &quot;x&quot;"


def test_normalize_text_without_escape_only_trims():
    assert normalize_text(" <1990-01-01> ", escape=False) == "<1990-01-01>"


def test_normalize_text_none_is_empty():
    assert normalize_text(None) == ""


@pytest.mark.parametrize("raw, expected", [
    (None, []),
    ("a", ["a"]),
    (["a", "b"], ["a", "b"]),
    ([], []),
])
def test_coerce_many(raw, expected):
    assert coerce_many(raw) == expected


def test_parse_date_accepts_date_and_datetime():
    assert parse_date("1983-10-14") == date(1983, 10, 14)
    assert parse_date("1983-10-14T08:30:00") == date(1983, 10, 14)


def test_parse_date_rejects_garbage():
    assert parse_date("14/10/1983") is None
    assert parse_date("1983-02-30") is None


# --- validate -----------------------------------------------------------------

def test_missing_required_fields_are_all_reported():
    result = validate(_work_input(title="", summary=""), WORK_SCHEMA.fields)
    assert not result.ok
    assert [e.field for e in result.errors] == ["title", "summary"]
    assert result.errors[0].message == "Title must not be empty."


def test_whitespace_only_counts_as_missing():
    result = validate({"name": "   "}, GENRE_SCHEMA.fields)
    assert [e.message for e in result.errors] == ["Genre name required."]


def test_genre_name_over_limit_is_rejected():
    result = validate({"name": "x" * 101}, GENRE_SCHEMA.fields)
    assert result.errors[0].field == "name"
    assert "100" in result.errors[0].message


def test_length_is_measured_after_escaping():
    # 97 chars + "&" -> "&amp;" (5 chars) = 102 chars after escaping
    result = validate({"name": "x" * 97 + "&"}, GENRE_SCHEMA.fields)
    assert not result.ok


def test_name_at_limit_is_accepted():
    result = validate({"name": "x" * 100}, GENRE_SCHEMA.fields)
    assert result.ok
    assert result.values["name"] == "x" * 100


def test_only_first_failure_per_field_is_reported():
    rule = FieldRule("k", "k", "required", max_length=1)
    result = validate({"k": ""}, [rule])
    assert len(result.errors) == 1


def test_failed_field_keeps_normalized_text():
    result = validate({"name": "  " + "y" * 120 + " "}, GENRE_SCHEMA.fields)
    assert result.values["name"] == "y" * 120


def test_scalar_field_given_a_list_takes_first_element():
    result = validate({"name": ["Fantasy", "Horror"]}, GENRE_SCHEMA.fields)
    assert result.values["name"] == "Fantasy"


def test_genre_omitted_is_empty_tuple():
    result = validate(_work_input(), WORK_SCHEMA.fields)
    assert result.ok
    assert result.values["genres"] == ()


def test_genre_scalar_is_one_element_tuple():
    genre_id = uuid4()
    result = validate(_work_input(genre=str(genre_id)), WORK_SCHEMA.fields)
    assert result.values["genres"] == (genre_id,)


def test_genre_list_keeps_all_in_order_without_duplicates():
    a, b = uuid4(), uuid4()
    result = validate(
        _work_input(genre=[str(a), str(b), str(a)]), WORK_SCHEMA.fields,
    )
    assert result.values["genres"] == (a, b)


def test_genre_ids_differing_only_in_case_collapse_to_one():
    genre_id = uuid4()
    result = validate(
        _work_input(genre=[str(genre_id), str(genre_id).upper()]), WORK_SCHEMA.fields,
    )
    assert result.ok
    assert result.values["genres"] == (genre_id,)


@pytest.mark.parametrize("blank", ["", "   ", ["", " "]])
def test_blank_genre_selection_counts_as_omitted(blank):
    result = validate(_work_input(genre=blank), WORK_SCHEMA.fields)
    assert result.ok
    assert result.values["genres"] == ()


def test_blank_items_dropped_from_genre_list():
    genre_id = uuid4()
    result = validate(_work_input(genre=["", str(genre_id)]), WORK_SCHEMA.fields)
    assert result.values["genres"] == (genre_id,)


def test_malformed_reference_is_not_found_error():
    result = validate(_work_input(author="nope"), WORK_SCHEMA.fields)
    assert result.errors == (FieldError("author", "Author not found", "nope"),)


def test_malformed_genre_reference_is_not_found_error():
    result = validate(_work_input(genre=["nope"]), WORK_SCHEMA.fields)
    assert result.errors[0].field == "genre"
    assert result.errors[0].message == "Genre not found"


def test_author_dates_optional():
    result = validate(
        {"first_name": "Ursula", "family_name": "Le Guin"}, AUTHOR_SCHEMA.fields,
    )
    assert result.ok
    assert result.values["date_of_birth"] is None
    assert result.values["date_of_death"] is None


def test_author_invalid_date_is_reported():
    result = validate(
        {"first_name": "Ursula", "family_name": "Le Guin", "date_of_birth": "soon"},
        AUTHOR_SCHEMA.fields,
    )
    assert [e.field for e in result.errors] == ["date_of_birth"]
    assert result.errors[0].message == "Invalid date of birth"


def test_death_before_birth_is_accepted():
    result = validate(
        {
            "first_name": "A", "family_name": "B",
            "date_of_birth": "2000-01-01", "date_of_death": "1900-01-01",
        },
        AUTHOR_SCHEMA.fields,
    )
    assert result.ok


def test_copy_status_defaults_to_maintenance():
    result = validate({"book": str(uuid4()), "imprint": "Gollancz"}, COPY_SCHEMA.fields)
    assert result.ok
    assert result.values["status"] is CopyStatus.MAINTENANCE


def test_copy_status_outside_choices_is_rejected():
    result = validate(
        {"book": str(uuid4()), "imprint": "Gollancz", "status": "Lost"},
        COPY_SCHEMA.fields,
    )
    assert [e.field for e in result.errors] == ["status"]


def test_copy_due_back_parsed():
    result = validate(
        {"book": str(uuid4()), "imprint": "Gollancz", "due_back": "2026-11-01"},
        COPY_SCHEMA.fields,
    )
    assert result.values["due_back"] == date(2026, 11, 1)


# --- schemas ------------------------------------------------------------------

def test_build_draft_from_successful_result():
    result = validate({"name": "Fantasy"}, GENRE_SCHEMA.fields)
    assert GENRE_SCHEMA.build_draft(result) == GenreDraft(name="Fantasy")


def test_work_draft_uses_domain_attribute_names():
    genre_id = uuid4()
    raw = _work_input(genre=[str(genre_id)])
    draft = WORK_SCHEMA.build_draft(validate(raw, WORK_SCHEMA.fields))
    assert isinstance(draft, WorkDraft)
    assert draft.genres == (genre_id,)


def test_reference_fields_name_their_target_kind():
    refs = {rule.key: rule.references for rule in WORK_SCHEMA.reference_fields()}
    assert refs == {"author": EntityKind.AUTHOR, "genre": EntityKind.GENRE}


def test_order_errors_follows_field_declaration():
    errors = [FieldError("isbn", "x"), FieldError("title", "y")]
    ordered = order_errors(WORK_SCHEMA.fields, errors)
    assert [e.field for e in ordered] == ["title", "isbn"]


def test_field_error_to_dict_stringifies_values():
    uid = uuid4()
    assert FieldError("genre", "m", (uid,)).to_dict() == {
        "field": "genre", "message": "m", "value": [str(uid)],
    }
