"""Mutation Controller — create/update/delete flows over the in-memory store.

Tests cover:
    - Genre create: new name persisted, existing name returned without a write
    - Validation failures: every field reported, draft and form options attached
    - Dangling references reported as field errors, nothing written
    - Update of a vanished record is NotFound
    - Delete blocked by dependents leaves the record in place
    - Storage failures become InternalError with the cause unchanged
    - Every run ends in exactly one terminal state
"""

from uuid import uuid4

import pytest

from catalog.core.domain_types import CopyStatus, EntityKind
from catalog.core.errors import StorageError
from catalog.core.mutation_state import MutationState
from catalog.core.outcomes import (
    IntegrityBlocked, InternalError, NotFound, Redirected, ValidationFailed,
)
from catalog.services.mutation_controller import MutationController
from tests.services.fake_store import (
    FakeStore, add_author, add_copy, add_genre, add_work,
)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def controller(store):
    return MutationController(store)


def _work_input(writer, **overrides):
    raw = {
        "title": "The Dispossessed",
        "author": str(writer.id),
        "summary": "An ambiguous utopia",
        "isbn": "9780061054884",
    }
    raw.update(overrides)
    return raw


# --- Genre create -------------------------------------------------------------

async def test_new_genre_is_created_and_findable_by_name(store, controller):
    outcome = await controller.create(EntityKind.GENRE, {"name": "Science Fiction"})

    assert isinstance(outcome, Redirected)
    found = await store.genres.find_many({"name": "Science Fiction"})
    assert [g.id for g in found] == [outcome.target_id]
    assert controller.last_run.state is MutationState.COMMITTED


async def test_existing_genre_name_returns_existing_without_write(store, controller):
    genre = add_genre(store, "Fantasy")

    outcome = await controller.create(EntityKind.GENRE, {"name": "  Fantasy "})

    assert outcome == Redirected(EntityKind.GENRE, genre.id)
    assert store.writes == []
    assert controller.last_run.history[-2:] == [
        MutationState.VALIDATED, MutationState.COMMITTED,
    ]


async def test_genre_uniqueness_is_case_sensitive(store, controller):
    add_genre(store, "Fantasy")
    outcome = await controller.create(EntityKind.GENRE, {"name": "fantasy"})
    assert isinstance(outcome, Redirected)
    assert len(store.writes) == 1


async def test_genre_name_is_stored_escaped(store, controller):
    outcome = await controller.create(EntityKind.GENRE, {"name": "<i>Noir</i>"})
    genre = await store.genres.find_by_id(outcome.target_id)
    assert genre.name == "&lt;i&gt;Noir&lt;/i&gt;"


async def test_empty_genre_name_is_rejected_with_draft(store, controller):
    outcome = await controller.create(EntityKind.GENRE, {"name": "   "})

    assert isinstance(outcome, ValidationFailed)
    assert outcome.view == "genre_form"
    assert outcome.draft == {"name": ""}
    assert [e.message for e in outcome.errors] == ["Genre name required."]
    assert store.writes == []
    assert controller.last_run.state is MutationState.VALIDATION_FAILED


# --- Work create / update -----------------------------------------------------

async def test_all_missing_required_fields_reported(store, controller):
    author = add_author(store)
    outcome = await controller.create(
        EntityKind.WORK, _work_input(author, title="", summary=""),
    )
    assert isinstance(outcome, ValidationFailed)
    assert [e.field for e in outcome.errors] == ["title", "summary"]


async def test_rejected_work_carries_form_options_and_selection(store, controller):
    author = add_author(store)
    genre = add_genre(store)
    outcome = await controller.create(
        EntityKind.WORK, _work_input(author, isbn="", genre=str(genre.id)),
    )
    assert isinstance(outcome, ValidationFailed)
    assert outcome.view == "book_form"
    assert outcome.context["authors"] == [author]
    assert outcome.context["genres"] == [genre]
    assert outcome.context["selected_genres"] == [str(genre.id)]
    assert outcome.draft["title"] == "The Dispossessed"


async def test_work_with_unknown_author_is_field_error(store, controller):
    outcome = await controller.create(
        EntityKind.WORK, _work_input(add_author(store), author=str(uuid4())),
    )
    assert isinstance(outcome, ValidationFailed)
    assert [(e.field, e.message) for e in outcome.errors] == [("author", "Author not found")]
    assert store.writes == []


async def test_work_with_unknown_genre_is_field_error(store, controller):
    author = add_author(store)
    real = add_genre(store)
    outcome = await controller.create(
        EntityKind.WORK, _work_input(author, genre=[str(real.id), str(uuid4())]),
    )
    assert [e.field for e in outcome.errors] == ["genre"]


async def test_work_genre_ids_differing_in_case_are_stored_once(store, controller):
    author = add_author(store)
    genre = add_genre(store)
    outcome = await controller.create(
        EntityKind.WORK, _work_input(author, genre=[str(genre.id), str(genre.id).upper()]),
    )
    work = await store.works.find_by_id(outcome.target_id)
    assert work.genres == (genre.id,)


async def test_reference_errors_ordered_with_field_errors(store, controller):
    outcome = await controller.create(
        EntityKind.WORK, _work_input(add_author(store), author=str(uuid4()), isbn=""),
    )
    assert [e.field for e in outcome.errors] == ["author", "isbn"]


@pytest.mark.parametrize("genre_input, expected_count", [
    (None, 0),
    ("scalar", 1),
    ("list", 2),
])
async def test_work_genre_input_shapes(store, controller, genre_input, expected_count):
    author = add_author(store)
    g1, g2 = add_genre(store, "A"), add_genre(store, "B")
    raw = _work_input(author)
    if genre_input == "scalar":
        raw["genre"] = str(g1.id)
    elif genre_input == "list":
        raw["genre"] = [str(g1.id), str(g2.id)]

    outcome = await controller.create(EntityKind.WORK, raw)

    work = await store.works.find_by_id(outcome.target_id)
    assert len(work.genres) == expected_count


async def test_update_replaces_record_keeping_id(store, controller):
    author = add_author(store)
    work = add_work(store, author)
    outcome = await controller.update(
        EntityKind.WORK, str(work.id), _work_input(author, title="New Title"),
    )
    assert outcome == Redirected(EntityKind.WORK, work.id)
    assert (await store.works.find_by_id(work.id)).title == "New Title"


async def test_update_of_missing_record_is_not_found(store, controller):
    author = add_author(store)
    missing = str(uuid4())
    outcome = await controller.update(EntityKind.WORK, missing, _work_input(author))
    assert outcome == NotFound(EntityKind.WORK, missing)
    assert controller.last_run.state is MutationState.NOT_FOUND
    assert store.writes == []


async def test_update_with_malformed_id_is_not_found(store, controller):
    outcome = await controller.update(EntityKind.GENRE, "garbage", {"name": "X"})
    assert outcome == NotFound(EntityKind.GENRE, "garbage")


async def test_rejected_update_keeps_id_in_draft(store, controller):
    genre = add_genre(store)
    outcome = await controller.update(EntityKind.GENRE, str(genre.id), {"name": ""})
    assert outcome.draft["id"] == str(genre.id)


async def test_genre_update_skips_uniqueness_check(store, controller):
    add_genre(store, "Fantasy")
    other = add_genre(store, "Horror")
    outcome = await controller.update(EntityKind.GENRE, str(other.id), {"name": "Fantasy"})
    assert outcome == Redirected(EntityKind.GENRE, other.id)
    assert store.writes == [(EntityKind.GENRE, "replace", other.id)]


# --- Copy / Author ------------------------------------------------------------

async def test_copy_create_defaults_status(store, controller):
    work = add_work(store, add_author(store))
    outcome = await controller.create(
        EntityKind.COPY, {"book": str(work.id), "imprint": "Harper, 1994"},
    )
    copy = await store.copies.find_by_id(outcome.target_id)
    assert copy.status is CopyStatus.MAINTENANCE
    assert copy.due_back is None


async def test_copy_with_unknown_book_reloads_book_list(store, controller):
    work = add_work(store, add_author(store))
    outcome = await controller.create(
        EntityKind.COPY, {"book": str(uuid4()), "imprint": "Harper"},
    )
    assert isinstance(outcome, ValidationFailed)
    assert outcome.view == "bookinstance_form"
    assert outcome.context["book_list"] == [work]


async def test_author_create(store, controller):
    outcome = await controller.create(EntityKind.AUTHOR, {
        "first_name": "Ursula", "family_name": "Le Guin",
        "date_of_birth": "1929-10-21", "date_of_death": "2018-01-22",
    })
    author = await store.authors.find_by_id(outcome.target_id)
    assert author.lifespan == "Oct 21, 1929 - Jan 22, 2018"


# --- Delete -------------------------------------------------------------------

async def test_delete_of_referenced_genre_is_blocked(store, controller):
    genre = add_genre(store)
    author = add_author(store)
    w1 = add_work(store, author, "A", genres=(genre,))
    w2 = add_work(store, author, "B", genres=(genre,))

    outcome = await controller.delete(EntityKind.GENRE, str(genre.id))

    assert isinstance(outcome, IntegrityBlocked)
    assert outcome.target == genre
    assert set(outcome.dependents) == {w1, w2}
    assert await store.genres.find_by_id(genre.id) == genre
    assert store.writes == []
    assert controller.last_run.state is MutationState.INTEGRITY_BLOCKED


async def test_delete_of_unreferenced_genre_removes_it(store, controller):
    genre = add_genre(store)
    outcome = await controller.delete(EntityKind.GENRE, str(genre.id))
    assert outcome == Redirected(EntityKind.GENRE)
    assert await store.genres.find_by_id(genre.id) is None


async def test_delete_of_missing_record_is_idempotent(store, controller):
    outcome = await controller.delete(EntityKind.COPY, str(uuid4()))
    assert outcome == Redirected(EntityKind.COPY)
    assert store.writes == []


async def test_delete_with_malformed_id_redirects_without_remove(store, controller):
    outcome = await controller.delete(EntityKind.AUTHOR, "garbage")
    assert outcome == Redirected(EntityKind.AUTHOR)
    assert (EntityKind.AUTHOR, "remove") not in store.calls


async def test_delete_work_with_copies_is_blocked(store, controller):
    work = add_work(store, add_author(store))
    copy = add_copy(store, work)
    outcome = await controller.delete(EntityKind.WORK, str(work.id))
    assert outcome.dependents == (copy,)


# --- Storage failures ---------------------------------------------------------

async def test_insert_failure_is_internal_error_with_cause(store, controller):
    store.fail_on(EntityKind.GENRE, "insert")
    outcome = await controller.create(EntityKind.GENRE, {"name": "Poetry"})
    assert isinstance(outcome, InternalError)
    assert isinstance(outcome.cause, StorageError)
    assert outcome.cause.operation == "insert"
    assert controller.last_run.state is MutationState.PERSIST_FAILED


async def test_insert_failure_is_not_retried(store, controller):
    store.fail_on(EntityKind.GENRE, "insert")
    await controller.create(EntityKind.GENRE, {"name": "Poetry"})
    assert store.calls.count((EntityKind.GENRE, "insert")) == 1


async def test_reference_lookup_failure_is_lookup_failed(store, controller):
    author = add_author(store)
    store.fail_on(EntityKind.AUTHOR, "find_by_id")
    outcome = await controller.create(EntityKind.WORK, _work_input(author))
    assert isinstance(outcome, InternalError)
    assert controller.last_run.state is MutationState.LOOKUP_FAILED
    assert store.writes == []


async def test_uniqueness_lookup_failure_is_lookup_failed(store, controller):
    store.fail_on(EntityKind.GENRE, "find_many")
    outcome = await controller.create(EntityKind.GENRE, {"name": "Poetry"})
    assert isinstance(outcome, InternalError)
    assert controller.last_run.state is MutationState.LOOKUP_FAILED


async def test_delete_check_failure_is_lookup_failed(store, controller):
    genre = add_genre(store)
    store.fail_on(EntityKind.WORK, "find_many")
    outcome = await controller.delete(EntityKind.GENRE, str(genre.id))
    assert isinstance(outcome, InternalError)
    assert await store.genres.find_by_id(genre.id) == genre


async def test_remove_failure_is_persist_failed(store, controller):
    genre = add_genre(store)
    store.fail_on(EntityKind.GENRE, "remove")
    outcome = await controller.delete(EntityKind.GENRE, str(genre.id))
    assert isinstance(outcome, InternalError)
    assert controller.last_run.state is MutationState.PERSIST_FAILED


async def test_every_run_ends_terminal(store, controller):
    await controller.create(EntityKind.GENRE, {"name": ""})
    assert controller.last_run.finished
    await controller.create(EntityKind.GENRE, {"name": "Essay"})
    assert controller.last_run.finished
    await controller.delete(EntityKind.GENRE, "nope")
    assert controller.last_run.finished
