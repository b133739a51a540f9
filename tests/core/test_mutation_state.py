"""Mutation State Machine — legal transitions, terminal states and history."""

import pytest

from catalog.core.domain_types import EntityKind, MutationKind
from catalog.core.errors import InvalidTransitionError
from catalog.core.mutation_state import (
    TERMINAL_STATES, TRANSITIONS, MutationRun, MutationState,
)


def test_run_starts_received_with_history():
    run = MutationRun(EntityKind.GENRE, MutationKind.CREATE)
    assert run.state is MutationState.RECEIVED
    assert run.history == [MutationState.RECEIVED]
    assert not run.finished


def test_happy_path_reaches_committed():
    run = MutationRun(EntityKind.WORK, MutationKind.CREATE)
    for state in (
        MutationState.NORMALIZING,
        MutationState.VALIDATED,
        MutationState.INTEGRITY_OK,
        MutationState.PERSISTING,
        MutationState.COMMITTED,
    ):
        run.advance(state)
    assert run.finished
    assert run.history[-1] is MutationState.COMMITTED
    assert len(run.history) == 6


def test_cannot_skip_validation():
    run = MutationRun(EntityKind.WORK, MutationKind.CREATE)
    run.advance(MutationState.NORMALIZING)
    with pytest.raises(InvalidTransitionError):
        run.advance(MutationState.PERSISTING)


def test_terminal_states_have_no_exits():
    run = MutationRun(EntityKind.GENRE, MutationKind.DELETE)
    run.advance(MutationState.NORMALIZING)
    run.advance(MutationState.VALIDATED)
    run.advance(MutationState.INTEGRITY_BLOCKED)
    assert run.finished
    with pytest.raises(InvalidTransitionError):
        run.advance(MutationState.INTEGRITY_OK)


def test_existing_genre_shortcut_is_legal():
    assert MutationState.COMMITTED in TRANSITIONS[MutationState.VALIDATED]


def test_terminal_state_set():
    assert TERMINAL_STATES == {
        MutationState.VALIDATION_FAILED,
        MutationState.INTEGRITY_BLOCKED,
        MutationState.PERSIST_FAILED,
        MutationState.COMMITTED,
        MutationState.NOT_FOUND,
        MutationState.LOOKUP_FAILED,
    }


def test_every_state_has_a_transition_entry():
    assert set(TRANSITIONS) == set(MutationState)


def test_invalid_transition_error_is_internal():
    run = MutationRun(EntityKind.COPY, MutationKind.UPDATE)
    with pytest.raises(InvalidTransitionError) as exc:
        run.advance(MutationState.COMMITTED)
    assert exc.value.http_status == 500
