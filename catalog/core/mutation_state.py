"""Mutation State Machine — legal states and transitions for create/update/delete.

Invariants:
    - Every run starts in RECEIVED and ends in exactly one terminal state
    - Transitions outside TRANSITIONS raise InvalidTransitionError
    - A terminal state has no outgoing transitions
    - history records every state visited, in order

Design Decisions:
    - Transition table as data: the controller in services/ drives it, tests assert on it
    - NOT_FOUND and LOOKUP_FAILED extend the base flow for an update whose target
      vanished and for a storage failure during a pre-commit read
"""

from dataclasses import dataclass, field
from enum import Enum

from catalog.core.domain_types import EntityKind, MutationKind
from catalog.core.errors import InvalidTransitionError


class MutationState(str, Enum):
    RECEIVED = "received"
    NORMALIZING = "normalizing"
    VALIDATION_FAILED = "validation_failed"
    VALIDATED = "validated"
    INTEGRITY_BLOCKED = "integrity_blocked"
    INTEGRITY_OK = "integrity_ok"
    PERSISTING = "persisting"
    PERSIST_FAILED = "persist_failed"
    COMMITTED = "committed"
    NOT_FOUND = "not_found"
    LOOKUP_FAILED = "lookup_failed"


TRANSITIONS: dict[MutationState, frozenset[MutationState]] = {
    MutationState.RECEIVED: frozenset({MutationState.NORMALIZING}),
    MutationState.NORMALIZING: frozenset({
        MutationState.VALIDATION_FAILED,
        MutationState.VALIDATED,
        MutationState.LOOKUP_FAILED,
    }),
    MutationState.VALIDATED: frozenset({
        MutationState.INTEGRITY_BLOCKED,
        MutationState.INTEGRITY_OK,
        MutationState.COMMITTED,        # Genre create hit an existing name
        MutationState.LOOKUP_FAILED,
    }),
    MutationState.INTEGRITY_OK: frozenset({MutationState.PERSISTING}),
    MutationState.PERSISTING: frozenset({
        MutationState.PERSIST_FAILED,
        MutationState.COMMITTED,
        MutationState.NOT_FOUND,
    }),
    MutationState.VALIDATION_FAILED: frozenset(),
    MutationState.INTEGRITY_BLOCKED: frozenset(),
    MutationState.PERSIST_FAILED: frozenset(),
    MutationState.COMMITTED: frozenset(),
    MutationState.NOT_FOUND: frozenset(),
    MutationState.LOOKUP_FAILED: frozenset(),
}

TERMINAL_STATES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


@dataclass
class MutationRun:
    """Tracks one mutation through the state machine — pure dataclass, no IO."""
    kind: EntityKind
    mutation: MutationKind
    state: MutationState = MutationState.RECEIVED
    history: list[MutationState] = field(
        default_factory=lambda: [MutationState.RECEIVED],
    )

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, target: MutationState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(self.state.value, target.value)
        self.state = target
        self.history.append(target)
