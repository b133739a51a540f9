"""Mutation Controller — validate -> check -> persist -> report, per mutation kind.

Invariants:
    - Every call drives one MutationRun from RECEIVED to a terminal state
    - At most one gateway write per call (insert, replace or remove)
    - A rejected draft is never persisted; it comes back with every field error
      and the form options needed to redisplay it
    - Genre create with an existing normalized name commits WITHOUT writing and
      reports the existing record (idempotent-by-value)
    - StorageError is never retried; it is returned unchanged inside InternalError

Design Decisions:
    - One controller for all four kinds: per-kind differences live in ENTITY_SCHEMAS
      and DEPENDENT_REFERENCES, the flow lives here
    - Reference resolution folds into NORMALIZING so a dangling author/genre/book is a
      field error next to the other field errors
"""

import logging

from catalog.core.domain_types import EntityKind, MutationKind, parse_entity_id
from catalog.core.entity_schemas import ENTITY_SCHEMAS, EntitySchema
from catalog.core.errors import StorageError
from catalog.core.integrity import DeleteBlocked, ReferenceCheck
from catalog.core.mutation_state import MutationRun, MutationState
from catalog.core.outcomes import (
    IntegrityBlocked,
    InternalError,
    NotFound,
    Outcome,
    Redirected,
    ValidationFailed,
)
from catalog.core.repository_protocols import CatalogStore
from catalog.core.validation import RawInput, ValidationResult, order_errors, validate
from catalog.services.form_options import load_form_options
from catalog.services.integrity_guard import can_delete, resolve_references

logger = logging.getLogger(__name__)


class MutationController:
    """Create, update and delete for every entity kind over an explicit store."""

    def __init__(self, store: CatalogStore):
        self.store = store
        self.last_run: MutationRun | None = None

    async def create(self, kind: EntityKind, raw: RawInput) -> Outcome:
        run = self._start(kind, MutationKind.CREATE)
        return await self._save(run, raw, raw_id=None)

    async def update(self, kind: EntityKind, raw_id: str, raw: RawInput) -> Outcome:
        run = self._start(kind, MutationKind.UPDATE)
        return await self._save(run, raw, raw_id=raw_id)

    async def delete(self, kind: EntityKind, raw_id: str) -> Outcome:
        run = self._start(kind, MutationKind.DELETE)
        repo = self.store.for_kind(kind)

        run.advance(MutationState.NORMALIZING)
        entity_id = parse_entity_id(raw_id)
        run.advance(MutationState.VALIDATED)

        try:
            decision = await can_delete(self.store, kind, entity_id)
        except StorageError as e:
            return self._fail(run, MutationState.LOOKUP_FAILED, e)

        if isinstance(decision, DeleteBlocked):
            run.advance(MutationState.INTEGRITY_BLOCKED)
            self._log_terminal(run, raw_id)
            return IntegrityBlocked(kind, decision.target, decision.dependents)

        run.advance(MutationState.INTEGRITY_OK)
        run.advance(MutationState.PERSISTING)
        try:
            if entity_id is not None:
                await repo.remove(entity_id)
        except StorageError as e:
            return self._fail(run, MutationState.PERSIST_FAILED, e)

        run.advance(MutationState.COMMITTED)
        self._log_terminal(run, raw_id)
        return Redirected(kind)

    # --- Create / update ------------------------------------------------------

    async def _save(self, run: MutationRun, raw: RawInput, raw_id: str | None) -> Outcome:
        kind = run.kind
        schema = ENTITY_SCHEMAS[kind]
        repo = self.store.for_kind(kind)

        run.advance(MutationState.NORMALIZING)
        result = validate(raw, schema.fields)
        try:
            reference_errors = await resolve_references(
                self.store, _reference_checks(schema, result),
            )
        except StorageError as e:
            return self._fail(run, MutationState.LOOKUP_FAILED, e)

        errors = list(result.errors) + reference_errors
        if errors:
            run.advance(MutationState.VALIDATION_FAILED)
            self._log_terminal(run, raw_id)
            return await self._rejected(schema, result, errors, raw_id)

        run.advance(MutationState.VALIDATED)
        draft = schema.build_draft(result)

        if run.mutation is MutationKind.CREATE and schema.unique_attr:
            value = getattr(draft, schema.unique_attr)
            try:
                existing = await repo.find_many({schema.unique_attr: value})
            except StorageError as e:
                return self._fail(run, MutationState.LOOKUP_FAILED, e)
            if existing:
                run.advance(MutationState.COMMITTED)
                logger.info(
                    f"{kind.value} '{value}' already exists; returning existing record",
                    extra={"entity_kind": kind.value, "entity_id": str(existing[0].id)},
                )
                return Redirected(kind, existing[0].id)

        run.advance(MutationState.INTEGRITY_OK)
        run.advance(MutationState.PERSISTING)
        entity_id = parse_entity_id(raw_id) if raw_id is not None else None
        try:
            if run.mutation is MutationKind.CREATE:
                entity = await repo.insert(draft)
            else:
                entity = await repo.replace(entity_id, draft) if entity_id else None
        except StorageError as e:
            return self._fail(run, MutationState.PERSIST_FAILED, e)

        if entity is None:
            run.advance(MutationState.NOT_FOUND)
            self._log_terminal(run, raw_id)
            return NotFound(kind, str(raw_id))

        run.advance(MutationState.COMMITTED)
        self._log_terminal(run, str(entity.id))
        return Redirected(kind, entity.id)

    async def _rejected(
        self,
        schema: EntitySchema,
        result: ValidationResult,
        errors: list,
        raw_id: str | None,
    ) -> Outcome:
        draft = dict(result.values)
        if raw_id is not None:
            draft["id"] = raw_id
        try:
            context = await load_form_options(self.store, schema.kind, result.values)
        except StorageError as e:
            logger.error(
                f"Could not reload {schema.kind.value} form options: {e}",
                extra={"entity_kind": schema.kind.value, "error_code": e.code},
            )
            return InternalError(e)
        return ValidationFailed(
            schema.form_view, draft, order_errors(schema.fields, errors), context,
        )

    # --- Bookkeeping ----------------------------------------------------------

    def _start(self, kind: EntityKind, mutation: MutationKind) -> MutationRun:
        self.last_run = MutationRun(kind, mutation)
        return self.last_run

    def _fail(self, run: MutationRun, state: MutationState, error: StorageError) -> Outcome:
        run.advance(state)
        logger.error(
            f"{run.mutation.value} {run.kind.value} failed in storage: {error.message}",
            extra={
                "entity_kind": run.kind.value,
                "state": state.value,
                "error_code": error.code,
            },
        )
        return InternalError(error)

    def _log_terminal(self, run: MutationRun, entity_id: str | None) -> None:
        logger.info(
            f"{run.mutation.value} {run.kind.value} -> {run.state.value}",
            extra={
                "entity_kind": run.kind.value,
                "entity_id": entity_id,
                "state": run.state.value,
            },
        )


def _reference_checks(schema: EntitySchema, result: ValidationResult) -> list[ReferenceCheck]:
    """References that parsed cleanly and still need an existence check."""
    failed = {error.field for error in result.errors}
    checks = []
    for rule in schema.reference_fields():
        if rule.key in failed:
            continue
        value = result.values.get(rule.attr)
        ids = value if rule.many else (value,)
        for entity_id in ids or ():
            if entity_id is not None:
                checks.append(ReferenceCheck(rule.key, rule.references, entity_id))
    return checks
