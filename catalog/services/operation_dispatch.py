"""Operation Dispatch — explicit routing from operation name to handler.

Invariants:
    - Every operation->handler mapping is visible — no getattr magic, no auto-discovery
    - Unknown operations return InternalError(UnknownOperationError) (never raises)
    - StorageError from any read handler becomes InternalError with the cause unchanged
    - Every call logged with operation name and outcome type
    - Handlers instantiated per-dispatch with a shared store and mutation controller

Design Decisions:
    - Explicit dict over getattr: every mapping visible in one place
    - Split handlers by entity kind: one class per kind, eight operations each
"""

import logging
from collections.abc import Mapping

from catalog.core.errors import ErrorContext, StorageError, UnknownOperationError
from catalog.core.outcomes import InternalError, Outcome
from catalog.core.repository_protocols import CatalogStore
from catalog.core.validation import RawInput
from catalog.services.handle_author import AuthorHandlers
from catalog.services.handle_copy import CopyHandlers
from catalog.services.handle_genre import GenreHandlers
from catalog.services.handle_index import IndexHandlers
from catalog.services.handle_work import WorkHandlers
from catalog.services.mutation_controller import MutationController

logger = logging.getLogger(__name__)


class OperationDispatch:
    """Routes operation name -> handler. Explicit registration, no auto-discovery."""

    def __init__(self, store: CatalogStore):
        self.store = store
        self.mutations = MutationController(store)
        index = IndexHandlers(store)
        genre = GenreHandlers(store, self.mutations)
        author = AuthorHandlers(store, self.mutations)
        work = WorkHandlers(store, self.mutations)
        copy = CopyHandlers(store, self.mutations)

        # every mapping explicit — adding an operation requires editing this dict
        self._handlers = {
            "index": index.index,

            "genre_list": genre.list_all,
            "genre_detail": genre.detail,
            "genre_create_form": genre.create_form,
            "genre_create": genre.create,
            "genre_update_form": genre.update_form,
            "genre_update": genre.update,
            "genre_delete_form": genre.delete_form,
            "genre_delete": genre.delete,

            "author_list": author.list_all,
            "author_detail": author.detail,
            "author_create_form": author.create_form,
            "author_create": author.create,
            "author_update_form": author.update_form,
            "author_update": author.update,
            "author_delete_form": author.delete_form,
            "author_delete": author.delete,

            "work_list": work.list_all,
            "work_detail": work.detail,
            "work_create_form": work.create_form,
            "work_create": work.create,
            "work_update_form": work.update_form,
            "work_update": work.update,
            "work_delete_form": work.delete_form,
            "work_delete": work.delete,

            "copy_list": copy.list_all,
            "copy_detail": copy.detail,
            "copy_create_form": copy.create_form,
            "copy_create": copy.create,
            "copy_update_form": copy.update_form,
            "copy_update": copy.update,
            "copy_delete_form": copy.delete_form,
            "copy_delete": copy.delete,
        }

    @property
    def operations(self) -> frozenset[str]:
        return frozenset(self._handlers)

    async def execute(
        self,
        operation: str,
        raw: RawInput | None = None,
        path: Mapping[str, str] | None = None,
    ) -> Outcome:
        """Route operation to handler. Returns exactly one Outcome. Logs every call."""
        handler = self._handlers.get(operation)
        if not handler:
            outcome = InternalError(UnknownOperationError(
                operation, ErrorContext(operation=operation),
            ))
            self._log_operation(operation, outcome)
            return outcome
        try:
            outcome = await handler(raw or {}, path or {})
        except StorageError as e:
            e.context.operation = e.context.operation or operation
            outcome = InternalError(e)
        self._log_operation(operation, outcome)
        return outcome

    def _log_operation(self, operation: str, outcome: Outcome) -> None:
        level = logging.ERROR if isinstance(outcome, InternalError) else logging.INFO
        logger.log(
            level,
            f"Operation '{operation}' -> {type(outcome).__name__}",
            extra={
                "operation": operation,
                "error_code": (
                    outcome.cause.code if isinstance(outcome, InternalError) else None
                ),
            },
        )
