"""Work Handlers — list, detail, forms and mutations for catalog works (books).

Invariants:
    - List joins every work with its author from one concurrent fan-out
    - Detail runs two fan-outs: work + copies, then author + genres of that work
    - Update form marks the work's current genres as selected
    - Deleting a work with copies is blocked by the integrity guard
"""

import logging

from catalog.core.domain_types import EntityKind
from catalog.core.entities import Work
from catalog.core.outcomes import NotFound, Outcome, Redirected, Rendered
from catalog.core.repository_protocols import CatalogStore
from catalog.core.validation import RawInput
from catalog.services.aggregate_query import by_id, gather_lookups, matching
from catalog.services.form_options import (
    BY_FAMILY_NAME, BY_NAME, BY_TITLE, load_form_options,
)
from catalog.services.handler_helpers import PathIds, index_by_id, path_id
from catalog.services.mutation_controller import MutationController

logger = logging.getLogger(__name__)

KIND = EntityKind.WORK


class WorkHandlers:
    """Work operations."""

    def __init__(self, store: CatalogStore, mutations: MutationController):
        self.store = store
        self.mutations = mutations

    async def list_all(self, raw: RawInput, path: PathIds) -> Outcome:
        results = await gather_lookups({
            "works": matching(self.store.works, sort=BY_TITLE),
            "authors": matching(self.store.authors),
        })
        authors = index_by_id(results["authors"])
        rows = [
            {"book": work, "author": authors.get(work.author)}
            for work in results["works"]
        ]
        return Rendered("book_list", {"title": "Book List", "book_list": rows})

    async def detail(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, work_id = path_id(path)
        if work_id is None:
            return NotFound(KIND, raw_id)
        results = await self._work_with_copies(work_id)
        work = results["book"]
        if work is None:
            return NotFound(KIND, raw_id)
        related = await self._populate(work)
        return Rendered("book_detail", {
            "title": "Book Detail",
            "book": work,
            **related,
            "book_instances": results["book_instances"],
        })

    async def create_form(self, raw: RawInput, path: PathIds) -> Outcome:
        options = await load_form_options(self.store, KIND)
        return Rendered("book_form", {"title": "Create Book", **options})

    async def create(self, raw: RawInput, path: PathIds) -> Outcome:
        return await self.mutations.create(KIND, raw)

    async def update_form(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, work_id = path_id(path)
        if work_id is None:
            return NotFound(KIND, raw_id)
        results = await gather_lookups({
            "book": by_id(self.store.works, work_id),
            "authors": matching(self.store.authors, sort=BY_FAMILY_NAME),
            "genres": matching(self.store.genres, sort=BY_NAME),
        })
        work = results["book"]
        if work is None:
            return NotFound(KIND, raw_id)
        return Rendered("book_form", {
            "title": "Update Book",
            **results,
            "selected_genres": [str(g) for g in work.genres],
        })

    async def update(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, _ = path_id(path)
        return await self.mutations.update(KIND, raw_id, raw)

    async def delete_form(self, raw: RawInput, path: PathIds) -> Outcome:
        _, work_id = path_id(path)
        if work_id is None:
            return Redirected(KIND)
        results = await self._work_with_copies(work_id)
        if results["book"] is None:
            return Redirected(KIND)
        return Rendered("book_delete", {"title": "Delete Book", **results})

    async def delete(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, _ = path_id(path)
        return await self.mutations.delete(KIND, raw_id)

    # --- Lookups --------------------------------------------------------------

    async def _work_with_copies(self, work_id) -> dict:
        return await gather_lookups({
            "book": by_id(self.store.works, work_id),
            "book_instances": matching(self.store.copies, {"book": work_id}),
        })

    async def _populate(self, work: Work) -> dict:
        """Author and genres of `work`; references that no longer resolve are dropped."""
        lookups = {"author": by_id(self.store.authors, work.author)}
        for genre_id in work.genres:
            lookups[f"genre:{genre_id}"] = by_id(self.store.genres, genre_id)
        results = await gather_lookups(lookups)

        genres = [
            results[f"genre:{genre_id}"] for genre_id in work.genres
            if results[f"genre:{genre_id}"] is not None
        ]
        if results["author"] is None or len(genres) != len(work.genres):
            logger.warning(
                f"Work {work.id} has dangling references",
                extra={"entity_kind": KIND.value, "entity_id": str(work.id)},
            )
        return {"author": results["author"], "genres": genres}
