"""Copy Handlers — list, detail, forms and mutations for physical copies.

Invariants:
    - List joins every copy with its work from one concurrent fan-out
    - A copy has no dependents, so its delete is never blocked
"""

from catalog.core.domain_types import EntityKind
from catalog.core.outcomes import NotFound, Outcome, Redirected, Rendered
from catalog.core.repository_protocols import CatalogStore
from catalog.core.validation import RawInput
from catalog.services.aggregate_query import by_id, gather_lookups, matching
from catalog.services.form_options import BY_TITLE, load_form_options
from catalog.services.handler_helpers import PathIds, index_by_id, path_id
from catalog.services.mutation_controller import MutationController

KIND = EntityKind.COPY


class CopyHandlers:
    """Copy operations."""

    def __init__(self, store: CatalogStore, mutations: MutationController):
        self.store = store
        self.mutations = mutations

    async def list_all(self, raw: RawInput, path: PathIds) -> Outcome:
        results = await gather_lookups({
            "copies": matching(self.store.copies),
            "works": matching(self.store.works),
        })
        works = index_by_id(results["works"])
        rows = [
            {"bookinstance": copy, "book": works.get(copy.book)}
            for copy in results["copies"]
        ]
        return Rendered(
            "bookinstance_list",
            {"title": "Book Instance List", "bookinstance_list": rows},
        )

    async def detail(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, copy_id = path_id(path)
        copy = await self.store.copies.find_by_id(copy_id) if copy_id else None
        if copy is None:
            return NotFound(KIND, raw_id)
        work = await self.store.works.find_by_id(copy.book)
        title = f"Copy: {work.title}" if work else "Copy"
        return Rendered(
            "bookinstance_detail",
            {"title": title, "bookinstance": copy, "book": work},
        )

    async def create_form(self, raw: RawInput, path: PathIds) -> Outcome:
        options = await load_form_options(self.store, KIND)
        return Rendered("bookinstance_form", {"title": "Create BookInstance", **options})

    async def create(self, raw: RawInput, path: PathIds) -> Outcome:
        return await self.mutations.create(KIND, raw)

    async def update_form(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, copy_id = path_id(path)
        if copy_id is None:
            return NotFound(KIND, raw_id)
        results = await gather_lookups({
            "bookinstance": by_id(self.store.copies, copy_id),
            "book_list": matching(self.store.works, sort=BY_TITLE),
        })
        copy = results["bookinstance"]
        if copy is None:
            return NotFound(KIND, raw_id)
        return Rendered("bookinstance_form", {
            "title": "Update BookInstance",
            **results,
            "selected_book": str(copy.book),
        })

    async def update(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, _ = path_id(path)
        return await self.mutations.update(KIND, raw_id, raw)

    async def delete_form(self, raw: RawInput, path: PathIds) -> Outcome:
        _, copy_id = path_id(path)
        copy = await self.store.copies.find_by_id(copy_id) if copy_id else None
        if copy is None:
            return Redirected(KIND)
        work = await self.store.works.find_by_id(copy.book)
        return Rendered(
            "bookinstance_delete",
            {"title": "Delete BookInstance", "bookinstance": copy, "book": work},
        )

    async def delete(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, _ = path_id(path)
        return await self.mutations.delete(KIND, raw_id)
