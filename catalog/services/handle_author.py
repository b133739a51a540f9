"""Author Handlers — list, detail, forms and mutations for authors.

Invariants:
    - Detail and delete form fetch the author and their works in one fan-out
    - Deleting an author with works is blocked by the integrity guard
"""

from catalog.core.domain_types import EntityKind
from catalog.core.outcomes import NotFound, Outcome, Redirected, Rendered
from catalog.core.repository_protocols import CatalogStore
from catalog.core.validation import RawInput
from catalog.services.aggregate_query import by_id, gather_lookups, matching
from catalog.services.form_options import BY_FAMILY_NAME, BY_TITLE
from catalog.services.handler_helpers import PathIds, path_id
from catalog.services.mutation_controller import MutationController

KIND = EntityKind.AUTHOR


class AuthorHandlers:
    """Author operations."""

    def __init__(self, store: CatalogStore, mutations: MutationController):
        self.store = store
        self.mutations = mutations

    async def list_all(self, raw: RawInput, path: PathIds) -> Outcome:
        authors = await self.store.authors.find_many(sort=BY_FAMILY_NAME)
        return Rendered("author_list", {"title": "Author List", "author_list": authors})

    async def detail(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, author_id = path_id(path)
        if author_id is None:
            return NotFound(KIND, raw_id)
        results = await self._author_with_works(author_id)
        if results["author"] is None:
            return NotFound(KIND, raw_id)
        return Rendered("author_detail", {"title": "Author Detail", **results})

    async def create_form(self, raw: RawInput, path: PathIds) -> Outcome:
        return Rendered("author_form", {"title": "Create Author"})

    async def create(self, raw: RawInput, path: PathIds) -> Outcome:
        return await self.mutations.create(KIND, raw)

    async def update_form(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, author_id = path_id(path)
        author = await self.store.authors.find_by_id(author_id) if author_id else None
        if author is None:
            return NotFound(KIND, raw_id)
        return Rendered("author_form", {"title": "Update Author", "author": author})

    async def update(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, _ = path_id(path)
        return await self.mutations.update(KIND, raw_id, raw)

    async def delete_form(self, raw: RawInput, path: PathIds) -> Outcome:
        _, author_id = path_id(path)
        if author_id is None:
            return Redirected(KIND)
        results = await self._author_with_works(author_id)
        if results["author"] is None:
            return Redirected(KIND)
        return Rendered("author_delete", {"title": "Delete Author", **results})

    async def delete(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, _ = path_id(path)
        return await self.mutations.delete(KIND, raw_id)

    async def _author_with_works(self, author_id) -> dict:
        return await gather_lookups({
            "author": by_id(self.store.authors, author_id),
            "author_books": matching(self.store.works, {"author": author_id}, BY_TITLE),
        })
