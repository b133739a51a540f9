"""Genre Handlers — list, detail, forms and mutations for classification tags.

Invariants:
    - Detail and delete form fetch the genre and its works in one fan-out
    - A missing genre is NotFound on detail/update form, a redirect on delete form
    - Mutations delegate to MutationController (create is idempotent-by-value)
"""

from catalog.core.domain_types import EntityKind
from catalog.core.outcomes import NotFound, Outcome, Redirected, Rendered
from catalog.core.repository_protocols import CatalogStore
from catalog.core.validation import RawInput
from catalog.services.aggregate_query import by_id, gather_lookups, matching
from catalog.services.form_options import BY_NAME, BY_TITLE, load_form_options
from catalog.services.handler_helpers import PathIds, path_id
from catalog.services.mutation_controller import MutationController

KIND = EntityKind.GENRE


class GenreHandlers:
    """Genre operations."""

    def __init__(self, store: CatalogStore, mutations: MutationController):
        self.store = store
        self.mutations = mutations

    async def list_all(self, raw: RawInput, path: PathIds) -> Outcome:
        genres = await self.store.genres.find_many(sort=BY_NAME)
        return Rendered("genre_list", {"title": "Genre List", "genre_list": genres})

    async def detail(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, genre_id = path_id(path)
        if genre_id is None:
            return NotFound(KIND, raw_id)
        results = await self._genre_with_works(genre_id)
        if results["genre"] is None:
            return NotFound(KIND, raw_id)
        return Rendered("genre_detail", {"title": "Genre Detail", **results})

    async def create_form(self, raw: RawInput, path: PathIds) -> Outcome:
        options = await load_form_options(self.store, KIND)
        return Rendered("genre_form", {"title": "Create Genre", **options})

    async def create(self, raw: RawInput, path: PathIds) -> Outcome:
        return await self.mutations.create(KIND, raw)

    async def update_form(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, genre_id = path_id(path)
        if genre_id is None:
            return NotFound(KIND, raw_id)
        results = await gather_lookups({
            "genre": by_id(self.store.genres, genre_id),
            "genre_list": matching(self.store.genres, sort=BY_NAME),
        })
        if results["genre"] is None:
            return NotFound(KIND, raw_id)
        return Rendered("genre_form", {"title": "Update Genre", **results})

    async def update(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, _ = path_id(path)
        return await self.mutations.update(KIND, raw_id, raw)

    async def delete_form(self, raw: RawInput, path: PathIds) -> Outcome:
        _, genre_id = path_id(path)
        if genre_id is None:
            return Redirected(KIND)
        results = await self._genre_with_works(genre_id)
        if results["genre"] is None:
            return Redirected(KIND)
        return Rendered("genre_delete", {"title": "Delete Genre", **results})

    async def delete(self, raw: RawInput, path: PathIds) -> Outcome:
        raw_id, _ = path_id(path)
        return await self.mutations.delete(KIND, raw_id)

    async def _genre_with_works(self, genre_id) -> dict:
        return await gather_lookups({
            "genre": by_id(self.store.genres, genre_id),
            "genre_books": matching(self.store.works, {"genres": genre_id}, BY_TITLE),
        })
