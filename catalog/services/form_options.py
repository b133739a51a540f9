"""Form Options — option lists a create/update form needs, loaded in one fan-out.

Invariants:
    - Read-only; all lists fetched concurrently through gather_lookups
    - Selected values (genres on a Work, book on a Copy) come from the draft, not the store
"""

from collections.abc import Mapping

from catalog.core.domain_types import EntityKind
from catalog.core.repository_protocols import CatalogStore, Sort
from catalog.services.aggregate_query import gather_lookups, matching

BY_NAME = Sort("name")
BY_FAMILY_NAME = Sort("family_name")
BY_TITLE = Sort("title")


async def load_form_options(
    store: CatalogStore, kind: EntityKind, draft: Mapping | None = None,
) -> dict:
    """Options for the `kind` form, with the draft's selections marked."""
    draft = draft or {}

    if kind is EntityKind.GENRE:
        return await gather_lookups({"genre_list": matching(store.genres, sort=BY_NAME)})

    if kind is EntityKind.WORK:
        options = await gather_lookups({
            "authors": matching(store.authors, sort=BY_FAMILY_NAME),
            "genres": matching(store.genres, sort=BY_NAME),
        })
        options["selected_genres"] = [str(g) for g in draft.get("genres") or ()]
        return options

    if kind is EntityKind.COPY:
        options = await gather_lookups({"book_list": matching(store.works, sort=BY_TITLE)})
        book = draft.get("book")
        options["selected_book"] = str(book) if book else None
        return options

    return {}
