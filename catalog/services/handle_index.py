"""Index Handler — catalog home page counts.

Invariants:
    - Five counts fetched in one fan-out
    - A failed fan-out still renders the page: error set, no partial counts
"""

import logging

from catalog.core.domain_types import CopyStatus
from catalog.core.errors import StorageError
from catalog.core.outcomes import Outcome, Rendered
from catalog.core.repository_protocols import CatalogStore
from catalog.core.validation import RawInput
from catalog.services.aggregate_query import counting, gather_lookups
from catalog.services.handler_helpers import PathIds

logger = logging.getLogger(__name__)


class IndexHandlers:
    """Home page."""

    def __init__(self, store: CatalogStore):
        self.store = store

    async def index(self, raw: RawInput, path: PathIds) -> Outcome:
        try:
            counts = await gather_lookups({
                "book_count": counting(self.store.works),
                "book_instance_count": counting(self.store.copies),
                "book_instance_available_count": counting(
                    self.store.copies, {"status": CopyStatus.AVAILABLE},
                ),
                "author_count": counting(self.store.authors),
                "genre_count": counting(self.store.genres),
            })
        except StorageError as e:
            logger.warning(f"Index counts unavailable: {e.message}")
            return Rendered(
                "index", {"title": "Local Library Home", "error": e, "data": None},
            )
        return Rendered(
            "index", {"title": "Local Library Home", "error": None, "data": counts},
        )
