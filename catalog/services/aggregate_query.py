"""Aggregate Query Orchestrator — concurrent fan-out/fan-in over named lookups.

Invariants:
    - Lookups are independent: none sees another's result within one call
    - All lookups are started together and all are awaited, even after one fails
    - All-or-nothing: any failure fails the whole bundle with that underlying error
      (first failure in key order); partial results never reach the caller
    - A None result ("no such id") is a success, not a failure
    - The bundle has exactly the keys that were requested

Design Decisions:
    - asyncio.gather(return_exceptions=True) over TaskGroup: a TaskGroup cancels
      siblings on failure, and issued lookups must run to completion
    - Lookups are awaitables built by the caller (repo.find_by_id(...), repo.count(...)):
      the orchestrator stays agnostic of lookup type
"""

import asyncio
import logging
from collections.abc import Awaitable, Mapping

from catalog.core.repository_protocols import Filter, Repository, Sort

logger = logging.getLogger(__name__)


async def gather_lookups(lookups: Mapping[str, Awaitable]) -> dict[str, object]:
    """Run every named lookup concurrently and join them into one bundle."""
    if not lookups:
        return {}

    keys = list(lookups)
    results = await asyncio.gather(
        *(lookups[key] for key in keys), return_exceptions=True,
    )

    for key, result in zip(keys, results):
        if isinstance(result, BaseException):
            logger.error(
                f"Lookup '{key}' failed; discarding {len(keys) - 1} sibling result(s)",
                extra={"lookup": key, "error_code": getattr(result, "code", None)},
            )
            raise result

    return dict(zip(keys, results))


# --- Lookup builders ----------------------------------------------------------
# Thin aliases so call sites read as the three lookup shapes of the contract.

def by_id(repo: Repository, entity_id) -> Awaitable:
    return repo.find_by_id(entity_id)


def matching(
    repo: Repository, filter: Filter | None = None, sort: Sort | None = None,
) -> Awaitable:
    return repo.find_many(filter, sort)


def counting(repo: Repository, filter: Filter | None = None) -> Awaitable:
    return repo.count(filter)
