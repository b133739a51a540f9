"""Catalog Routes — HTTP binding for every catalog dispatch operation.

Invariants:
    - Every route resolves to exactly one OperationDispatch.execute call
    - Route path segments map to operation names: /{plural} -> {kind}_list,
      /{kind}/{id}/update -> {kind}_update_form (GET) / {kind}_update (POST), ...
    - Unknown entity kinds in the path are 404 before dispatch
    - Request bodies are raw maps of string or list-of-string values; field
      validation happens in the mutation controller, not in Pydantic

Design Decisions:
    - Store injected per request via Depends(get_store): tests override get_store
      with an in-memory store, no database needed
    - /{kind}/create declared before /{kind}/{entity_id} so "create" never parses as an id
"""

import logging

from fastapi import APIRouter, Body, Depends

from catalog.core.domain_types import EntityKind
from catalog.core.errors import ResourceNotFoundError
from catalog.core.repository_protocols import CatalogStore
from catalog.infrastructure.database import get_store
from catalog.services.operation_dispatch import OperationDispatch
from catalog.api.presenters import CATALOG_PREFIX, outcome_to_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix=CATALOG_PREFIX, tags=["catalog"])

RawBody = dict[str, str | list[str]] | None


def get_dispatch(store: CatalogStore = Depends(get_store)) -> OperationDispatch:
    """FastAPI dependency — one dispatcher per request over the injected store."""
    return OperationDispatch(store)


def _kind(value: str) -> EntityKind:
    try:
        return EntityKind(value)
    except ValueError:
        raise ResourceNotFoundError("Catalog collection", value)


def _plural_kind(value: str) -> EntityKind:
    kind = EntityKind.from_plural(value)
    if kind is None:
        raise ResourceNotFoundError("Catalog collection", value)
    return kind


@router.get("")
async def index(dispatch: OperationDispatch = Depends(get_dispatch)):
    """Catalog home — record counts."""
    return outcome_to_response(await dispatch.execute("index"))


@router.get("/{plural}")
async def list_entities(
    plural: str, dispatch: OperationDispatch = Depends(get_dispatch),
):
    """List one collection."""
    kind = _plural_kind(plural)
    return outcome_to_response(await dispatch.execute(f"{kind.value}_list"))


@router.get("/{kind}/create")
async def create_form(
    kind: str, dispatch: OperationDispatch = Depends(get_dispatch),
):
    """Options needed by the create form."""
    entity_kind = _kind(kind)
    return outcome_to_response(
        await dispatch.execute(f"{entity_kind.value}_create_form"),
    )


@router.post("/{kind}/create")
async def create_entity(
    kind: str,
    body: RawBody = Body(None),
    dispatch: OperationDispatch = Depends(get_dispatch),
):
    """Create a record from raw form fields."""
    entity_kind = _kind(kind)
    return outcome_to_response(
        await dispatch.execute(f"{entity_kind.value}_create", body or {}),
    )


@router.get("/{kind}/{entity_id}")
async def detail(
    kind: str, entity_id: str,
    dispatch: OperationDispatch = Depends(get_dispatch),
):
    """One record with its related records."""
    entity_kind = _kind(kind)
    return outcome_to_response(await dispatch.execute(
        f"{entity_kind.value}_detail", path={"id": entity_id},
    ))


@router.get("/{kind}/{entity_id}/update")
async def update_form(
    kind: str, entity_id: str,
    dispatch: OperationDispatch = Depends(get_dispatch),
):
    """Current record plus form options."""
    entity_kind = _kind(kind)
    return outcome_to_response(await dispatch.execute(
        f"{entity_kind.value}_update_form", path={"id": entity_id},
    ))


@router.post("/{kind}/{entity_id}/update")
async def update_entity(
    kind: str, entity_id: str,
    body: RawBody = Body(None),
    dispatch: OperationDispatch = Depends(get_dispatch),
):
    """Replace a record from raw form fields."""
    entity_kind = _kind(kind)
    return outcome_to_response(await dispatch.execute(
        f"{entity_kind.value}_update", body or {}, {"id": entity_id},
    ))


@router.get("/{kind}/{entity_id}/delete")
async def delete_form(
    kind: str, entity_id: str,
    dispatch: OperationDispatch = Depends(get_dispatch),
):
    """Record plus everything that still references it."""
    entity_kind = _kind(kind)
    return outcome_to_response(await dispatch.execute(
        f"{entity_kind.value}_delete_form", path={"id": entity_id},
    ))


@router.post("/{kind}/{entity_id}/delete")
async def delete_entity(
    kind: str, entity_id: str,
    dispatch: OperationDispatch = Depends(get_dispatch),
):
    """Delete a record unless something still references it."""
    entity_kind = _kind(kind)
    return outcome_to_response(await dispatch.execute(
        f"{entity_kind.value}_delete", path={"id": entity_id},
    ))
