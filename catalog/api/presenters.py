"""Outcome Presenter — maps dispatch outcomes onto HTTP responses.

Invariants:
    - Exactly one response per Outcome type:
      Rendered 200, Redirected 303 + Location, NotFound 404,
      ValidationFailed 400, IntegrityBlocked 409, InternalError cause.http_status
    - Error outcomes reuse the CatalogError envelope (error.code/message/category/severity)
    - Entities serialized through schemas/catalog.py, never field-by-field here

Design Decisions:
    - Pure function of the outcome: routes stay one line, and the mapping is
      testable without a running app
    - Redirect Location mirrors the catalog URL scheme so a client can follow it
"""

from dataclasses import asdict, is_dataclass

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from catalog.core.domain_types import EntityKind
from catalog.core.entities import Author, Copy, Genre, Work
from catalog.core.errors import (
    CatalogError, FieldValidationError, IntegrityViolationError, ResourceNotFoundError,
)
from catalog.core.outcomes import (
    IntegrityBlocked, InternalError, NotFound, Outcome, Redirected, Rendered,
    ValidationFailed,
)
from catalog.schemas.catalog import AuthorOut, CopyOut, GenreOut, WorkOut

CATALOG_PREFIX = "/api/v1/catalog"

_ENTITY_SCHEMAS = {
    Genre: GenreOut,
    Author: AuthorOut,
    Work: WorkOut,
    Copy: CopyOut,
}


def jsonable(value: object) -> object:
    """Convert outcome payloads (entities, rows, errors) into JSON-safe values."""
    schema = _ENTITY_SCHEMAS.get(type(value))
    if schema is not None:
        return schema.model_validate(value).model_dump(mode="json")
    if isinstance(value, CatalogError):
        return value.to_response()["error"]
    if isinstance(value, dict):
        return {str(k): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [jsonable(v) for v in value]
    if is_dataclass(value) and not isinstance(value, type):
        return jsonable(asdict(value))
    return jsonable_encoder(value)


def location_for(kind: EntityKind, target_id: object | None = None) -> str:
    """URL of one record, or of the collection when target_id is None."""
    if target_id is None:
        return f"{CATALOG_PREFIX}/{kind.plural}"
    return f"{CATALOG_PREFIX}/{kind.value}/{target_id}"


def _dependent_summary(entity: object) -> dict:
    label = getattr(entity, "title", None) or getattr(entity, "imprint", None) or ""
    return {"id": str(getattr(entity, "id", "")), "label": label}


def outcome_to_response(outcome: Outcome) -> JSONResponse:
    """Render one Outcome as a JSONResponse."""
    match outcome:
        case Rendered(view=view, data=data):
            return JSONResponse(
                status_code=status.HTTP_200_OK,
                content={"view": view, "data": jsonable(data)},
            )
        case Redirected(kind=kind, target_id=target_id):
            location = location_for(kind, target_id)
            return JSONResponse(
                status_code=status.HTTP_303_SEE_OTHER,
                content={"redirect": location},
                headers={"Location": location},
            )
        case NotFound(kind=kind, entity_id=entity_id):
            error = ResourceNotFoundError(kind.label, entity_id)
            return JSONResponse(
                status_code=error.http_status, content=error.to_response(),
            )
        case ValidationFailed(view=view, draft=draft, errors=errors, context=context):
            error = FieldValidationError([e.to_dict() for e in errors])
            content = error.to_response()
            content.update(
                view=view, draft=jsonable(draft), context=jsonable(context),
            )
            return JSONResponse(status_code=error.http_status, content=content)
        case IntegrityBlocked(kind=kind, target=target, dependents=dependents):
            error = IntegrityViolationError(
                kind.label, str(target.id),
                [_dependent_summary(d) for d in dependents],
            )
            content = error.to_response()
            content.update(
                target=jsonable(target), dependents=jsonable(list(dependents)),
            )
            return JSONResponse(status_code=error.http_status, content=content)
        case InternalError(cause=cause):
            return JSONResponse(
                status_code=cause.http_status, content=cause.to_response(),
            )
    raise TypeError(f"Unsupported outcome: {type(outcome).__name__}")
