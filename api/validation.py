"""
api/validation.py -- Field-level validation into a field -> messages map.

Every input type is validated the same way, before any mutation:
  - Supplier bodies: handlers call validate_model(SupplierModel, data) and
    raise validation_failed(errors) when the map is non-empty.
  - Register/login bodies and path parameters: FastAPI validates them while
    parsing; api/main.py's RequestValidationError handler feeds exc.errors()
    through errors_from_pydantic() so the client sees the same envelope.

Field names are the JSON names ("name", "document", "email"); the leading
"body"/"path"/"query" segment of a pydantic error location is dropped.
"""

from __future__ import annotations

from typing import Any, Iterable, TypeVar

from fastapi import HTTPException
from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

_LOCATION_ROOTS = {"body", "path", "query", "header", "cookie"}


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOCATION_ROOTS:
        parts = parts[1:]
    return ".".join(parts) or "body"


def _message(error: dict) -> str:
    msg = str(error.get("msg", "Invalid value."))
    # Custom validators raise ValueError; pydantic prefixes their text
    return msg.removeprefix("Value error, ")


def errors_from_pydantic(errors: Iterable[dict]) -> dict[str, list[str]]:
    """Collapse pydantic error dicts into {field: [message, ...]}."""
    result: dict[str, list[str]] = {}
    for error in errors:
        result.setdefault(_field_name(error.get("loc", ())), []).append(_message(error))
    return result


def validate_model(model_cls: type[ModelT], data: dict) -> tuple[ModelT | None, dict[str, list[str]]]:
    """Validate data against model_cls.

    Returns (instance, {}) on success or (None, errors) on failure.
    """
    try:
        return model_cls.model_validate(data), {}
    except ValidationError as exc:
        return None, errors_from_pydantic(exc.errors())


def validation_failed(errors: dict[str, list[str]]) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "code": "validation_error",
            "message": "One or more validation errors occurred.",
            "errors": errors,
        },
    )
