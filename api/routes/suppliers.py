"""
api/routes/suppliers.py -- Supplier CRUD routes.

Routes:
  GET    /supplier       -- list every supplier (public)
  GET    /supplier/{id}  -- one supplier or 404 (public)
  POST   /supplier       -- create; any authenticated caller
  PUT    /supplier/{id}  -- full replace; any authenticated caller
  DELETE /supplier/{id}  -- remove; caller's token must carry RemoveSupplier

Each handler does one store call and maps the outcome to a status code:
  validation failure -> 400 validation_error (field -> messages)
  unknown id         -> 404 not_found
  zero rows affected -> 400 save_failed

Two behaviors are kept exactly as the existing contract has them:
  PUT looks the row up by the path id but writes the row named by the body's
  id (the path id is used only when the body has none).
  DELETE answers a successful removal with 201, a Location header and the
  removed record.
"""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.exc import IntegrityError

from api.models import ErrorResponse, SupplierModel, SupplierPayload
from api.validation import validate_model, validation_failed
from auth.dependencies import get_current_user, require_claim
from suppliers.store import SupplierStore

logger = logging.getLogger("suppliers.api.suppliers")

REMOVE_SUPPLIER_CLAIM = "RemoveSupplier"

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def get_supplier_store(request: Request) -> SupplierStore:
    return request.app.state.supplier_store


# ---------------------------------------------------------------------------
# Reads (public)
# ---------------------------------------------------------------------------


@router.get("/supplier", response_model=list[SupplierModel])
def list_suppliers(store: SupplierStore = Depends(get_supplier_store)) -> list[SupplierModel]:
    """Return every supplier. Row order is whatever the database yields."""
    return [SupplierModel.from_domain(s) for s in store.list_suppliers()]


@router.get("/supplier/{supplier_id}", response_model=SupplierModel, responses=_ERRORS)
def get_supplier(supplier_id: UUID, store: SupplierStore = Depends(get_supplier_store)) -> SupplierModel:
    supplier = store.get_supplier(supplier_id)
    if supplier is None:
        raise _not_found()
    return SupplierModel.from_domain(supplier)


# ---------------------------------------------------------------------------
# Writes (authenticated)
# ---------------------------------------------------------------------------


@router.post(
    "/supplier",
    response_model=SupplierModel,
    status_code=201,
    responses=_ERRORS,
    dependencies=[Depends(get_current_user)],
)
def create_supplier(
    body: SupplierPayload,
    response: Response,
    store: SupplierStore = Depends(get_supplier_store),
) -> SupplierModel:
    """Create a supplier. An id is generated when the body has none."""
    data = body.model_dump()
    if data["id"] is None:
        data["id"] = uuid4()
    model, errors = validate_model(SupplierModel, data)
    if errors:
        raise validation_failed(errors)

    try:
        written = store.create_supplier(model.to_domain())
    except IntegrityError:
        logger.warning("Insert rejected by the database for supplier %s", model.id)
        written = 0
    if written <= 0:
        raise _save_failed()

    response.headers["Location"] = f"/supplier/{model.id}"
    return model


@router.put(
    "/supplier/{supplier_id}",
    status_code=204,
    responses=_ERRORS,
    dependencies=[Depends(get_current_user)],
)
def update_supplier(
    supplier_id: UUID,
    body: SupplierPayload,
    store: SupplierStore = Depends(get_supplier_store),
) -> Response:
    """Replace name, document and active.

    404 is decided by the path id before the body is validated.
    """
    if store.get_supplier(supplier_id) is None:
        raise _not_found()

    data = body.model_dump()
    if data["id"] is None:
        data["id"] = supplier_id
    model, errors = validate_model(SupplierModel, data)
    if errors:
        raise validation_failed(errors)

    if model.id != supplier_id:
        logger.warning("PUT /supplier/%s writes body id %s", supplier_id, model.id)
    if store.update_supplier(model.to_domain()) <= 0:
        raise _save_failed()
    return Response(status_code=204)


@router.delete(
    "/supplier/{supplier_id}",
    response_model=SupplierModel,
    status_code=201,
    responses=_ERRORS,
    dependencies=[Depends(require_claim(REMOVE_SUPPLIER_CLAIM))],
)
def delete_supplier(
    supplier_id: UUID,
    response: Response,
    store: SupplierStore = Depends(get_supplier_store),
) -> SupplierModel:
    """Remove a supplier and echo the removed record with a Location header."""
    supplier = store.get_supplier(supplier_id)
    if supplier is None:
        raise _not_found()

    if store.delete_supplier(supplier_id) <= 0:
        raise _save_failed()

    response.headers["Location"] = f"/supplier/{supplier.id}"
    return SupplierModel.from_domain(supplier)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "not_found", "message": "Supplier not found."},
    )


def _save_failed() -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"code": "save_failed", "message": "There was a problem saving the record."},
    )
