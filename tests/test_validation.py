"""Unit tests for api/validation.py and the supplier/user request models.

Covers:
- pydantic locations collapse to JSON field names
- validate_model() returns either an instance or a field -> messages map
- SupplierModel keeps strings as sent and reports blank required fields by name
- RegisterUser rejects malformed emails and missing or mismatched confirmations
"""

from uuid import uuid4

import pytest

from api.models import RegisterUser, SupplierModel
from api.validation import errors_from_pydantic, validate_model, validation_failed


def test_location_root_is_dropped():
    errors = [
        {"loc": ("body", "name"), "msg": "Value error, The name field is required."},
        {"loc": ("path", "id"), "msg": "Input should be a valid UUID"},
        {"loc": ("body",), "msg": "Field required"},
    ]
    assert errors_from_pydantic(errors) == {
        "name": ["The name field is required."],
        "id": ["Input should be a valid UUID"],
        "body": ["Field required"],
    }


def test_messages_for_one_field_accumulate():
    errors = [{"loc": ("email",), "msg": "first"}, {"loc": ("email",), "msg": "second"}]
    assert errors_from_pydantic(errors) == {"email": ["first", "second"]}


def test_valid_supplier_keeps_strings_verbatim():
    supplier, errors = validate_model(
        SupplierModel, {"id": uuid4(), "name": "  Acme  ", "document": " 123 ", "active": True}
    )
    assert errors == {}
    assert supplier.name == "  Acme  "
    assert supplier.document == " 123 "


def test_trailing_space_counts_toward_document_length():
    _, errors = validate_model(SupplierModel, {"id": uuid4(), "name": "Acme", "document": "12345678901234 "})
    assert list(errors) == ["document"]


@pytest.mark.parametrize("name", [None, "", "   "])
def test_blank_name_is_required(name):
    supplier, errors = validate_model(SupplierModel, {"id": uuid4(), "name": name, "document": "1"})
    assert supplier is None
    assert errors == {"name": ["The name field is required."]}


def test_document_length_limit():
    _, errors = validate_model(SupplierModel, {"id": uuid4(), "name": "Acme", "document": "1" * 15})
    assert list(errors) == ["document"]


def test_validation_failed_envelope():
    exc = validation_failed({"name": ["The name field is required."]})
    assert exc.status_code == 400
    assert exc.detail["code"] == "validation_error"
    assert exc.detail["errors"] == {"name": ["The name field is required."]}


@pytest.mark.parametrize("email", ["plain", "@example.com", "alice@", "a@b@c"])
def test_register_rejects_malformed_email(email):
    _, errors = validate_model(RegisterUser, {"email": email, "password": "Secret#1", "confirm_password": "Secret#1"})
    assert "email" in errors


def test_register_keeps_password_verbatim():
    user, errors = validate_model(
        RegisterUser,
        {"email": " alice@example.com ", "password": " Secret#1 ", "confirm_password": " Secret#1 "},
    )
    assert errors == {}
    assert user.email == "alice@example.com"
    assert user.password == " Secret#1 "


def test_register_confirmation_must_match():
    _, errors = validate_model(
        RegisterUser,
        {"email": "alice@example.com", "password": "Secret#1", "confirm_password": "Secret#2"},
    )
    assert errors == {"confirm_password": ["The passwords do not match."]}


def test_register_confirmation_is_required():
    _, errors = validate_model(RegisterUser, {"email": "alice@example.com", "password": "Secret#1"})
    assert list(errors) == ["confirm_password"]
