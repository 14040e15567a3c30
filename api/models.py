"""
API request and response models for the supplier REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in suppliers/models.py and
auth/models.py, which own the internal domain representation. Route handlers
map between the two.

Supplier input comes in two shapes:
  SupplierPayload -- what FastAPI parses from the body: only types are
      enforced, so a request with an empty name still reaches the handler.
  SupplierModel   -- the validated record. api/validation.validate_model()
      turns a payload into one of these, or into a field -> messages map.
  The split lets PUT look the path id up (404) before validating (400).
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from suppliers.models import Supplier

# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload.

    errors is set for validation and registration failures: a map from the
    offending field (or identity error code) to its messages.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None
    errors: Optional[dict[str, list[str]]] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Users -- request models
# ---------------------------------------------------------------------------


def _check_email(value: str) -> str:
    # Same rule as a plain e-mail attribute check: exactly one "@", not at either end.
    if value.count("@") != 1 or value.startswith("@") or value.endswith("@"):
        raise ValueError("The email field is not a valid e-mail address.")
    return value


class LoginUser(BaseModel):
    """Request body for POST /login.

    Passwords are taken verbatim; only the email is trimmed.
    """

    email: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=6, max_length=100)

    @field_validator("email")
    @classmethod
    def email_address(cls, value: str) -> str:
        return _check_email(value.strip())


class RegisterUser(LoginUser):
    """Request body for POST /register.

    confirm_password is required and must match password.
    """

    confirm_password: str

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if value != info.data.get("password"):
            raise ValueError("The passwords do not match.")
        return value


# ---------------------------------------------------------------------------
# Users -- response models
# ---------------------------------------------------------------------------


class ClaimModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    value: str


class UserTokenModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    claims: list[ClaimModel] = Field(default_factory=list)


class LoginResponse(BaseModel):
    """Response for a successful POST /register or POST /login."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user_token: UserTokenModel


# ---------------------------------------------------------------------------
# Suppliers
# ---------------------------------------------------------------------------


class SupplierPayload(BaseModel):
    """Raw request body for POST /supplier and PUT /supplier/{id}.

    id may be omitted. Create generates one; update falls back to the path id.
    """

    id: Optional[UUID] = None
    name: Optional[str] = None
    document: Optional[str] = None
    active: bool = False


class SupplierModel(BaseModel):
    """A validated supplier record; also the response shape for supplier routes.

    Strings are stored exactly as sent. Whitespace counts toward max_length;
    a name or document that is only whitespace is treated as missing.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str = Field(min_length=1, max_length=200)
    document: str = Field(min_length=1, max_length=14)
    active: bool = False

    @field_validator("name", "document", mode="before")
    @classmethod
    def required(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError(f"The {info.field_name} field is required.")
        return value

    def to_domain(self) -> Supplier:
        return Supplier(id=self.id, name=self.name, document=self.document, active=self.active)

    @classmethod
    def from_domain(cls, supplier: Supplier) -> "SupplierModel":
        return cls.model_validate(supplier)
