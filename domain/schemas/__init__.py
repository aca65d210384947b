"""
Domain schemas package - Pydantic models for validation.
"""

from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.exceptions import ServiceValidationError
from domain.schemas.catalog_schemas import (
    ProductCreate,
    PreparationCreate,
    PreparationStepCreate,
)
from domain.schemas.auth_schemas import (
    RegisterRequest,
    TokenClaims,
    AuthenticatedUser,
)

SchemaType = TypeVar("SchemaType", bound=BaseModel)


def parse_form(schema: Type[SchemaType], **data) -> SchemaType:
    """
    Validate submitted form fields against a schema.

    Raises:
        ServiceValidationError: with the first problem as a readable message and
            every field error in ``details``.
    """
    try:
        return schema(**data)
    except ValidationError as exc:
        errors = exc.errors()
        first = errors[0]
        message = first["msg"].removeprefix("Value error, ")
        if first["type"] == "missing":
            field = first["loc"][-1] if first["loc"] else "field"
            message = f"{str(field).replace('_', ' ').capitalize()} is required"
        details = {
            ".".join(str(p) for p in err["loc"]) or "form": err["msg"] for err in errors
        }
        raise ServiceValidationError(message, details=details, code="VALIDATION_ERROR")


__all__ = [
    "parse_form",
    # Catalog schemas
    "ProductCreate",
    "PreparationCreate",
    "PreparationStepCreate",
    # Auth schemas
    "RegisterRequest",
    "TokenClaims",
    "AuthenticatedUser",
]
