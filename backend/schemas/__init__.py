"""
Pydantic schemas for request validation.

Route handlers call parse_body(Model) instead of validating fields by hand;
validation failures surface as a 400 ValidationError with one
``{"field", "message"}`` entry per problem.
"""

from flask import request
from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError
from backend.schemas.common import LocationFields, validate_email
from backend.schemas.auth import (
    LoginRequest,
    EmailRequest,
    PasswordRequest,
)
from backend.schemas.accounts import (
    CreateAdminRequest,
    UpdateAdminRequest,
    CreateClientRequest,
    UpdateClientRequest,
)
from backend.schemas.catalog import (
    CreateEquipmentRequest,
    UpdateEquipmentRequest,
    CreateOrderRequest,
    UpdateOrderRequest,
)
from backend.schemas.public import (
    MessageRequest,
    DonationRequest,
    SubscribeRequest,
    UnsubscribeRequest,
)


def parse_body(model):
    """Validate the JSON request body against a pydantic model.

    Raises:
        ValidationError: body missing, not an object, or invalid
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        details = [
            {
                "field": ".".join(str(part) for part in err["loc"]) or "body",
                "message": err["msg"].removeprefix("Value error, "),
            }
            for err in e.errors()
        ]
        raise ValidationError("Invalid request body", details=details)


__all__ = [
    "parse_body",
    # Common
    "LocationFields",
    "validate_email",
    # Auth
    "LoginRequest",
    "EmailRequest",
    "PasswordRequest",
    # Accounts
    "CreateAdminRequest",
    "UpdateAdminRequest",
    "CreateClientRequest",
    "UpdateClientRequest",
    # Catalog
    "CreateEquipmentRequest",
    "UpdateEquipmentRequest",
    "CreateOrderRequest",
    "UpdateOrderRequest",
    # Public
    "MessageRequest",
    "DonationRequest",
    "SubscribeRequest",
    "UnsubscribeRequest",
]
