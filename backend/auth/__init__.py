"""
Authentication module.

Public API:
- Decorators: admin_required, client_required, principal_required
- Realms: Realm, build_realms, get_realm
- Building blocks: CredentialStore, TokenIssuer, ConfirmationFlow, PasswordHasher

Import Rules:
- External callers: Use `from backend.auth import X` (this facade)
- Internal auth modules: Use `from .submodule import X` (direct imports)
"""

from .decorators import (
    admin_required,
    client_required,
    principal_required,
    current_principal,
)

from .realms import (
    Realm,
    build_realm,
    build_realms,
    get_realm,
)

from .flows import ConfirmationFlow, FlowLinks
from .passwords import PasswordHasher, validate_password_length
from .store import ADMIN_TABLE, CLIENT_TABLE, CredentialStore, PrincipalTable
from .tokens import LEGACY_TOKEN_HEADER, TokenIssuer, get_token_from_request
from .types import PrincipalKind, PrincipalRef, TokenPayload

__all__ = [
    # Decorators
    "admin_required",
    "client_required",
    "principal_required",
    "current_principal",
    # Realms
    "Realm",
    "build_realm",
    "build_realms",
    "get_realm",
    # Building blocks
    "ConfirmationFlow",
    "FlowLinks",
    "PasswordHasher",
    "validate_password_length",
    "ADMIN_TABLE",
    "CLIENT_TABLE",
    "CredentialStore",
    "PrincipalTable",
    "LEGACY_TOKEN_HEADER",
    "TokenIssuer",
    "get_token_from_request",
    # Types
    "PrincipalKind",
    "PrincipalRef",
    "TokenPayload",
]
