"""
Flask route decorators for authentication.

Provides:
- principal_required: Require a valid token of one principal kind
- admin_required: Require a valid admin token
- client_required: Require a valid client token

The guards only verify the token; they never look the principal up. Handlers
that need the full record fetch it and turn a missing principal into 404.
"""
from functools import wraps

from flask import g, jsonify

from core.errors import InvalidTokenError
from .realms import get_realm
from .tokens import get_token_from_request
from .types import PrincipalKind, PrincipalRef


def principal_required(kind: PrincipalKind):
    """Decorator factory binding a guard to one principal kind.

    Sets g.principal (PrincipalRef) on success. On failure responds 401
    and the wrapped handler is never called.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            token = get_token_from_request()

            if not token:
                return jsonify({"error": "No token, authorization denied"}), 401

            try:
                payload = get_realm(kind).issuer.verify(token)
            except InvalidTokenError as e:
                return jsonify({"error": str(e)}), 401

            g.principal = payload.principal
            return f(*args, **kwargs)

        decorated.required_principal = kind
        return decorated
    return decorator


admin_required = principal_required(PrincipalKind.ADMIN)
client_required = principal_required(PrincipalKind.CLIENT)


def current_principal() -> PrincipalRef:
    """Return the principal attached by the guard (use inside routes)."""
    return g.principal
