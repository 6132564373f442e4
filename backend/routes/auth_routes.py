"""
Login and current-principal endpoints for administrators and clients.

Login is rate limited with the stricter auth limit.
"""

from flask import Blueprint, jsonify

from backend.auth import PrincipalKind, admin_required, client_required, current_principal, get_realm
from backend.extensions import auth_limit, limiter
from backend.schemas import LoginRequest, parse_body

# Create blueprint
auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _login(kind: PrincipalKind):
    body = parse_body(LoginRequest)
    token, principal = get_realm(kind).login(body.email, body.password)
    return jsonify({"token": token, "id": principal["id"]})


def _current(kind: PrincipalKind):
    realm = get_realm(kind)
    return jsonify(realm.store.to_public(realm.store.get(current_principal().id)))


# =============================================================================
# Administrators
# =============================================================================

@auth_bp.route('/admin', methods=['GET'])
@admin_required
def current_admin():
    """Return the logged in administrator."""
    return _current(PrincipalKind.ADMIN)


@auth_bp.route('/admin', methods=['POST'])
@limiter.limit(auth_limit)
def admin_login():
    """Authenticate an administrator and return a session token."""
    return _login(PrincipalKind.ADMIN)


# =============================================================================
# Clients
# =============================================================================

@auth_bp.route('/client', methods=['GET'])
@client_required
def current_client():
    """Return the logged in client."""
    return _current(PrincipalKind.CLIENT)


@auth_bp.route('/client', methods=['POST'])
@limiter.limit(auth_limit)
def client_login():
    """Authenticate a client and return a session token."""
    return _login(PrincipalKind.CLIENT)
