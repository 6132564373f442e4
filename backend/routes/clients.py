"""
Client management endpoints.

Admins create and manage clients; a client manages its own profile and
credentials. Client representations never include emailConfirmed.
"""

import logging
from flask import Blueprint, current_app, jsonify

from backend.auth import PrincipalKind, admin_required, client_required, current_principal, get_realm
from backend.routes.credentials import register_credential_routes
from backend.schemas import CreateClientRequest, UpdateClientRequest, parse_body

logger = logging.getLogger(__name__)

# Create blueprint
clients_bp = Blueprint('clients', __name__, url_prefix='/api/clients')


def _realm():
    return get_realm(PrincipalKind.CLIENT)


def _with_orders(client: dict, order_ids: dict[str, list[str]]) -> dict:
    public = _realm().store.to_public(client)
    public["orders"] = order_ids.get(client["id"], [])
    return public


def _client_view(client_id: str) -> dict:
    client = _realm().store.get(client_id)
    return _with_orders(client, current_app.extensions["orders"].ids_by_client())


# =============================================================================
# Admin-managed clients
# =============================================================================

@clients_bp.route('', methods=['GET'])
@admin_required
def list_clients():
    """List all clients with the ids of their orders."""
    order_ids = current_app.extensions["orders"].ids_by_client()
    return jsonify([_with_orders(c, order_ids) for c in _realm().store.list()])


@clients_bp.route('', methods=['POST'])
@admin_required
def create_client():
    """Create a client and send a welcome email with a confirmation link."""
    body = parse_body(CreateClientRequest)
    fields = body.model_dump(exclude={"password"})
    client = _realm().create(fields, body.password, created_by=current_principal().id)
    return jsonify({
        "message": "Client created",
        "client": _realm().store.to_public(client) | {"orders": []},
    }), 201


@clients_bp.route('/<client_id>', methods=['GET'])
@admin_required
def get_client(client_id):
    return jsonify(_client_view(client_id))


@clients_bp.route('/<client_id>', methods=['PUT'])
@admin_required
def update_client(client_id):
    body = parse_body(UpdateClientRequest)
    _realm().store.update_profile(client_id, body.model_dump(exclude_none=True))
    return jsonify({"message": "Client information updated", "client": _client_view(client_id)})


@clients_bp.route('/<client_id>', methods=['DELETE'])
@admin_required
def delete_client(client_id):
    """Delete a client; its orders go with it."""
    _realm().store.delete(client_id)
    logger.info(f"Client {client_id} removed by {current_principal().id}")
    return jsonify({"message": "Client removed"})


# =============================================================================
# Logged in client
# =============================================================================

@clients_bp.route('/me', methods=['GET'])
@client_required
def get_me():
    return jsonify(_client_view(current_principal().id))


@clients_bp.route('', methods=['PUT'])
@client_required
def update_me():
    body = parse_body(UpdateClientRequest)
    _realm().store.update_profile(current_principal().id, body.model_dump(exclude_none=True))
    return jsonify({"message": "Client information updated", "client": _client_view(current_principal().id)})


register_credential_routes(
    clients_bp,
    PrincipalKind.CLIENT,
    password_methods=['POST'],
    resend_methods=['POST'],
)
