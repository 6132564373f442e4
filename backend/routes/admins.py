"""
Administrator management endpoints. Every administrator is created by
another administrator; the first one comes from scripts/create_admin.py.
"""

import logging
from flask import Blueprint, jsonify

from backend.auth import PrincipalKind, admin_required, current_principal, get_realm
from backend.routes.credentials import register_credential_routes
from backend.schemas import CreateAdminRequest, UpdateAdminRequest, parse_body

logger = logging.getLogger(__name__)

# Create blueprint
admins_bp = Blueprint('admins', __name__, url_prefix='/api/admins')


def _realm():
    return get_realm(PrincipalKind.ADMIN)


@admins_bp.route('', methods=['GET'])
@admin_required
def list_admins():
    return jsonify(_realm().store.list())


@admins_bp.route('', methods=['POST'])
@admin_required
def create_admin():
    """Create an administrator and email them a confirmation link."""
    body = parse_body(CreateAdminRequest)
    fields = body.model_dump(exclude={"password"})
    admin = _realm().create(fields, body.password, created_by=current_principal().id)
    return jsonify({
        "message": "Admin created. Please confirm email to login.",
        "admin": admin,
    }), 201


@admins_bp.route('', methods=['PUT'])
@admin_required
def update_admin():
    """Update the logged in administrator's profile."""
    body = parse_body(UpdateAdminRequest)
    admin = _realm().store.update_profile(current_principal().id, body.model_dump(exclude_none=True))
    return jsonify({"message": "Admin information updated", "admin": admin})


@admins_bp.route('/me', methods=['GET'])
@admin_required
def get_me():
    return jsonify(_realm().store.get(current_principal().id))


@admins_bp.route('/me', methods=['DELETE'])
@admin_required
def delete_me():
    _realm().store.delete(current_principal().id)
    return jsonify({"message": "Admin removed"})


@admins_bp.route('/<admin_id>', methods=['GET'])
@admin_required
def get_admin(admin_id):
    return jsonify(_realm().store.get(admin_id))


@admins_bp.route('/<admin_id>', methods=['DELETE'])
@admin_required
def delete_admin(admin_id):
    _realm().store.delete(admin_id)
    logger.info(f"Admin {admin_id} removed by {current_principal().id}")
    return jsonify({"message": "Admin removed"})


register_credential_routes(
    admins_bp,
    PrincipalKind.ADMIN,
    password_methods=['PUT'],
    resend_methods=['PUT'],
)
