"""
Equipment inventory endpoints (admin only).
"""

from flask import Blueprint, current_app, jsonify

from backend.auth import admin_required, current_principal
from backend.schemas import CreateEquipmentRequest, UpdateEquipmentRequest, parse_body

# Create blueprint
equipment_bp = Blueprint('equipment', __name__, url_prefix='/api/equipments')


def _catalog():
    return current_app.extensions["equipment"]


@equipment_bp.route('', methods=['GET'])
@admin_required
def list_equipment():
    return jsonify(_catalog().list())


@equipment_bp.route('', methods=['POST'])
@admin_required
def create_equipment():
    body = parse_body(CreateEquipmentRequest)
    equipment = _catalog().create(body.model_dump(), created_by=current_principal().id)
    return jsonify(equipment), 201


@equipment_bp.route('/<equipment_id>', methods=['GET'])
@admin_required
def get_equipment(equipment_id):
    return jsonify(_catalog().get(equipment_id))


@equipment_bp.route('/update/<equipment_id>', methods=['PUT'])
@admin_required
def update_equipment(equipment_id):
    body = parse_body(UpdateEquipmentRequest)
    equipment = _catalog().update(equipment_id, body.model_dump(exclude_none=True))
    return jsonify({"message": "Equipment updated", "equipment": equipment})


@equipment_bp.route('/<equipment_id>', methods=['DELETE'])
@admin_required
def delete_equipment(equipment_id):
    """Delete equipment; refused with 409 while orders reference it."""
    _catalog().delete(equipment_id)
    return jsonify({"message": "Equipment removed"})
