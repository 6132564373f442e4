"""
Order endpoints (admin only).

Placing an order emails the client a notice; the order stands even if the
email cannot be delivered.
"""

import logging
from flask import Blueprint, current_app, jsonify

from backend.auth import admin_required, current_principal
from backend.mail import order_placed_email
from backend.schemas import CreateOrderRequest, UpdateOrderRequest, parse_body

logger = logging.getLogger(__name__)

# Create blueprint
orders_bp = Blueprint('orders', __name__, url_prefix='/api/orders')


def _orders():
    return current_app.extensions["orders"]


def _notify_client(order: dict) -> None:
    sender = current_app.extensions["mail"]
    subject, body = order_placed_email(
        order["client"]["firstName"],
        order["equipment"]["name"],
        order["isRent"],
        sender.sender_name,
    )
    sender.send(sender.compose(order["client"]["email"], subject, body))


@orders_bp.route('', methods=['GET'])
@admin_required
def list_orders():
    return jsonify(_orders().list())


@orders_bp.route('/<order_id>', methods=['GET'])
@admin_required
def get_order(order_id):
    return jsonify(_orders().get(order_id))


@orders_bp.route('', methods=['POST'])
@admin_required
def create_order():
    """Place an order for an existing client and piece of equipment."""
    body = parse_body(CreateOrderRequest)
    order = _orders().create(
        client_id=body.clientId,
        equipment_id=body.equipmentId,
        total_price=body.totalPrice,
        is_rent=body.isRent,
        rent_expiry=body.rentExpiry.isoformat() if body.rentExpiry else None,
        admin_id=current_principal().id,
    )
    _notify_client(order)
    return jsonify(order), 201


@orders_bp.route('/<order_id>', methods=['PUT'])
@admin_required
def update_order(order_id):
    body = parse_body(UpdateOrderRequest)
    order = _orders().update(
        order_id,
        total_price=body.totalPrice,
        is_rent=body.isRent,
        rent_expiry=body.rentExpiry.isoformat() if body.rentExpiry else None,
    )
    return jsonify({"message": "Order updated", "order": order})


@orders_bp.route('/<order_id>', methods=['DELETE'])
@admin_required
def delete_order(order_id):
    _orders().delete(order_id)
    return jsonify({"message": "Order removed"})
