"""
Public submission endpoints: contact messages, donation offers, and
newsletter subscriptions. Anyone may submit; admins read and delete.
"""

from flask import Blueprint, current_app, jsonify

from backend.auth import admin_required
from backend.schemas import (
    DonationRequest,
    MessageRequest,
    SubscribeRequest,
    UnsubscribeRequest,
    parse_body,
)

# Create blueprints
messages_bp = Blueprint('messages', __name__, url_prefix='/api/messages')
donations_bp = Blueprint('donations', __name__, url_prefix='/api/donations')
newsletters_bp = Blueprint('newsletters', __name__, url_prefix='/api/newsletters')


# =============================================================================
# Messages
# =============================================================================

@messages_bp.route('', methods=['POST'])
def send_message():
    body = parse_body(MessageRequest)
    current_app.extensions["messages"].create(body.model_dump())
    return jsonify({"message": "Message sent"}), 201


@messages_bp.route('', methods=['GET'])
@admin_required
def list_messages():
    return jsonify(current_app.extensions["messages"].list())


@messages_bp.route('/<message_id>', methods=['DELETE'])
@admin_required
def delete_message(message_id):
    current_app.extensions["messages"].delete(message_id)
    return jsonify({"message": "Message removed"})


# =============================================================================
# Donations
# =============================================================================

@donations_bp.route('', methods=['POST'])
def offer_donation():
    body = parse_body(DonationRequest)
    current_app.extensions["donations"].create(body.model_dump())
    return jsonify({"message": "Donation request sent"}), 201


@donations_bp.route('', methods=['GET'])
@admin_required
def list_donations():
    return jsonify(current_app.extensions["donations"].list())


@donations_bp.route('/<donation_id>', methods=['DELETE'])
@admin_required
def delete_donation(donation_id):
    current_app.extensions["donations"].delete(donation_id)
    return jsonify({"message": "Donation removed"})


# =============================================================================
# Newsletters
# =============================================================================

@newsletters_bp.route('', methods=['POST'])
def subscribe():
    """Subscribe an email; 409 if it is already subscribed."""
    body = parse_body(SubscribeRequest)
    current_app.extensions["newsletters"].subscribe(body.model_dump())
    return jsonify({"message": "Email added to newsletter list"}), 201


@newsletters_bp.route('', methods=['DELETE'])
def unsubscribe():
    body = parse_body(UnsubscribeRequest)
    current_app.extensions["newsletters"].unsubscribe(body.email)
    return jsonify({"message": "Email removed from newsletter list"})


@newsletters_bp.route('', methods=['GET'])
@admin_required
def list_subscriptions():
    return jsonify(current_app.extensions["newsletters"].list())
