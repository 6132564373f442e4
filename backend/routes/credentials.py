"""
Email confirmation, password reset, and email change endpoints.

Administrators and clients expose the same flows under their own prefix;
register_credential_routes() adds them to a blueprint for one principal kind.
Forgot-password is rate limited with the stricter auth limit.
"""

import logging
from flask import Blueprint, jsonify

from backend.auth import PrincipalKind, current_principal, get_realm, principal_required
from backend.extensions import auth_limit, limiter
from backend.schemas import EmailRequest, PasswordRequest, parse_body

logger = logging.getLogger(__name__)


def register_credential_routes(
    bp: Blueprint,
    kind: PrincipalKind,
    password_methods: list[str],
    resend_methods: list[str],
) -> None:
    """Attach the credential-flow endpoints for `kind` to `bp`."""
    guard = principal_required(kind)

    @bp.route('/confirmation/<token>', methods=['GET'])
    def confirm_email(token):
        """Confirm an email from the link sent by mail (public)."""
        get_realm(kind).flows.confirm(token)
        return jsonify({"message": "Email confirmed. Please login"})

    @bp.route('/forgetpswd', methods=['POST'])
    @limiter.limit(auth_limit)
    def forgot_password():
        """Email a password reset link (public)."""
        body = parse_body(EmailRequest)
        get_realm(kind).flows.request_password_reset(body.email)
        return jsonify({"message": "Please check your email to reset your password"})

    @bp.route('/password', methods=password_methods)
    @guard
    def set_password():
        """Set a new password; accepts the reset token or a session token."""
        body = parse_body(PasswordRequest)
        get_realm(kind).set_password(current_principal().id, body.password)
        return jsonify({"message": "Password updated"})

    @bp.route('/changeemail', methods=['POST'])
    @guard
    def change_email():
        """Change the email; it must be confirmed again before the next login."""
        body = parse_body(EmailRequest)
        get_realm(kind).flows.change_email(current_principal().id, body.email)
        return jsonify({"message": "Email updated, please check your inbox"})

    @bp.route('/resendconfirmation', methods=resend_methods)
    @guard
    def resend_confirmation():
        get_realm(kind).flows.resend_confirmation(current_principal().id)
        return jsonify({"message": "Confirmation email sent, please check your inbox"})
