"""
Realms: the per-kind bundle of credential store, token issuer, and flows.

Administrators and clients share every auth mechanism and differ only in
configuration (signing secret, table layout, confirmation default, password
policy, link paths). build_realms() wires one Realm per PrincipalKind from an
explicit AppSettings object; the app factory stores the result on
``app.extensions["realms"]``.
"""
import logging
from dataclasses import dataclass
from typing import Any

from flask import current_app

from core.db import DatabaseManager
from core.errors import AuthenticationError, PermissionDeniedError, ValidationError
from backend.mail import NotificationSender
from .flows import ConfirmationFlow, FlowLinks
from .passwords import PasswordHasher, validate_password_length
from .store import ADMIN_TABLE, CLIENT_TABLE, CredentialStore
from .tokens import TokenIssuer
from .types import PrincipalKind

logger = logging.getLogger(__name__)


@dataclass
class Realm:
    """Everything needed to authenticate one kind of principal."""
    kind: PrincipalKind
    store: CredentialStore
    issuer: TokenIssuer
    flows: ConfirmationFlow
    password_min_length: int
    password_max_length: int

    def check_password_policy(self, password: str) -> None:
        """Raise ValidationError if the password is outside the length bounds."""
        ok, message = validate_password_length(password, self.password_min_length, self.password_max_length)
        if not ok:
            raise ValidationError(message, details=[{"field": "password", "message": message}])

    def create(self, fields: dict[str, Any], password: str, created_by: str | None = None) -> dict[str, Any]:
        """Create a principal and email it a confirmation link."""
        self.check_password_policy(password)
        principal = self.store.create(fields, password, created_by=created_by)
        self.flows.send_confirmation(principal)
        return principal

    def login(self, email: str, password: str) -> tuple[str, dict[str, Any]]:
        """Authenticate and mint a session token.

        Returns:
            (token, principal) tuple

        Raises:
            AuthenticationError: unknown email or wrong password
            PermissionDeniedError: email not yet confirmed
        """
        try:
            principal = self.store.authenticate(email, password)
        except AuthenticationError:
            logger.warning(f"Failed {self.kind.value} login attempt")
            raise
        if not principal["emailConfirmed"]:
            logger.warning(f"Login refused for unconfirmed {self.kind.value} {principal['id']}")
            raise PermissionDeniedError("Please confirm your email to login")
        logger.info(f"{self.kind.value.capitalize()} {principal['id']} logged in")
        return self.issuer.issue(principal["id"]), principal

    def set_password(self, principal_id: str, password: str) -> None:
        self.check_password_policy(password)
        self.flows.reset_password(principal_id, password)


def build_realm(
    kind: PrincipalKind,
    settings,
    db: DatabaseManager,
    sender: NotificationSender,
) -> Realm:
    auth = settings.auth
    hasher = PasswordHasher(rounds=auth.bcrypt_rounds)

    if kind is PrincipalKind.ADMIN:
        table, api_path, web_path = ADMIN_TABLE, "/api/admins", "/admin"
        name_field, min_length = "name", auth.admin_password_min_length
    else:
        table, api_path, web_path = CLIENT_TABLE, "/api/clients", "/client"
        name_field, min_length = "firstName", auth.client_password_min_length

    store = CredentialStore(db, table, hasher)
    issuer = TokenIssuer.from_settings(kind, auth)
    links = FlowLinks.for_path(settings.links.api_base_url, settings.links.web_base_url, api_path, web_path)
    flows = ConfirmationFlow(store, issuer, sender, links, settings.mail.sender_name, name_field)

    return Realm(
        kind=kind,
        store=store,
        issuer=issuer,
        flows=flows,
        password_min_length=min_length,
        password_max_length=auth.password_max_length,
    )


def build_realms(settings, db: DatabaseManager, sender: NotificationSender) -> dict[PrincipalKind, Realm]:
    """Build one Realm per principal kind."""
    return {kind: build_realm(kind, settings, db, sender) for kind in PrincipalKind}


def get_realm(kind: PrincipalKind) -> Realm:
    """Return the Realm for this kind from the current Flask app."""
    return current_app.extensions["realms"][kind]
