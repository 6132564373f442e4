"""
Email confirmation, password reset, and email change flows.

Nothing about a flow is persisted: its state is the signed token handed out
by email plus the principal's emailConfirmed flag. Tokens carry only the
principal id, never a new password or email, so resending is always safe.

Known gaps, kept as-is:
- Resetting or changing a password leaves earlier tokens valid until expiry.
- change_email() stores the new address and marks it unconfirmed before the
  new mailbox has been proven; a mistyped address locks the account out of
  login until an admin corrects it.
"""
import logging
from dataclasses import dataclass
from typing import Any

from core.errors import NotFoundError, ValidationError
from backend.mail import NotificationSender, confirmation_email, password_reset_email
from .store import CredentialStore
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlowLinks:
    """URL templates for emailed links; ``{token}`` is substituted."""
    confirm: str          # API endpoint that confirms directly
    confirm_changed: str  # web page confirming a changed email
    reset_password: str   # web page collecting the new password

    @classmethod
    def for_path(cls, api_base_url: str, web_base_url: str, api_path: str, web_path: str) -> "FlowLinks":
        api = api_base_url.rstrip("/")
        web = web_base_url.rstrip("/")
        return cls(
            confirm=f"{api}{api_path}/confirmation/{{token}}",
            confirm_changed=f"{web}{web_path}/confirmation?token={{token}}",
            reset_password=f"{web}{web_path}/changepassword?token={{token}}",
        )


class ConfirmationFlow:
    """Token-by-email flows for one principal kind."""

    def __init__(
        self,
        store: CredentialStore,
        issuer: TokenIssuer,
        sender: NotificationSender,
        links: FlowLinks,
        brand: str,
        name_field: str,
    ):
        self.store = store
        self.issuer = issuer
        self.sender = sender
        self.links = links
        self.brand = brand
        self.name_field = name_field

    def _name(self, principal: dict[str, Any]) -> str:
        return principal.get(self.name_field) or principal["email"]

    def _email(self, to: str, subject_and_body: tuple[str, str]) -> None:
        subject, body = subject_and_body
        self.sender.send(self.sender.compose(to, subject, body))

    # =========================================================================
    # Email confirmation: Pending -> Confirmed
    # =========================================================================

    def send_confirmation(self, principal: dict[str, Any], changed: bool = False) -> str:
        """Mint a confirmation token and email the link to the principal.

        Returns:
            The minted token
        """
        token = self.issuer.issue(principal["id"])
        template = self.links.confirm_changed if changed else self.links.confirm
        link = template.format(token=token)
        self._email(principal["email"], confirmation_email(self._name(principal), link, self.brand, changed=changed))
        logger.info(f"Confirmation email queued for {self.issuer.kind.value} {principal['id']}")
        return token

    def resend_confirmation(self, principal_id: str) -> str:
        """Send a fresh confirmation link.

        Raises:
            NotFoundError: no such principal
            ValidationError: email already confirmed
        """
        principal = self.store.get(principal_id)
        if principal["emailConfirmed"]:
            raise ValidationError("Email already confirmed")
        return self.send_confirmation(principal)

    def confirm(self, token: str) -> dict[str, Any]:
        """Verify a confirmation token and mark the email confirmed.

        Replaying a valid token on a confirmed account is a no-op success.

        Raises:
            InvalidTokenError: bad, expired, or wrong-kind token
            NotFoundError: principal no longer exists
        """
        payload = self.issuer.verify(token)
        principal = self.store.mark_email_confirmed(payload.sub)
        logger.info(f"Email confirmed for {self.issuer.kind.value} {payload.sub}")
        return principal

    # =========================================================================
    # Password reset
    # =========================================================================

    def request_password_reset(self, email: str) -> str:
        """Email a reset link; the account itself is left untouched.

        Raises:
            NotFoundError: no principal with this email
        """
        principal = self.store.find_by_email(email)
        if principal is None:
            logger.warning(f"Password reset requested for unknown {self.issuer.kind.value} email")
            raise NotFoundError(f"There's no {self.issuer.kind.value} with given email")

        token = self.issuer.issue(principal["id"])
        link = self.links.reset_password.format(token=token)
        self._email(principal["email"], password_reset_email(self._name(principal), link, self.brand))
        logger.info(f"Password reset email queued for {self.issuer.kind.value} {principal['id']}")
        return token

    def reset_password(self, principal_id: str, new_password: str) -> None:
        """Replace the password of a principal authenticated by a reset or session token."""
        self.store.set_password(principal_id, new_password)

    # =========================================================================
    # Email change
    # =========================================================================

    def change_email(self, principal_id: str, new_email: str) -> dict[str, Any]:
        """Store the new email as unconfirmed, then email a confirmation link to it."""
        principal = self.store.change_email(principal_id, new_email)
        self.send_confirmation(principal, changed=True)
        return principal
