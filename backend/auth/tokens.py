"""
JWT token creation and validation.

Handles:
- Session/confirmation token issuance, one issuer per principal kind
- Token decoding with signature, kind and expiry checks
- Token extraction from request headers

Tokens are stateless: there is no revocation list, so a token stays valid
until it expires even if the account's password changes afterwards.
"""
import logging
from datetime import datetime, timedelta, timezone

import jwt
from flask import request

from core.errors import InternalError, InvalidTokenError
from .types import PrincipalKind, TokenPayload

logger = logging.getLogger(__name__)

# Header used by the existing web client, accepted alongside Authorization
LEGACY_TOKEN_HEADER = "x-auth-token"


class TokenIssuer:
    """Signs and verifies tokens for exactly one principal kind.

    Usage:
        issuer = TokenIssuer(PrincipalKind.ADMIN, secret="...")
        token = issuer.issue(admin_id)
        payload = issuer.verify(token)   # raises InvalidTokenError
    """

    def __init__(
        self,
        kind: PrincipalKind,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=24),
    ):
        if not secret:
            raise ValueError(f"Signing secret for {kind.value} tokens is empty")
        self.kind = kind
        self._secret = secret
        self._algorithm = algorithm
        self.lifetime = lifetime

    @classmethod
    def from_settings(cls, kind: PrincipalKind, auth_settings) -> "TokenIssuer":
        secret = (
            auth_settings.jwt_admin_secret
            if kind is PrincipalKind.ADMIN
            else auth_settings.jwt_client_secret
        )
        return cls(
            kind,
            secret.get_secret_value(),
            algorithm=auth_settings.jwt_algorithm,
            lifetime=timedelta(hours=auth_settings.token_expiration_hours),
        )

    def issue(self, principal_id: str) -> str:
        """Create a signed token for a principal of this issuer's kind.

        Args:
            principal_id: The principal's opaque id

        Returns:
            Encoded JWT
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": principal_id,
            "kind": self.kind.value,
            "iat": now,
            "exp": now + self.lifetime,
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except (jwt.PyJWTError, NotImplementedError) as e:
            raise InternalError(f"Could not sign {self.kind.value} token: {e}") from e

    def verify(self, token: str) -> TokenPayload:
        """Decode and validate a token minted by this issuer.

        Does not check that the principal still exists; callers that need
        the full record re-fetch it and handle NotFoundError themselves.

        Args:
            token: Encoded JWT

        Returns:
            Decoded TokenPayload

        Raises:
            InvalidTokenError: bad signature, malformed, wrong kind, or expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError("Token has expired")
        except jwt.InvalidTokenError:
            raise InvalidTokenError("Token is not valid")

        if payload.get("kind") != self.kind.value:
            raise InvalidTokenError("Token is not valid")

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError("Token is not valid")

        return TokenPayload(
            kind=self.kind,
            sub=subject,
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


def get_token_from_request() -> str | None:
    """Extract JWT token from the Authorization or x-auth-token header.

    Returns:
        Token string or None if not present
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None

    legacy = request.headers.get(LEGACY_TOKEN_HEADER)
    if legacy:
        return legacy.strip() or None
    return None
