"""Tests for per-kind JWT issuance and verification."""

from datetime import timedelta

import jwt
import pytest

from backend.auth.tokens import TokenIssuer
from backend.auth.types import PrincipalKind, PrincipalRef
from core.errors import InternalError, InvalidTokenError

ADMIN_SECRET = "admin-secret-for-token-tests"
CLIENT_SECRET = "client-secret-for-token-tests"


@pytest.fixture
def admin_issuer():
    return TokenIssuer(PrincipalKind.ADMIN, ADMIN_SECRET)


@pytest.fixture
def client_issuer():
    return TokenIssuer(PrincipalKind.CLIENT, CLIENT_SECRET)


class TestIssueAndVerify:
    def test_round_trip_returns_same_id(self, admin_issuer):
        payload = admin_issuer.verify(admin_issuer.issue("abc123"))
        assert payload.sub == "abc123"
        assert payload.kind is PrincipalKind.ADMIN
        assert payload.principal == PrincipalRef(PrincipalKind.ADMIN, "abc123")

    def test_expiry_is_24_hours_after_issue(self, admin_issuer):
        payload = admin_issuer.verify(admin_issuer.issue("abc123"))
        assert payload.exp - payload.iat == timedelta(hours=24)

    def test_claims_carry_only_kind_and_subject(self, admin_issuer):
        claims = jwt.decode(admin_issuer.issue("abc123"), ADMIN_SECRET, algorithms=["HS256"])
        assert set(claims) == {"sub", "kind", "iat", "exp"}
        assert claims["kind"] == "admin"

    def test_expired_token_rejected(self):
        issuer = TokenIssuer(PrincipalKind.CLIENT, CLIENT_SECRET, lifetime=timedelta(seconds=-10))
        with pytest.raises(InvalidTokenError, match="expired"):
            issuer.verify(issuer.issue("abc123"))

    def test_signing_failure_is_internal_error(self):
        issuer = TokenIssuer(PrincipalKind.ADMIN, ADMIN_SECRET, algorithm="NOPE")
        with pytest.raises(InternalError):
            issuer.issue("abc123")

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            TokenIssuer(PrincipalKind.ADMIN, "")


class TestCrossKindRejection:
    @pytest.mark.parametrize("principal_id", ["abc123", "0" * 32, "x"])
    def test_client_token_fails_admin_verification(self, admin_issuer, client_issuer, principal_id):
        with pytest.raises(InvalidTokenError):
            admin_issuer.verify(client_issuer.issue(principal_id))

    def test_admin_token_fails_client_verification(self, admin_issuer, client_issuer):
        with pytest.raises(InvalidTokenError):
            client_issuer.verify(admin_issuer.issue("abc123"))

    def test_kind_claim_checked_even_with_shared_secret(self):
        admin = TokenIssuer(PrincipalKind.ADMIN, "shared")
        client = TokenIssuer(PrincipalKind.CLIENT, "shared")
        with pytest.raises(InvalidTokenError, match="not valid"):
            admin.verify(client.issue("abc123"))


class TestMalformedTokens:
    def test_garbage_rejected(self, admin_issuer):
        with pytest.raises(InvalidTokenError, match="not valid"):
            admin_issuer.verify("not.a.jwt")

    def test_tampered_signature_rejected(self, admin_issuer):
        token = admin_issuer.issue("abc123")
        head, body, sig = token.split(".")
        with pytest.raises(InvalidTokenError):
            admin_issuer.verify(f"{head}.{body}.{sig[::-1]}")

    def test_missing_subject_rejected(self, admin_issuer):
        token = jwt.encode({"kind": "admin", "iat": 1, "exp": 9999999999}, ADMIN_SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            admin_issuer.verify(token)
