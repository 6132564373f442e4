"""Tests for the admin and client authorization guards."""

from unittest.mock import patch

import pytest
from flask import g, jsonify

from backend.auth import (
    LEGACY_TOKEN_HEADER,
    PrincipalKind,
    admin_required,
    client_required,
    current_principal,
)


@pytest.fixture
def guarded_app(app):
    """App with two guarded routes that record whether the handler ran."""
    calls = []

    @app.route('/_check/admin')
    @admin_required
    def admin_view():
        calls.append(g.principal)
        return jsonify({"kind": g.principal.kind.value, "id": g.principal.id})

    @app.route('/_check/client')
    @client_required
    def client_view():
        calls.append(current_principal())
        return jsonify({"kind": current_principal().kind.value, "id": current_principal().id})

    app.guard_calls = calls
    return app


class TestGuardRejects:
    def test_missing_token_never_runs_handler(self, guarded_app):
        resp = guarded_app.test_client().get('/_check/client')
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "No token, authorization denied"
        assert guarded_app.guard_calls == []

    def test_invalid_token(self, guarded_app):
        resp = guarded_app.test_client().get('/_check/admin', headers={"Authorization": "Bearer junk"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Token is not valid"
        assert guarded_app.guard_calls == []

    def test_client_token_on_admin_route(self, guarded_app, client_realm):
        token = client_realm.issuer.issue("some-client")
        resp = guarded_app.test_client().get('/_check/admin', headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert guarded_app.guard_calls == []

    def test_admin_token_on_client_route(self, guarded_app, admin_realm):
        token = admin_realm.issuer.issue("some-admin")
        resp = guarded_app.test_client().get('/_check/client', headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_non_bearer_scheme_ignored(self, guarded_app, admin_realm):
        token = admin_realm.issuer.issue("some-admin")
        resp = guarded_app.test_client().get('/_check/admin', headers={"Authorization": f"Token {token}"})
        assert resp.status_code == 401


class TestGuardAccepts:
    def test_bearer_token_attaches_principal(self, guarded_app, admin_realm):
        token = admin_realm.issuer.issue("admin-1")
        resp = guarded_app.test_client().get('/_check/admin', headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.get_json() == {"kind": "admin", "id": "admin-1"}
        assert guarded_app.guard_calls[0].kind is PrincipalKind.ADMIN

    def test_legacy_header_accepted(self, guarded_app, client_realm):
        token = client_realm.issuer.issue("client-1")
        resp = guarded_app.test_client().get('/_check/client', headers={LEGACY_TOKEN_HEADER: token})
        assert resp.status_code == 200
        assert resp.get_json()["id"] == "client-1"

    def test_guard_does_not_touch_store(self, guarded_app, admin_realm):
        """A token for a principal that no longer exists still passes the guard."""
        token = admin_realm.issuer.issue("deleted-admin")
        with patch.object(admin_realm.store, "get", side_effect=AssertionError("store read")):
            resp = guarded_app.test_client().get('/_check/admin', headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200


class TestUnauthenticatedClientEndpoint:
    def test_client_only_endpoint_returns_401(self, client, client_realm):
        with patch.object(client_realm.store, "get") as store_get:
            resp = client.get('/api/clients/me')
        assert resp.status_code == 401
        store_get.assert_not_called()


class TestCurrentPrincipal:
    def test_matches_guard_attachment(self, guarded_app, client_realm):
        token = client_realm.issuer.issue("client-7")
        resp = guarded_app.test_client().get('/_check/client', headers={"Authorization": f"Bearer {token}"})
        assert resp.get_json() == {"kind": "client", "id": "client-7"}
        assert guarded_app.guard_calls[0].id == "client-7"
