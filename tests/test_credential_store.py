"""Tests for the per-kind credential store."""

import sqlite3
from unittest.mock import patch

import pytest

from backend.auth.passwords import PasswordHasher
from backend.auth.store import ADMIN_TABLE, CLIENT_TABLE, CredentialStore
from core import schema
from core.db import DatabaseManager
from core.errors import AuthenticationError, ConflictError, DuplicateEmailError, NotFoundError


@pytest.fixture
def db(tmp_path):
    manager = DatabaseManager(tmp_path / "store.db", pool_size=2)
    schema.initialize(manager)
    yield manager
    manager.close()


@pytest.fixture
def admins(db):
    return CredentialStore(db, ADMIN_TABLE, PasswordHasher(rounds=4))


@pytest.fixture
def clients(db):
    return CredentialStore(db, CLIENT_TABLE, PasswordHasher(rounds=4))


def _client_fields(n, **overrides):
    return {
        "firstName": "Carla",
        "lastName": "Client",
        "email": f"c{n}@x.com",
        "address": f"{n} Main Street",
        "phoneNumber": f"555-{n}",
        **overrides,
    }


class TestCreate:
    def test_distinct_emails_get_kind_defaults(self, admins, clients):
        admin = admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        client = clients.create(_client_fields(1), "clientpw")

        assert admins.find_by_email("a@x.com")["id"] == admin["id"]
        assert admin["emailConfirmed"] is False
        assert client["emailConfirmed"] is True

    def test_record_never_contains_password_material(self, admins):
        admin = admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        assert "password" not in admin
        assert "password_hash" not in admin
        assert "secret123" not in repr(admin)

    def test_duplicate_email_rejected_without_new_record(self, admins):
        admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        with pytest.raises(DuplicateEmailError):
            admins.create({"name": "Other", "email": "a@x.com"}, "secret456")
        assert len(admins.list()) == 1

    def test_same_email_allowed_across_kinds(self, admins, clients):
        admins.create({"name": "Ann", "email": "shared@x.com"}, "secret123")
        clients.create(_client_fields(1, email="shared@x.com"), "clientpw")

    def test_unique_index_is_authoritative(self, admins):
        """A create that slips past the lookup still fails on the index."""
        admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        with patch.object(CredentialStore, "find_by_email", return_value=None):
            with pytest.raises(DuplicateEmailError):
                admins.create({"name": "Racer", "email": "a@x.com"}, "secret123")
        assert len(admins.list()) == 1

    def test_other_unique_fields_conflict(self, clients):
        clients.create(_client_fields(1), "clientpw")
        with pytest.raises(ConflictError, match="address"):
            clients.create(_client_fields(2, address="1 Main Street"), "clientpw")

    def test_created_by_embeds_creator_summary(self, admins):
        boss = admins.create({"name": "Boss", "email": "boss@x.com"}, "secret123")
        admin = admins.create({"name": "Ann", "email": "a@x.com"}, "secret123", created_by=boss["id"])
        assert admin["createdBy"] == {"id": boss["id"], "name": "Boss", "email": "boss@x.com"}


class TestPasswords:
    def test_verify_password_exact_match(self, admins):
        admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        assert admins.verify_password("a@x.com", "secret123") is True
        assert admins.verify_password("a@x.com", "wrong") is False

    def test_verify_password_unknown_email(self, admins):
        with pytest.raises(NotFoundError):
            admins.verify_password("nobody@x.com", "secret123")

    def test_set_password_replaces_old(self, admins):
        admin = admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        admins.set_password(admin["id"], "newsecret1")
        assert admins.verify_password("a@x.com", "newsecret1") is True
        assert admins.verify_password("a@x.com", "secret123") is False

    def test_set_password_unknown_id(self, admins):
        with pytest.raises(NotFoundError):
            admins.set_password("missing", "newsecret1")

    def test_authenticate_same_error_for_unknown_and_wrong(self, admins):
        admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        with pytest.raises(AuthenticationError) as unknown:
            admins.authenticate("nobody@x.com", "secret123")
        with pytest.raises(AuthenticationError) as wrong:
            admins.authenticate("a@x.com", "wrong")
        assert str(unknown.value) == str(wrong.value) == "Invalid credentials"


class TestConfirmationState:
    def test_mark_email_confirmed_is_idempotent(self, admins):
        admin = admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        admins.mark_email_confirmed(admin["id"])
        assert admins.mark_email_confirmed(admin["id"])["emailConfirmed"] is True

    def test_mark_email_confirmed_unknown_id(self, admins):
        with pytest.raises(NotFoundError):
            admins.mark_email_confirmed("missing")

    def test_change_email_resets_confirmation(self, admins):
        admin = admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        admins.mark_email_confirmed(admin["id"])

        changed = admins.change_email(admin["id"], "new@x.com")

        assert changed["email"] == "new@x.com"
        assert changed["emailConfirmed"] is False
        assert admins.find_by_email("a@x.com") is None

    def test_change_email_collision(self, admins):
        admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        other = admins.create({"name": "Bob", "email": "b@x.com"}, "secret123")
        with pytest.raises(DuplicateEmailError):
            admins.change_email(other["id"], "a@x.com")
        assert admins.get(other["id"])["email"] == "b@x.com"

    def test_change_email_unknown_id(self, admins):
        with pytest.raises(NotFoundError):
            admins.change_email("missing", "new@x.com")


class TestProfile:
    def test_update_profile_keeps_confirmation(self, admins):
        admin = admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        admins.mark_email_confirmed(admin["id"])

        updated = admins.update_profile(admin["id"], {"name": "Annie", "email": "annie@x.com"})

        assert updated["name"] == "Annie"
        assert updated["email"] == "annie@x.com"
        assert updated["emailConfirmed"] is True

    def test_update_profile_ignores_unknown_fields(self, admins):
        admin = admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        updated = admins.update_profile(admin["id"], {"emailConfirmed": True, "password": "x"})
        assert updated["emailConfirmed"] is False

    def test_client_public_view_hides_confirmation(self, clients):
        client = clients.create(_client_fields(1, newsletter=True), "clientpw")
        public = clients.to_public(client)
        assert "emailConfirmed" not in public
        assert public["newsletter"] is True

    def test_delete_returns_removed_record(self, admins):
        admin = admins.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        assert admins.delete(admin["id"])["email"] == "a@x.com"
        with pytest.raises(NotFoundError):
            admins.get(admin["id"])

    def test_deleting_creator_nulls_created_by(self, admins):
        boss = admins.create({"name": "Boss", "email": "boss@x.com"}, "secret123")
        admin = admins.create({"name": "Ann", "email": "a@x.com"}, "secret123", created_by=boss["id"])
        admins.delete(boss["id"])
        assert admins.get(admin["id"])["createdBy"] is None


def test_unknown_integrity_errors_propagate(admins):
    with pytest.raises(sqlite3.IntegrityError):
        admins._raise_for_integrity(sqlite3.IntegrityError("NOT NULL constraint failed: admins.name"))
