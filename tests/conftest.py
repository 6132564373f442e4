"""Shared pytest fixtures for rental backend tests."""
import os
import sys

import pytest

# Add project root to path
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _PROJECT_ROOT)

# ---------------------------------------------------------------------------
# Deterministic test environment, set BEFORE any backend module imports.
# TESTING gives both signing secrets fixed test values; the low bcrypt cost
# keeps hashing fast; mail and rate limiting are off unless a test opts in.
# ---------------------------------------------------------------------------
os.environ.setdefault('TESTING', 'true')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.setdefault('RATE_LIMIT_ENABLED', 'false')
os.environ.setdefault('MAIL_ENABLED', 'false')
os.environ.setdefault('LOG_FORMAT', 'text')

import email_validator  # noqa: E402

from backend.auth import PrincipalKind  # noqa: E402
from backend.mail import NotificationSender  # noqa: E402
from config.settings import AppSettings, DatabaseSettings, get_settings  # noqa: E402

# Fixture addresses use the reserved .test domain.
email_validator.TEST_ENVIRONMENT = True


class RecordingSender(NotificationSender):
    """NotificationSender that keeps every email instead of delivering it."""

    def __init__(self):
        super().__init__(
            host="localhost",
            port=0,
            sender_address="no-reply@lifts.test",
            sender_name="Lifts For Life",
            enabled=False,
            max_workers=1,
        )
        self.sent = []

    def send(self, email):
        self.sent.append(email)
        return None

    def last_to(self, address):
        """Most recent email sent to this address."""
        matches = [e for e in self.sent if e.to == address]
        assert matches, f"no email sent to {address}"
        return matches[-1]


def _token_from_email(email, marker):
    start = email.html_body.index(marker) + len(marker)
    end = email.html_body.index('"', start)
    return email.html_body[start:end]


@pytest.fixture
def token_from_email():
    """Pull the token out of the link in an emailed body.

    marker is the text right before the token, e.g. "/confirmation/" or "token=".
    """
    return _token_from_email


# =============================================================================
# Settings / App Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Each test sees the environment as it is when it runs."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path):
    """AppSettings pointing at a per-test SQLite file."""
    return AppSettings(database=DatabaseSettings(database_path=tmp_path / "test_rental.db"))


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def app(settings, sender):
    from backend.app import create_app
    app = create_app(settings=settings, config={'TESTING': True}, mail_sender=sender)
    yield app
    app.extensions["db"].close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def realms(app):
    return app.extensions["realms"]


@pytest.fixture
def admin_realm(realms):
    return realms[PrincipalKind.ADMIN]


@pytest.fixture
def client_realm(realms):
    return realms[PrincipalKind.CLIENT]


# =============================================================================
# Principal Factories
# =============================================================================

@pytest.fixture
def make_admin(admin_realm):
    """Create an admin in the store; confirmed unless asked otherwise."""
    counter = {"n": 0}

    def _make(email=None, password="secret123", name="Ann Admin", confirmed=True, created_by=None):
        counter["n"] += 1
        email = email or f"admin{counter['n']}@lifts.test"
        admin = admin_realm.store.create({"name": name, "email": email}, password, created_by=created_by)
        if confirmed:
            admin = admin_realm.store.mark_email_confirmed(admin["id"])
        return admin
    return _make


@pytest.fixture
def make_client_account(client_realm):
    """Create a client in the store with unique address and phone number."""
    counter = {"n": 0}

    def _make(email=None, password="clientpw", first_name="Carla", created_by=None, **extra):
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "firstName": first_name,
            "lastName": "Client",
            "email": email or f"client{n}@lifts.test",
            "address": f"{n} Main Street",
            "phoneNumber": f"555-000{n}",
            **extra,
        }
        return client_realm.store.create(fields, password, created_by=created_by)
    return _make


@pytest.fixture
def admin(make_admin):
    return make_admin(email="boss@lifts.test")


@pytest.fixture
def admin_token(admin_realm, admin):
    return admin_realm.issuer.issue(admin["id"])


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def client_account(make_client_account):
    return make_client_account(email="carla@lifts.test")


@pytest.fixture
def client_headers(client_realm, client_account):
    return {"Authorization": f"Bearer {client_realm.issuer.issue(client_account['id'])}"}
