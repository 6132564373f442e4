"""
Credential store: principal records for one principal kind.

Handles:
- Principal creation with bcrypt-hashed passwords
- Password verification and replacement
- Email confirmation state and email changes
- Profile lookup, listing, update, and deletion

One CredentialStore is built per PrincipalKind from a PrincipalTable that
names the backing table, the profile columns, and the kind's default
confirmation state. The password hash never leaves this module.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Optional

from core.db import DatabaseManager, new_id, unique_violation_column, utcnow_iso
from core.errors import (
    AuthenticationError,
    ConflictError,
    DuplicateEmailError,
    NotFoundError,
)
from .passwords import PasswordHasher
from .types import PrincipalKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrincipalTable:
    """Storage layout and policy for one principal kind."""
    kind: PrincipalKind
    table: str
    label: str
    # API field name -> column name, for the kind-specific profile fields
    profile_fields: dict[str, str]
    email_confirmed_default: bool
    # Fields left out of API representations
    hidden_fields: tuple[str, ...] = field(default_factory=tuple)


ADMIN_TABLE = PrincipalTable(
    kind=PrincipalKind.ADMIN,
    table="admins",
    label="Admin",
    profile_fields={"name": "name", "phone": "phone"},
    # Admins are created by other admins and must prove mailbox ownership
    email_confirmed_default=False,
)

CLIENT_TABLE = PrincipalTable(
    kind=PrincipalKind.CLIENT,
    table="clients",
    label="Client",
    profile_fields={
        "firstName": "first_name",
        "lastName": "last_name",
        "address": "address",
        "phoneNumber": "phone_number",
        "newsletter": "newsletter",
        "note": "note",
    },
    # Clients are onboarded by an admin and trusted immediately
    email_confirmed_default=True,
    hidden_fields=("emailConfirmed",),
)

_BOOLEAN_FIELDS = {"newsletter"}


class CredentialStore:
    """Principal persistence for a single kind.

    Usage:
        store = CredentialStore(db, ADMIN_TABLE, PasswordHasher(rounds=10))
        admin = store.create({"name": "Ann", "email": "a@x.com"}, "secret123")
        store.verify_password("a@x.com", "secret123")   # True
    """

    def __init__(self, db: DatabaseManager, layout: PrincipalTable, hasher: PasswordHasher):
        self.db = db
        self.layout = layout
        self.hasher = hasher
        # Compared against when an email is unknown so a miss costs one
        # bcrypt check, same as a wrong password.
        self._dummy_hash = hasher.hash(new_id())

    @property
    def kind(self) -> PrincipalKind:
        return self.layout.kind

    # =========================================================================
    # Row mapping
    # =========================================================================

    def _select_sql(self, where: str = "") -> str:
        t = self.layout.table
        return (
            f"SELECT p.*, c.name AS creator_name, c.email AS creator_email "
            f"FROM {t} p LEFT JOIN admins c ON c.id = p.created_by {where}"
        )

    def _to_record(self, row: sqlite3.Row) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": row["id"],
            "email": row["email"],
            "emailConfirmed": bool(row["email_confirmed"]),
            "profilePic": row["profile_pic"],
            "date": row["created_at"],
            "createdBy": None,
        }
        for api_name, column in self.layout.profile_fields.items():
            value = row[column]
            record[api_name] = bool(value) if api_name in _BOOLEAN_FIELDS else value
        if row["created_by"]:
            record["createdBy"] = {
                "id": row["created_by"],
                "name": row["creator_name"],
                "email": row["creator_email"],
            }
        return record

    def to_public(self, record: dict[str, Any]) -> dict[str, Any]:
        """Drop fields this kind never exposes over the API."""
        return {k: v for k, v in record.items() if k not in self.layout.hidden_fields}

    def _raise_for_integrity(self, error: sqlite3.IntegrityError):
        column = unique_violation_column(error)
        if column == "email":
            raise DuplicateEmailError("Email already exists")
        if column:
            api_name = next(
                (k for k, v in self.layout.profile_fields.items() if v == column),
                column,
            )
            raise ConflictError(f"{api_name} already in use")
        raise error

    def _columns_for(self, fields: dict[str, Any]) -> dict[str, Any]:
        columns = {}
        for api_name, value in fields.items():
            column = self.layout.profile_fields.get(api_name)
            if column is None:
                continue
            columns[column] = int(bool(value)) if api_name in _BOOLEAN_FIELDS else value
        return columns

    # =========================================================================
    # Lookup
    # =========================================================================

    def get(self, principal_id: str) -> dict[str, Any]:
        """Return the principal with this id.

        Raises:
            NotFoundError: no such principal
        """
        with self.db.connect() as conn:
            row = conn.execute(self._select_sql("WHERE p.id = ?"), (principal_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"{self.layout.label} not found")
        return self._to_record(row)

    def find_by_email(self, email: str) -> Optional[dict[str, Any]]:
        """Return the principal with this exact email, or None."""
        with self.db.connect() as conn:
            row = conn.execute(self._select_sql("WHERE p.email = ?"), (email,)).fetchone()
        return self._to_record(row) if row else None

    def list(self) -> list[dict[str, Any]]:
        """Return all principals of this kind, oldest first."""
        with self.db.connect() as conn:
            rows = conn.execute(self._select_sql("ORDER BY p.created_at, p.id")).fetchall()
        return [self._to_record(r) for r in rows]

    # =========================================================================
    # Creation
    # =========================================================================

    def create(self, fields: dict[str, Any], password: str, created_by: Optional[str] = None) -> dict[str, Any]:
        """Store a new principal with a hashed password.

        Args:
            fields: email plus kind-specific profile fields (API names)
            password: Plain text password, hashed before storage
            created_by: Id of the admin creating this principal

        Returns:
            The stored principal record

        Raises:
            DuplicateEmailError: email already registered for this kind
        """
        email = fields["email"]
        if self.find_by_email(email) is not None:
            raise DuplicateEmailError("Email already exists")

        principal_id = new_id()
        columns = {
            "id": principal_id,
            "email": email,
            "password_hash": self.hasher.hash(password),
            "email_confirmed": int(self.layout.email_confirmed_default),
            "created_by": created_by,
            "created_at": utcnow_iso(),
            **self._columns_for(fields),
        }
        names = ", ".join(columns)
        marks = ", ".join("?" for _ in columns)

        try:
            with self.db.connect() as conn:
                conn.execute(
                    f"INSERT INTO {self.layout.table} ({names}) VALUES ({marks})",
                    tuple(columns.values()),
                )
        except sqlite3.IntegrityError as e:
            # A concurrent create can pass the lookup above; the unique index decides.
            self._raise_for_integrity(e)

        logger.info(f"Created {self.kind.value} {principal_id}")
        return self.get(principal_id)

    # =========================================================================
    # Credentials
    # =========================================================================

    def _password_row(self, email: str) -> Optional[sqlite3.Row]:
        with self.db.connect() as conn:
            return conn.execute(
                f"SELECT id, password_hash FROM {self.layout.table} WHERE email = ?",
                (email,),
            ).fetchone()

    def verify_password(self, email: str, password: str) -> bool:
        """Check a plaintext password against the stored hash.

        Raises:
            NotFoundError: no principal with this email
        """
        row = self._password_row(email)
        if row is None:
            raise NotFoundError(f"{self.layout.label} not found")
        return self.hasher.verify(password, row["password_hash"])

    def authenticate(self, email: str, password: str) -> dict[str, Any]:
        """Return the principal if email and password match.

        Raises:
            AuthenticationError: unknown email or wrong password (same message)
        """
        row = self._password_row(email)
        if row is None:
            self.hasher.verify(password, self._dummy_hash)
            raise AuthenticationError("Invalid credentials")
        if not self.hasher.verify(password, row["password_hash"]):
            raise AuthenticationError("Invalid credentials")
        return self.get(row["id"])

    def set_password(self, principal_id: str, password: str) -> None:
        """Rehash and overwrite the password.

        Previously issued tokens stay valid until they expire.

        Raises:
            NotFoundError: no such principal
        """
        password_hash = self.hasher.hash(password)
        with self.db.connect() as conn:
            cursor = conn.execute(
                f"UPDATE {self.layout.table} SET password_hash = ? WHERE id = ?",
                (password_hash, principal_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"{self.layout.label} not found")
        logger.info(f"Password updated for {self.kind.value} {principal_id}")

    # =========================================================================
    # Mutation
    # =========================================================================

    def _update(self, principal_id: str, columns: dict[str, Any]) -> dict[str, Any]:
        """Apply column updates and return the fresh record (one transaction)."""
        if not columns:
            return self.get(principal_id)

        assignments = ", ".join(f"{name} = ?" for name in columns)
        try:
            with self.db.connect() as conn:
                cursor = conn.execute(
                    f"UPDATE {self.layout.table} SET {assignments} WHERE id = ?",
                    (*columns.values(), principal_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError(f"{self.layout.label} not found")
                row = conn.execute(self._select_sql("WHERE p.id = ?"), (principal_id,)).fetchone()
        except sqlite3.IntegrityError as e:
            self._raise_for_integrity(e)
        return self._to_record(row)

    def mark_email_confirmed(self, principal_id: str) -> dict[str, Any]:
        """Set emailConfirmed; confirming an already confirmed email is a no-op."""
        return self._update(principal_id, {"email_confirmed": 1})

    def change_email(self, principal_id: str, new_email: str) -> dict[str, Any]:
        """Replace the email and reset confirmation to pending.

        The new address is stored before it is confirmed.

        Raises:
            DuplicateEmailError: another principal of this kind has new_email
            NotFoundError: no such principal
        """
        existing = self.find_by_email(new_email)
        if existing is not None and existing["id"] != principal_id:
            raise DuplicateEmailError("Email already exists")
        return self._update(principal_id, {"email": new_email, "email_confirmed": 0})

    def update_profile(self, principal_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Update kind-specific profile fields (and email, without touching confirmation)."""
        columns = self._columns_for(fields)
        if "email" in fields and fields["email"] is not None:
            existing = self.find_by_email(fields["email"])
            if existing is not None and existing["id"] != principal_id:
                raise DuplicateEmailError("Email already exists")
            columns["email"] = fields["email"]
        return self._update(principal_id, columns)

    def delete(self, principal_id: str) -> dict[str, Any]:
        """Delete a principal and return the removed record.

        Raises:
            NotFoundError: no such principal
        """
        record = self.get(principal_id)
        with self.db.connect() as conn:
            conn.execute(f"DELETE FROM {self.layout.table} WHERE id = ?", (principal_id,))
        logger.info(f"Deleted {self.kind.value} {principal_id}")
        return record
