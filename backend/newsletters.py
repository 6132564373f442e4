"""
Newsletter subscriptions, kept locally (no mailing-list service sync).
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any

from core.db import DatabaseManager, new_id, unique_violation_column, utcnow_iso
from core.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def _to_record(row: sqlite3.Row) -> dict[str, Any]:
    return {
        "id": row["id"],
        "clientId": row["client_id"],
        "firstName": row["first_name"],
        "lastName": row["last_name"],
        "email": row["email"],
        "latitude": row["latitude"],
        "longitude": row["longitude"],
        "ipAddress": row["ip_address"],
        "date": row["created_at"],
    }


class NewsletterList:
    """One subscription per email address."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def list(self) -> list[dict[str, Any]]:
        with self.db.connect() as conn:
            rows = conn.execute("SELECT * FROM newsletters ORDER BY created_at DESC, id").fetchall()
        return [_to_record(r) for r in rows]

    def subscribe(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Add a subscription, linked to the client with the same email if any.

        Raises:
            ConflictError: email already subscribed
        """
        subscription_id = new_id()
        email = fields["email"]
        try:
            with self.db.connect() as conn:
                client = conn.execute("SELECT id FROM clients WHERE email = ?", (email,)).fetchone()
                conn.execute(
                    "INSERT INTO newsletters (id, client_id, first_name, last_name, email, "
                    "latitude, longitude, ip_address, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        subscription_id,
                        client["id"] if client else None,
                        fields["firstName"],
                        fields["lastName"],
                        email,
                        fields.get("latitude"),
                        fields.get("longitude"),
                        fields.get("ipAddress"),
                        utcnow_iso(),
                    ),
                )
                row = conn.execute("SELECT * FROM newsletters WHERE id = ?", (subscription_id,)).fetchone()
        except sqlite3.IntegrityError as e:
            if unique_violation_column(e) == "email":
                raise ConflictError("Email already subscribed")
            raise

        logger.info(f"Newsletter subscription {subscription_id} added")
        return _to_record(row)

    def unsubscribe(self, email: str) -> dict[str, Any]:
        """Remove the subscription for this email.

        Raises:
            NotFoundError: email not subscribed
        """
        with self.db.connect() as conn:
            row = conn.execute("SELECT * FROM newsletters WHERE email = ?", (email,)).fetchone()
            if row is None:
                raise NotFoundError("Email not subscribed")
            conn.execute("DELETE FROM newsletters WHERE id = ?", (row["id"],))
        logger.info(f"Newsletter subscription {row['id']} removed")
        return _to_record(row)
