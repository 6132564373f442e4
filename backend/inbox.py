"""
Public submissions: contact messages and equipment donation offers.

Anyone may submit; only admins list and delete. Both kinds share one
storage shape and differ in their extra fields.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any

from core.db import DatabaseManager, new_id, utcnow_iso
from core.errors import NotFoundError

logger = logging.getLogger(__name__)

_COMMON_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "latitude": "latitude",
    "longitude": "longitude",
    "ipAddress": "ip_address",
}


class SubmissionBox:
    """Create, list, and delete submissions in one table."""

    def __init__(self, db: DatabaseManager, table: str, label: str, extra_fields: dict[str, str]):
        self.db = db
        self.table = table
        self.label = label
        self.fields = {**_COMMON_FIELDS, **extra_fields}

    def _to_record(self, row: sqlite3.Row) -> dict[str, Any]:
        record = {"id": row["id"], "date": row["created_at"]}
        for api_name, column in self.fields.items():
            record[api_name] = row[column]
        return record

    def get(self, submission_id: str) -> dict[str, Any]:
        with self.db.connect() as conn:
            row = conn.execute(f"SELECT * FROM {self.table} WHERE id = ?", (submission_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"{self.label} not found")
        return self._to_record(row)

    def list(self) -> list[dict[str, Any]]:
        """All submissions, newest first."""
        with self.db.connect() as conn:
            rows = conn.execute(f"SELECT * FROM {self.table} ORDER BY created_at DESC, id").fetchall()
        return [self._to_record(r) for r in rows]

    def create(self, fields: dict[str, Any]) -> dict[str, Any]:
        submission_id = new_id()
        columns = {
            "id": submission_id,
            "created_at": utcnow_iso(),
            **{column: fields.get(api) for api, column in self.fields.items() if fields.get(api) is not None},
        }
        names = ", ".join(columns)
        marks = ", ".join("?" for _ in columns)
        with self.db.connect() as conn:
            conn.execute(f"INSERT INTO {self.table} ({names}) VALUES ({marks})", tuple(columns.values()))
        logger.info(f"New {self.label.lower()} {submission_id}")
        return self.get(submission_id)

    def delete(self, submission_id: str) -> dict[str, Any]:
        record = self.get(submission_id)
        with self.db.connect() as conn:
            conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (submission_id,))
        logger.info(f"Deleted {self.label.lower()} {submission_id}")
        return record


def message_box(db: DatabaseManager) -> SubmissionBox:
    return SubmissionBox(db, "messages", "Message", {"message": "message"})


def donation_box(db: DatabaseManager) -> SubmissionBox:
    return SubmissionBox(
        db, "donations", "Donation",
        {"equipmentType": "equipment_type", "message": "message", "picture": "picture"},
    )
