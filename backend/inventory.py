"""
Equipment inventory records.

Each piece of equipment carries a unique integer serialId; the UNIQUE index
on serial_id is what enforces it.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any

from core.db import DatabaseManager, new_id, unique_violation_column, utcnow_iso
from core.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

# API field name -> column name for the editable fields
_FIELDS = {
    "name": "name",
    "type": "type",
    "serialId": "serial_id",
    "sellPrice": "sell_price",
    "rentPrice": "rent_price",
}


class EquipmentCatalog:
    """Equipment persistence."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    @staticmethod
    def _select_sql(where: str = "") -> str:
        return (
            "SELECT e.*, a.name AS creator_name, a.email AS creator_email "
            f"FROM equipment e LEFT JOIN admins a ON a.id = e.created_by {where}"
        )

    @staticmethod
    def _to_record(row: sqlite3.Row) -> dict[str, Any]:
        record = {
            "id": row["id"],
            "name": row["name"],
            "type": row["type"],
            "serialId": row["serial_id"],
            "sellPrice": row["sell_price"],
            "rentPrice": row["rent_price"],
            "picture": row["picture"],
            "date": row["created_at"],
            "createdBy": None,
        }
        if row["created_by"]:
            record["createdBy"] = {
                "id": row["created_by"],
                "name": row["creator_name"],
                "email": row["creator_email"],
            }
        return record

    @staticmethod
    def _raise_for_integrity(error: sqlite3.IntegrityError):
        if unique_violation_column(error) == "serial_id":
            raise ConflictError("Equipment with this serialId already exists")
        raise error

    def get(self, equipment_id: str) -> dict[str, Any]:
        with self.db.connect() as conn:
            row = conn.execute(self._select_sql("WHERE e.id = ?"), (equipment_id,)).fetchone()
        if row is None:
            raise NotFoundError("Equipment not found")
        return self._to_record(row)

    def list(self) -> list[dict[str, Any]]:
        with self.db.connect() as conn:
            rows = conn.execute(self._select_sql("ORDER BY e.created_at, e.id")).fetchall()
        return [self._to_record(r) for r in rows]

    def create(self, fields: dict[str, Any], created_by: str | None = None) -> dict[str, Any]:
        """Store new equipment.

        Raises:
            ConflictError: serialId already used
        """
        equipment_id = new_id()
        columns = {
            "id": equipment_id,
            "created_by": created_by,
            "created_at": utcnow_iso(),
            **{column: fields[api] for api, column in _FIELDS.items()},
        }
        names = ", ".join(columns)
        marks = ", ".join("?" for _ in columns)
        try:
            with self.db.connect() as conn:
                conn.execute(f"INSERT INTO equipment ({names}) VALUES ({marks})", tuple(columns.values()))
        except sqlite3.IntegrityError as e:
            self._raise_for_integrity(e)

        logger.info(f"Created equipment {equipment_id}")
        return self.get(equipment_id)

    def update(self, equipment_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        columns = {
            column: fields[api]
            for api, column in _FIELDS.items()
            if fields.get(api) is not None
        }
        if not columns:
            return self.get(equipment_id)

        assignments = ", ".join(f"{name} = ?" for name in columns)
        try:
            with self.db.connect() as conn:
                cursor = conn.execute(
                    f"UPDATE equipment SET {assignments} WHERE id = ?",
                    (*columns.values(), equipment_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError("Equipment not found")
        except sqlite3.IntegrityError as e:
            self._raise_for_integrity(e)
        return self.get(equipment_id)

    def delete(self, equipment_id: str) -> dict[str, Any]:
        """Delete equipment that no order references.

        Raises:
            NotFoundError: no such equipment
            ConflictError: orders still reference it
        """
        record = self.get(equipment_id)
        try:
            with self.db.connect() as conn:
                conn.execute("DELETE FROM equipment WHERE id = ?", (equipment_id,))
        except sqlite3.IntegrityError:
            raise ConflictError("Equipment is referenced by existing orders")
        logger.info(f"Deleted equipment {equipment_id}")
        return record
