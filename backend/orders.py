"""
Order records: a client buying or renting one piece of equipment.

Orders are placed by an admin on behalf of a client. Deleting the client
deletes its orders; equipment cannot be deleted while an order references it.
"""
from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict
from typing import Any, Optional

from core.db import DatabaseManager, new_id, utcnow_iso
from core.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT o.*,
           c.first_name AS client_first_name, c.last_name AS client_last_name,
           c.email AS client_email,
           e.name AS equipment_name, e.type AS equipment_type,
           e.serial_id AS equipment_serial_id,
           a.name AS admin_name, a.email AS admin_email
    FROM orders o
    JOIN clients c ON c.id = o.client_id
    JOIN equipment e ON e.id = o.equipment_id
    LEFT JOIN admins a ON a.id = o.admin_id
"""


def _to_record(row: sqlite3.Row) -> dict[str, Any]:
    record = {
        "id": row["id"],
        "client": {
            "id": row["client_id"],
            "firstName": row["client_first_name"],
            "lastName": row["client_last_name"],
            "email": row["client_email"],
        },
        "equipment": {
            "id": row["equipment_id"],
            "name": row["equipment_name"],
            "type": row["equipment_type"],
            "serialId": row["equipment_serial_id"],
        },
        "admin": None,
        "isRent": bool(row["is_rent"]),
        "rentExpiry": row["rent_expiry"],
        "totalPrice": row["total_price"],
        "date": row["created_at"],
    }
    if row["admin_id"]:
        record["admin"] = {"id": row["admin_id"], "name": row["admin_name"], "email": row["admin_email"]}
    return record


def _check_rent(is_rent: bool, rent_expiry: Optional[str]) -> Optional[str]:
    if is_rent and not rent_expiry:
        message = "rentExpiry is required for rentals"
        raise ValidationError(message, details=[{"field": "rentExpiry", "message": message}])
    return rent_expiry if is_rent else None


class OrderBook:
    """Order persistence."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def get(self, order_id: str) -> dict[str, Any]:
        with self.db.connect() as conn:
            row = conn.execute(f"{_SELECT} WHERE o.id = ?", (order_id,)).fetchone()
        if row is None:
            raise NotFoundError("Order not found")
        return _to_record(row)

    def list(self, client_id: Optional[str] = None) -> list[dict[str, Any]]:
        """All orders, newest first, optionally for one client."""
        sql, params = _SELECT, ()
        if client_id is not None:
            sql, params = f"{_SELECT} WHERE o.client_id = ?", (client_id,)
        with self.db.connect() as conn:
            rows = conn.execute(f"{sql} ORDER BY o.created_at DESC, o.id", params).fetchall()
        return [_to_record(r) for r in rows]

    def ids_by_client(self) -> dict[str, list[str]]:
        """Map client id -> ids of its orders, for client listings."""
        grouped: dict[str, list[str]] = defaultdict(list)
        with self.db.connect() as conn:
            for row in conn.execute("SELECT id, client_id FROM orders ORDER BY created_at, id"):
                grouped[row["client_id"]].append(row["id"])
        return dict(grouped)

    def create(
        self,
        client_id: str,
        equipment_id: str,
        total_price: float,
        is_rent: bool = False,
        rent_expiry: Optional[str] = None,
        admin_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Place an order.

        Raises:
            ValidationError: a rental without rentExpiry
            NotFoundError: client or equipment does not exist
        """
        rent_expiry = _check_rent(is_rent, rent_expiry)
        order_id = new_id()

        with self.db.connect() as conn:
            if conn.execute("SELECT 1 FROM clients WHERE id = ?", (client_id,)).fetchone() is None:
                raise NotFoundError("Client not found")
            if conn.execute("SELECT 1 FROM equipment WHERE id = ?", (equipment_id,)).fetchone() is None:
                raise NotFoundError("Equipment not found")
            conn.execute(
                "INSERT INTO orders (id, client_id, admin_id, equipment_id, is_rent, rent_expiry, "
                "total_price, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (order_id, client_id, admin_id, equipment_id, int(is_rent), rent_expiry,
                 total_price, utcnow_iso()),
            )

        logger.info(f"Order {order_id} placed for client {client_id}")
        return self.get(order_id)

    def update(
        self,
        order_id: str,
        total_price: float,
        is_rent: bool,
        rent_expiry: Optional[str] = None,
    ) -> dict[str, Any]:
        rent_expiry = _check_rent(is_rent, rent_expiry)
        with self.db.connect() as conn:
            cursor = conn.execute(
                "UPDATE orders SET total_price = ?, is_rent = ?, rent_expiry = ? WHERE id = ?",
                (total_price, int(is_rent), rent_expiry, order_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("Order not found")
        return self.get(order_id)

    def delete(self, order_id: str) -> dict[str, Any]:
        record = self.get(order_id)
        with self.db.connect() as conn:
            conn.execute("DELETE FROM orders WHERE id = ?", (order_id,))
        logger.info(f"Deleted order {order_id}")
        return record
