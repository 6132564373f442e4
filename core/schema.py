"""
Database schema initialization.

IMPORTANT: initialize() should ONLY be called by:
- backend/app.py at startup
- scripts/create_admin.py
- Test fixtures

Never call schema initialization from feature code (routes, decorators, etc.).

Every principal table carries a UNIQUE index on email. That index, not
the lookup a handler may do first, is what enforces one account per email.
"""
import logging

from core.db import DatabaseManager

logger = logging.getLogger(__name__)

_TABLES = [
    """
    CREATE TABLE IF NOT EXISTS admins (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        phone TEXT,
        email_confirmed INTEGER NOT NULL DEFAULT 0,
        profile_pic TEXT NOT NULL DEFAULT 'default-profile-pic.png',
        created_by TEXT REFERENCES admins(id) ON DELETE SET NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_admins_email ON admins(email)",
    """
    CREATE TABLE IF NOT EXISTS clients (
        id TEXT PRIMARY KEY,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        email TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        address TEXT NOT NULL,
        phone_number TEXT NOT NULL,
        newsletter INTEGER NOT NULL DEFAULT 0,
        note TEXT,
        email_confirmed INTEGER NOT NULL DEFAULT 1,
        profile_pic TEXT NOT NULL DEFAULT 'default-profile-pic.png',
        created_by TEXT REFERENCES admins(id) ON DELETE SET NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_clients_email ON clients(email)",
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_clients_address ON clients(address)",
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_clients_phone_number ON clients(phone_number)",
    """
    CREATE TABLE IF NOT EXISTS equipment (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        type TEXT NOT NULL,
        serial_id INTEGER NOT NULL,
        sell_price REAL NOT NULL,
        rent_price REAL NOT NULL,
        picture TEXT NOT NULL DEFAULT 'default-pic.png',
        created_by TEXT REFERENCES admins(id) ON DELETE SET NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_equipment_serial_id ON equipment(serial_id)",
    """
    CREATE TABLE IF NOT EXISTS orders (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
        admin_id TEXT REFERENCES admins(id) ON DELETE SET NULL,
        equipment_id TEXT NOT NULL REFERENCES equipment(id) ON DELETE RESTRICT,
        is_rent INTEGER NOT NULL DEFAULT 0,
        rent_expiry TEXT,
        total_price REAL NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_orders_client_id ON orders(client_id)",
    """
    CREATE TABLE IF NOT EXISTS messages (
        id TEXT PRIMARY KEY,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        email TEXT NOT NULL,
        message TEXT NOT NULL,
        latitude REAL,
        longitude REAL,
        ip_address TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS donations (
        id TEXT PRIMARY KEY,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        email TEXT NOT NULL,
        equipment_type TEXT NOT NULL,
        message TEXT,
        picture TEXT NOT NULL DEFAULT 'default-donation-pic.png',
        latitude REAL,
        longitude REAL,
        ip_address TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS newsletters (
        id TEXT PRIMARY KEY,
        client_id TEXT REFERENCES clients(id) ON DELETE SET NULL,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        email TEXT NOT NULL,
        latitude REAL,
        longitude REAL,
        ip_address TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_newsletters_email ON newsletters(email)",
]


def initialize(db: DatabaseManager) -> None:
    """Create all tables and indexes if they do not exist."""
    with db.connect() as conn:
        for statement in _TABLES:
            conn.execute(statement)
    logger.info(f"Database schema ready at {db.db_path}")
