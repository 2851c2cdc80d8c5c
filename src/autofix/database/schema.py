"""Database schema definition and initialization."""

SCHEMA_VERSION = 1

# Each statement is a separate string to avoid executescript issues
_SCHEMA_STATEMENTS = [
    """CREATE TABLE IF NOT EXISTS schema_version (
        version INTEGER PRIMARY KEY
    )""",

    # Vehicle records (one row per visit, whole entity per row)
    """CREATE TABLE IF NOT EXISTS vehicle_records (
        id TEXT PRIMARY KEY,
        license_plate TEXT NOT NULL,
        client_name TEXT NOT NULL,
        contact_info TEXT,
        make TEXT,
        model TEXT,
        complaint TEXT,
        status TEXT NOT NULL DEFAULT 'PENDING'
            CHECK (status IN ('PENDING', 'INSPECTING', 'AWAITING_APPROVAL',
                              'IN_PROGRESS', 'COMPLETED', 'CANCELLED')),
        payment_status TEXT NOT NULL DEFAULT 'PENDING'
            CHECK (payment_status IN ('PENDING', 'PAID')),
        created_at TEXT NOT NULL,
        mechanic_name TEXT,
        damaged_part_photo TEXT,
        identified_part TEXT,
        hours_spent REAL,
        job_description TEXT,
        final_amount REAL,
        communication_log TEXT NOT NULL DEFAULT '[]',
        version INTEGER NOT NULL DEFAULT 0
    )""",

    # Inventory parts (stock ledger)
    """CREATE TABLE IF NOT EXISTS inventory_parts (
        id TEXT PRIMARY KEY,
        position INTEGER NOT NULL DEFAULT 0,
        name TEXT NOT NULL,
        price REAL NOT NULL DEFAULT 0 CHECK (price >= 0),
        labor_estimate REAL NOT NULL DEFAULT 0 CHECK (labor_estimate >= 0),
        condition TEXT NOT NULL DEFAULT 'new'
            CHECK (condition IN ('new', 'used', 'refurbished')),
        source TEXT,
        photo TEXT,
        stock_quantity INTEGER NOT NULL DEFAULT 0
            CHECK (stock_quantity >= 0),
        low_stock_threshold INTEGER NOT NULL DEFAULT 0
            CHECK (low_stock_threshold >= 0)
    )""",

    "CREATE INDEX IF NOT EXISTS idx_records_status ON vehicle_records(status)",
    "CREATE INDEX IF NOT EXISTS idx_records_created ON vehicle_records(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_inventory_position ON inventory_parts(position)",

    f"INSERT OR REPLACE INTO schema_version (version) VALUES ({SCHEMA_VERSION})",
]


def _get_schema_version(conn) -> int:
    """Get the current schema version, or 0 if no schema exists."""
    row = conn.execute(
        "SELECT name FROM sqlite_master "
        "WHERE type = 'table' AND name = 'schema_version'"
    ).fetchone()
    if row is None:
        return 0
    row = conn.execute("SELECT MAX(version) AS v FROM schema_version").fetchone()
    return row["v"] if row and row["v"] else 0


def initialize_database(db_connection):
    """Create all tables and indexes on a fresh database.

    An existing database is left as it is.
    """
    with db_connection.get_connection() as conn:
        version = _get_schema_version(conn)

        if version == 0:
            for stmt in _SCHEMA_STATEMENTS:
                conn.execute(stmt)
