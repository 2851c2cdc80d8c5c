"""Repository layer: whole-entity reads and writes for the record store."""

import json
import logging
import sqlite3
from dataclasses import replace
from typing import Optional

from .connection import DatabaseConnection
from .models import InventoryPart, VehicleRecord

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A record store operation failed; nothing was written."""


class StaleRecordError(StoreError):
    """The stored record changed since the caller loaded it."""


_RECORD_COLUMNS = (
    "id", "license_plate", "client_name", "contact_info", "make", "model",
    "complaint", "status", "payment_status", "created_at", "mechanic_name",
    "damaged_part_photo", "identified_part", "hours_spent",
    "job_description", "final_amount", "communication_log", "version",
)

_INVENTORY_COLUMNS = (
    "id", "position", "name", "price", "labor_estimate", "condition",
    "source", "photo", "stock_quantity", "low_stock_threshold",
)


def _record_to_row(record: VehicleRecord) -> tuple:
    data = record.to_dict()
    data["identified_part"] = (
        json.dumps(data["identified_part"])
        if data["identified_part"] is not None else None
    )
    data["communication_log"] = json.dumps(data["communication_log"])
    return tuple(data[c] for c in _RECORD_COLUMNS)


def _row_to_record(row: sqlite3.Row) -> VehicleRecord:
    data = dict(row)
    if data["identified_part"]:
        data["identified_part"] = json.loads(data["identified_part"])
    data["communication_log"] = json.loads(data["communication_log"] or "[]")
    return VehicleRecord.from_dict(data)


class Repository:
    """Persists vehicle records and the inventory collection.

    Every write replaces a whole entity; there are no partial updates.
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db

    # ── Vehicle records ─────────────────────────────────────────

    def list_records(self) -> list[VehicleRecord]:
        """All records, newest first."""
        try:
            rows = self.db.execute(
                "SELECT * FROM vehicle_records ORDER BY created_at DESC"
            )
        except sqlite3.Error as e:
            raise StoreError(f"Could not load vehicle records: {e}") from e
        return [_row_to_record(r) for r in rows]

    def get_record(self, record_id: str) -> Optional[VehicleRecord]:
        try:
            rows = self.db.execute(
                "SELECT * FROM vehicle_records WHERE id = ?", (record_id,)
            )
        except sqlite3.Error as e:
            raise StoreError(f"Could not load record {record_id}: {e}") from e
        return _row_to_record(rows[0]) if rows else None

    def create_record(self, record: VehicleRecord) -> VehicleRecord:
        """Insert a new record and return it as stored (version 1)."""
        stored = replace(record, version=1)
        placeholders = ", ".join("?" for _ in _RECORD_COLUMNS)
        try:
            with self.db.get_connection() as conn:
                conn.execute(
                    f"INSERT INTO vehicle_records ({', '.join(_RECORD_COLUMNS)}) "
                    f"VALUES ({placeholders})",
                    _record_to_row(stored),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Could not create record {record.id}: {e}") from e
        logger.debug(f"Created vehicle record {record.id}")
        return stored

    def update_record(self, record: VehicleRecord,
                      check_version: bool = False) -> VehicleRecord:
        """Replace the stored record with *record*.

        Without *check_version* the last writer wins. With it, the write is
        rejected when the stored version differs from ``record.version``.
        """
        assignments = ", ".join(f"{c} = ?" for c in _RECORD_COLUMNS[1:])
        try:
            with self.db.get_connection() as conn:
                row = conn.execute(
                    "SELECT version FROM vehicle_records WHERE id = ?",
                    (record.id,),
                ).fetchone()
                if row is None:
                    raise StoreError(f"Record {record.id} not found")
                if check_version and row["version"] != record.version:
                    raise StaleRecordError(
                        f"Record {record.id} is at version {row['version']}, "
                        f"write was based on version {record.version}"
                    )
                stored = replace(record, version=row["version"] + 1)
                values = _record_to_row(stored)
                conn.execute(
                    f"UPDATE vehicle_records SET {assignments} WHERE id = ?",
                    values[1:] + (record.id,),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Could not update record {record.id}: {e}") from e
        return stored

    # ── Inventory ───────────────────────────────────────────────

    def list_inventory(self) -> list[InventoryPart]:
        try:
            rows = self.db.execute(
                "SELECT * FROM inventory_parts ORDER BY position, name"
            )
        except sqlite3.Error as e:
            raise StoreError(f"Could not load inventory: {e}") from e
        return [InventoryPart.from_dict(dict(r)) for r in rows]

    def replace_inventory(self, parts: list[InventoryPart]):
        """Swap the whole inventory collection in one transaction."""
        placeholders = ", ".join("?" for _ in _INVENTORY_COLUMNS)
        try:
            with self.db.get_connection() as conn:
                conn.execute("DELETE FROM inventory_parts")
                for position, part in enumerate(parts):
                    data = part.to_dict()
                    data["position"] = position
                    conn.execute(
                        f"INSERT INTO inventory_parts "
                        f"({', '.join(_INVENTORY_COLUMNS)}) "
                        f"VALUES ({placeholders})",
                        tuple(data[c] for c in _INVENTORY_COLUMNS),
                    )
        except sqlite3.Error as e:
            raise StoreError(f"Could not save inventory: {e}") from e
        logger.debug(f"Saved {len(parts)} inventory parts")
