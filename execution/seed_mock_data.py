"""Seed the database with demo shop data.

Creates:
  - 6 inventory parts (two already at or below their reorder threshold)
  - 5 vehicle records spread across the job lifecycle:
      PENDING, INSPECTING, AWAITING_APPROVAL, IN_PROGRESS, COMPLETED (paid)
  - Manual quotes and mechanic assignments for the jobs past inspection

Usage:
    python execution/seed_mock_data.py
"""

import os
import sys

_ROOT = os.path.join(os.path.dirname(__file__), "..", "src")
sys.path.insert(0, os.path.abspath(_ROOT))

from autofix.app import configure_logging, open_store  # noqa: E402
from autofix.database.models import JobStatus, PartCondition  # noqa: E402
from autofix.workflow.shop import Shop  # noqa: E402


class _OfflineCollaborator:
    """Seeding never asks the recognition service anything."""

    def _unavailable(self, *args):
        raise RuntimeError("Recognition service is not used while seeding")

    recognize_plate = identify_part = _unavailable
    simulate_quotes = summarize_job = _unavailable


def seed(shop: Shop):
    # ── 1. Inventory ──────────────────────────────────────────────
    parts_data = [
        ("Brake Pads (Front)", 45.00, 30.00, 12, 4, PartCondition.NEW),
        ("Oil Filter", 9.50, 10.00, 3, 5, PartCondition.NEW),
        ("Alternator", 185.00, 90.00, 1, 1, PartCondition.REFURBISHED),
        ("Spark Plug", 6.25, 5.00, 40, 16, PartCondition.NEW),
        ("Radiator", 140.00, 120.00, 2, 1, PartCondition.USED),
        ("Timing Belt", 38.00, 150.00, 6, 2, PartCondition.NEW),
    ]
    for name, price, labor, stock, threshold, condition in parts_data:
        shop.add_inventory_part(
            name, price, labor_estimate=labor, stock_quantity=stock,
            low_stock_threshold=threshold, condition=condition,
        )

    # ── 2. Vehicles ───────────────────────────────────────────────
    vehicles = [
        ("ABC-1234", "Maria Lopez", "+1 555 0101", "Toyota", "Corolla",
         "Squealing noise when braking"),
        ("XYZ-9876", "James Carter", "+1 555 0102", "Ford", "Focus",
         "Battery light on while driving"),
        ("KLM-4455", "Aisha Khan", "+1 555 0103", "Honda", "Civic",
         "Engine overheating in traffic"),
        ("PQR-7788", "Tom Becker", "+1 555 0104", "VW", "Golf",
         "Rattle from the engine bay at idle"),
        ("DEF-3210", "Lin Wei", "+1 555 0105", "Mazda", "3",
         "Due for oil change"),
    ]
    records = [shop.register_vehicle(*v) for v in vehicles]
    pending, inspecting, awaiting, in_progress, completed = records

    # ── 3. Lifecycle ──────────────────────────────────────────────
    for record in (inspecting, awaiting, in_progress, completed):
        shop.check_in_by_plate(record.license_plate)
        shop.assign_mechanic(record.id, "Sam")

    shop.submit_manual_quote(awaiting.id, "Radiator", 140.00, 120.00)

    shop.submit_manual_quote(in_progress.id, "Timing Belt", 38.00, 150.00)
    shop.approve(in_progress.id)

    shop.submit_manual_quote(completed.id, "Oil Filter", 9.50, 10.00)
    shop.approve(completed.id)
    shop.notify_status(completed.id, JobStatus.COMPLETED)
    shop.toggle_payment(completed.id)

    shop.send_reminder(pending.id)

    print("Seeded:")
    print(f"  Parts: {len(parts_data)}")
    print(f"  Vehicles: {len(records)}")
    print(f"  Low stock: {len(shop.store.low_stock_parts())}")


def main():
    from autofix.config import Config
    db_path = Config.DATABASE_PATH
    print(f"Database: {db_path}")

    # Confirm if DB exists
    if os.path.exists(db_path):
        resp = input("Database already exists. Seed anyway? (y/N): ").strip().lower()
        if resp != "y":
            print("Aborted.")
            return

    configure_logging()
    seed(Shop(open_store(), _OfflineCollaborator()))


if __name__ == "__main__":
    main()
