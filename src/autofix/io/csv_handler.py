"""CSV import and export for the inventory ledger and job history."""

import csv
import logging
from pathlib import Path

from autofix.database.models import PartCondition
from autofix.io.validators import validate_inventory_row
from autofix.utils.constants import DEFAULT_PART_SOURCE
from autofix.workflow.store import ShopStore

logger = logging.getLogger(__name__)

INVENTORY_CSV_COLUMNS = [
    "name", "price", "labor_estimate", "condition", "source",
    "stock_quantity", "low_stock_threshold",
]

JOB_CSV_COLUMNS = [
    "license_plate", "client_name", "make", "model", "status",
    "payment_status", "mechanic_name", "hours_spent", "final_amount",
    "created_at",
]


def export_inventory_csv(store: ShopStore, filepath: str | Path) -> int:
    """Export the inventory to CSV. Returns the number of rows written."""
    parts = list(store.inventory)
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=INVENTORY_CSV_COLUMNS)
        writer.writeheader()
        for part in parts:
            writer.writerow({
                "name": part.name,
                "price": part.price,
                "labor_estimate": part.labor_estimate,
                "condition": part.condition.value,
                "source": part.source,
                "stock_quantity": part.stock_quantity,
                "low_stock_threshold": part.low_stock_threshold,
            })
    return len(parts)


def export_jobs_csv(store: ShopStore, filepath: str | Path) -> int:
    """Export all vehicle records to CSV. Returns the number of rows written."""
    records = store.records
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=JOB_CSV_COLUMNS)
        writer.writeheader()
        for record in records:
            writer.writerow({
                "license_plate": record.license_plate,
                "client_name": record.client_name,
                "make": record.make,
                "model": record.model,
                "status": record.status.value,
                "payment_status": record.payment_status.value,
                "mechanic_name": record.mechanic_name or "",
                "hours_spent": (
                    "" if record.hours_spent is None else record.hours_spent
                ),
                "final_amount": (
                    "" if record.final_amount is None else record.final_amount
                ),
                "created_at": record.created_at.isoformat(),
            })
    return len(records)


def import_inventory_csv(
    store: ShopStore,
    filepath: str | Path,
    update_existing: bool = False,
) -> dict:
    """Import inventory parts from CSV, matched to existing parts by name.

    Valid rows are collected into one new ledger and saved in a single
    write. Returns a results dict with counts and errors.
    """
    filepath = Path(filepath)
    results = {"imported": 0, "updated": 0, "skipped": 0, "errors": []}

    ledger = store.inventory
    by_name = {p.name.lower(): p.id for p in ledger}

    try:
        with open(filepath, "r", encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        results["errors"].append(f"File error: {e}")
        return results

    for row_num, row in enumerate(rows, start=2):
        errors = validate_inventory_row(row, row_num)
        if errors:
            results["errors"].extend(errors)
            results["skipped"] += 1
            continue

        name = row["name"].strip()
        quantity = int(row.get("stock_quantity") or 0)
        existing_id = by_name.get(name.lower())

        if existing_id and update_existing:
            if row.get("stock_quantity"):
                ledger = ledger.set_stock(existing_id, quantity)
            if row.get("low_stock_threshold"):
                ledger = ledger.update_threshold(
                    existing_id, int(row["low_stock_threshold"]),
                )
            results["updated"] += 1
        elif existing_id:
            results["skipped"] += 1
        else:
            threshold = row.get("low_stock_threshold")
            ledger = ledger.add_part(
                name=name,
                price=float(row.get("price") or 0),
                labor_estimate=float(row.get("labor_estimate") or 0),
                stock_quantity=quantity,
                low_stock_threshold=int(threshold) if threshold else None,
                condition=PartCondition(
                    (row.get("condition") or "new").strip().lower()
                ),
                source=(row.get("source") or "").strip() or DEFAULT_PART_SOURCE,
            )
            by_name[name.lower()] = ledger.parts[-1].id
            results["imported"] += 1

    if results["imported"] or results["updated"]:
        store.save_inventory(ledger)
        logger.info(
            f"Inventory import: {results['imported']} new, "
            f"{results['updated']} updated, {results['skipped']} skipped"
        )
    return results
