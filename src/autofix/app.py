"""Application entry point: wires the record store and prints the office view."""

import logging
import sys

from autofix.agent.client import LLMCollaborator
from autofix.config import Config
from autofix.database.connection import DatabaseConnection
from autofix.database.repository import Repository
from autofix.database.schema import initialize_database
from autofix.utils.constants import APP_NAME, APP_VERSION
from autofix.utils.formatters import format_currency, format_hours, format_stock
from autofix.workflow.errors import StoreFailure
from autofix.workflow.shop import Shop
from autofix.workflow.store import ShopStore


def configure_logging(level: str | None = None):
    logging.basicConfig(
        level=(level or Config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def open_store(db_path=None) -> ShopStore:
    """Initialize the database and load both collections."""
    db = DatabaseConnection(db_path or Config.DATABASE_PATH)
    initialize_database(db)
    store = ShopStore(Repository(db))
    store.load()
    return store


def build_shop(store: ShopStore) -> Shop:
    return Shop(store, LLMCollaborator())


def print_overview(store: ShopStore, out=sys.stdout):
    """Office dashboard as plain text: open jobs, completed jobs, reorders."""
    active = store.active_records()
    print(f"{APP_NAME} {APP_VERSION}", file=out)
    print(f"\nActive jobs ({len(active)}):", file=out)
    for record in active:
        mechanic = record.mechanic_name or "unassigned"
        print(
            f"  {record.license_plate:<10} {record.client_name:<20} "
            f"{record.status.label:<18} {mechanic}",
            file=out,
        )

    completed = store.completed_records()
    print(f"\nCompleted jobs ({len(completed)}):", file=out)
    for record in completed:
        print(
            f"  {record.license_plate:<10} {record.client_name:<20} "
            f"{format_currency(record.final_amount or 0):>12} "
            f"{format_hours(record.hours_spent):>8} "
            f"{record.payment_status.value}",
            file=out,
        )

    low = store.low_stock_parts()
    if low:
        print(f"\nLow stock ({len(low)}):", file=out)
        for part in low:
            print(
                f"  {part.name:<30} "
                f"{format_stock(part.stock_quantity, part.low_stock_threshold)}"
                f" (alert at {part.low_stock_threshold})",
                file=out,
            )


def main():
    """Launch the AutoFix office overview."""
    configure_logging()
    try:
        store = open_store()
    except StoreFailure as e:
        print(f"Establishing database connection failed: {e}", file=sys.stderr)
        sys.exit(1)
    print_overview(store)


if __name__ == "__main__":
    main()
