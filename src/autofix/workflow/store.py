"""Job record store adapter.

:class:`ShopStore` owns the in-memory vehicle records and inventory ledger
that every view reads from. Writes go to the record store first; memory is
only reconciled once the store has accepted the change, so a failed write
leaves both sides as they were.

Concurrent edits to the same record are last-writer-wins (the whole record
is replaced) unless optimistic locking is enabled, in which case a write
based on a stale version raises :class:`Conflict`.
"""

import logging
from dataclasses import replace
from typing import Optional

from autofix.config import Config
from autofix.database.models import (
    InventoryPart,
    JobStatus,
    PaymentStatus,
    VehicleRecord,
)
from autofix.database.repository import Repository, StaleRecordError, StoreError
from autofix.workflow.errors import (
    Conflict,
    InvalidTransition,
    RecordNotFound,
    StoreFailure,
)
from autofix.workflow.inventory import InventoryLedger

logger = logging.getLogger(__name__)


class ShopStore:
    """The two shop collections plus their persistence round-trips."""

    def __init__(self, repository: Repository,
                 optimistic_locking: Optional[bool] = None):
        self.repository = repository
        if optimistic_locking is None:
            optimistic_locking = Config.OPTIMISTIC_LOCKING
        self.optimistic_locking = optimistic_locking
        self._records: list[VehicleRecord] = []
        self._inventory = InventoryLedger()

    # ── Loading ─────────────────────────────────────────────────

    def load(self):
        """Replace both collections with the store's contents."""
        try:
            records = self.repository.list_records()
            inventory = self.repository.list_inventory()
        except StoreError as e:
            logger.error(f"Database connection failed: {e}")
            raise StoreFailure(str(e)) from e
        self._records = records
        self._inventory = InventoryLedger(inventory)
        logger.info(
            f"Loaded {len(records)} vehicle records and "
            f"{len(inventory)} inventory parts"
        )

    # ── Vehicle records ─────────────────────────────────────────

    @property
    def records(self) -> list[VehicleRecord]:
        """All records, newest first."""
        return list(self._records)

    def get(self, record_id: str) -> VehicleRecord:
        for record in self._records:
            if record.id == record_id:
                return record
        raise RecordNotFound(f"Record {record_id} not found")

    def active_records(self) -> list[VehicleRecord]:
        return [r for r in self._records if r.is_active]

    def completed_records(self) -> list[VehicleRecord]:
        return [r for r in self._records if r.status == JobStatus.COMPLETED]

    def create(self, record: VehicleRecord) -> VehicleRecord:
        try:
            saved = self.repository.create_record(record)
        except StoreError as e:
            logger.error(f"Failed to save record {record.id}: {e}")
            raise StoreFailure(f"Failed to save to database: {e}") from e
        self._records = [saved] + self._records
        return saved

    def update(self, record: VehicleRecord) -> VehicleRecord:
        """Persist *record* as a whole and publish the stored snapshot."""
        try:
            saved = self.repository.update_record(
                record, check_version=self.optimistic_locking,
            )
        except StaleRecordError as e:
            logger.warning(f"Rejected stale write: {e}")
            raise Conflict(str(e)) from e
        except StoreError as e:
            logger.error(f"Database update failed for {record.id}: {e}")
            raise StoreFailure(f"Database update failed: {e}") from e
        self._reconcile(saved)
        return saved

    def _reconcile(self, saved: VehicleRecord):
        if any(r.id == saved.id for r in self._records):
            self._records = [
                saved if r.id == saved.id else r for r in self._records
            ]
        else:
            self._records = [saved] + self._records

    def toggle_payment(self, record_id: str) -> VehicleRecord:
        """Flip PAID <-> PENDING on a completed job."""
        record = self.get(record_id)
        if record.status != JobStatus.COMPLETED:
            raise InvalidTransition(record.status, "change payment on")
        target = (
            PaymentStatus.PENDING
            if record.payment_status == PaymentStatus.PAID
            else PaymentStatus.PAID
        )
        return self.update(replace(record, payment_status=target))

    # ── Inventory ───────────────────────────────────────────────

    @property
    def inventory(self) -> InventoryLedger:
        return self._inventory

    def save_inventory(self, ledger: InventoryLedger) -> InventoryLedger:
        try:
            self.repository.replace_inventory(list(ledger))
        except StoreError as e:
            logger.error(f"Inventory update failed: {e}")
            raise StoreFailure(f"Inventory update failed: {e}") from e
        self._inventory = ledger
        return ledger

    def low_stock_parts(self) -> list[InventoryPart]:
        return self._inventory.low_stock_parts()
