"""Office and mechanic intents, resolved end to end.

Each intent loads the current snapshot from the :class:`ShopStore`, runs
the pure workflow transform, and persists the result. If the transform
raises, nothing is written; if the write fails, the in-memory collections
keep the previous snapshot and :class:`StoreFailure` reaches the actor, so
no log entry survives for a change that never committed.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from autofix.agent.client import RecognitionService
from autofix.config import Config
from autofix.database.models import (
    InventoryPart,
    JobStatus,
    PartCondition,
    QuoteCandidate,
    VehicleRecord,
)
from autofix.utils.constants import DEFAULT_PART_SOURCE
from autofix.workflow import quotes, state_machine
from autofix.workflow.errors import CollaboratorFailure, InvalidTransition
from autofix.workflow.store import ShopStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuoteDraft:
    """Unfinalized quote work for one job under inspection."""
    photo: bytes
    part_name: str
    estimated_price: float
    candidates: tuple[QuoteCandidate, ...]
    selection: Optional[quotes.QuoteSelection] = None


class Shop:
    """Entry point for every actor action against the shop's jobs."""

    def __init__(self, store: ShopStore, collaborator: RecognitionService):
        self.store = store
        self.collaborator = collaborator
        self._drafts: dict[str, QuoteDraft] = {}

    def _commit(self, record: VehicleRecord) -> VehicleRecord:
        return self.store.update(record)

    # ── Office ──────────────────────────────────────────────────

    def register_vehicle(self, license_plate: str, client_name: str,
                         contact_info: str = "", make: str = "",
                         model: str = "", complaint: str = "") -> VehicleRecord:
        record = state_machine.open_job(
            license_plate, client_name, contact_info, make, model, complaint,
        )
        return self.store.create(record)

    def send_reminder(self, record_id: str) -> VehicleRecord:
        return self._commit(state_machine.send_reminder(self.store.get(record_id)))

    def assign_mechanic(self, record_id: str,
                        mechanic_name: str) -> VehicleRecord:
        return self._commit(
            state_machine.assign_mechanic(self.store.get(record_id),
                                          mechanic_name)
        )

    def notify_status(self, record_id: str,
                      target: JobStatus) -> VehicleRecord:
        if JobStatus(target) == JobStatus.CANCELLED:
            return self.cancel(record_id)
        return self._commit(
            state_machine.notify_status(self.store.get(record_id), target)
        )

    def cancel(self, record_id: str, reason: str = "") -> VehicleRecord:
        updated = self._commit(
            state_machine.cancel(self.store.get(record_id), reason)
        )
        self._drafts.pop(record_id, None)
        return updated

    def toggle_payment(self, record_id: str) -> VehicleRecord:
        return self.store.toggle_payment(record_id)

    def add_inventory_part(self, name: str, price: float,
                           labor_estimate: float = 0.0,
                           stock_quantity: int = 0,
                           low_stock_threshold: Optional[int] = None,
                           condition: PartCondition = PartCondition.NEW,
                           source: str = DEFAULT_PART_SOURCE) -> InventoryPart:
        ledger = self.store.inventory.add_part(
            name, price, labor_estimate, stock_quantity,
            low_stock_threshold, condition, source,
        )
        self.store.save_inventory(ledger)
        return ledger.parts[-1]

    def update_threshold(self, part_id: str, value: int) -> InventoryPart:
        ledger = self.store.save_inventory(
            self.store.inventory.update_threshold(part_id, value)
        )
        return ledger.get_part(part_id)

    def set_stock(self, part_id: str, quantity: int) -> InventoryPart:
        ledger = self.store.save_inventory(
            self.store.inventory.set_stock(part_id, quantity)
        )
        return ledger.get_part(part_id)

    def remove_inventory_part(self, part_id: str):
        self.store.save_inventory(self.store.inventory.remove_part(part_id))

    # ── Mechanic ────────────────────────────────────────────────

    def check_in_by_plate(self, scanned: str) -> VehicleRecord:
        record = state_machine.check_in_by_plate(self.store.records, scanned)
        return self._commit(record)

    def check_in_by_plate_image(self, image: bytes) -> VehicleRecord:
        """Read the plate from a photo, then check the matching job in."""
        plate = self.collaborator.recognize_plate(image)
        logger.info(f"Plate read from photo: {plate!r}")
        return self.check_in_by_plate(plate)

    def identify_damage(self, record_id: str,
                        image: bytes) -> quotes.DamageAssessment:
        """Photograph the damage and gather distributor candidates.

        Nothing is persisted or logged; a CollaboratorFailure leaves manual
        entry (:meth:`submit_manual_quote`) as the way forward.
        """
        try:
            assessment = quotes.identify_damage(
                self.store.get(record_id), image, self.collaborator,
            )
        except CollaboratorFailure:
            logger.warning(f"Part identification failed for job {record_id}")
            raise
        self._drafts[record_id] = QuoteDraft(
            photo=image,
            part_name=assessment.part_name,
            estimated_price=assessment.estimated_price,
            candidates=assessment.candidates,
        )
        return assessment

    def draft(self, record_id: str) -> Optional[QuoteDraft]:
        return self._drafts.get(record_id)

    def _require_draft(self, record_id: str) -> QuoteDraft:
        draft = self._drafts.get(record_id)
        if draft is None:
            raise InvalidTransition(
                self.store.get(record_id).status, "select a quote",
                "No damage has been identified for this job yet",
            )
        return draft

    def select_quote(self, record_id: str,
                     index: int) -> quotes.QuoteSelection:
        draft = self._require_draft(record_id)
        selection = quotes.select_candidate(draft.candidates, index)
        self._drafts[record_id] = replace(draft, selection=selection)
        return selection

    def adjust_quote(self, record_id: str, price: Optional[float] = None,
                     labor: Optional[float] = None) -> quotes.QuoteSelection:
        draft = self._require_draft(record_id)
        if draft.selection is None:
            raise InvalidTransition(
                self.store.get(record_id).status, "adjust",
                "Select a distributor quote before adjusting it",
            )
        selection = quotes.adjust(draft.selection, price, labor)
        self._drafts[record_id] = replace(draft, selection=selection)
        return selection

    def remove_photo(self, record_id: str) -> VehicleRecord:
        """Discard the damage photo and its candidates without logging."""
        self._drafts.pop(record_id, None)
        record = self.store.get(record_id)
        if record.damaged_part_photo is None:
            return record
        return self._commit(quotes.remove_photo(record))

    def finalize_quote(self, record_id: str) -> VehicleRecord:
        """Send the selected (and possibly adjusted) quote to the client."""
        draft = self._require_draft(record_id)
        if draft.selection is None:
            raise InvalidTransition(
                self.store.get(record_id).status, "finalize",
                "Select a distributor quote before sending it",
            )
        part = quotes.build_part(draft.selection, draft.part_name, draft.photo)
        record = quotes.attach_photo(self.store.get(record_id), draft.photo)
        updated = self._commit(quotes.finalize(record, part))
        self._drafts.pop(record_id, None)
        return updated

    def submit_manual_quote(self, record_id: str, name: str, price: float,
                            labor: float) -> VehicleRecord:
        part = quotes.finalize_manual(name, price, labor)
        updated = self._commit(quotes.finalize(self.store.get(record_id), part))
        self._drafts.pop(record_id, None)
        return updated

    def approve(self, record_id: str) -> VehicleRecord:
        return self._commit(state_machine.approve(self.store.get(record_id)))

    def complete(self, record_id: str, transcript: str,
                 hours_spent: Optional[float] = None) -> VehicleRecord:
        """Finish the job with an AI-polished description of the work."""
        record = self.store.get(record_id)
        if not state_machine.can_transition(record.status, JobStatus.COMPLETED):
            raise InvalidTransition(record.status, "complete")
        try:
            description = self.collaborator.summarize_job(transcript)
        except CollaboratorFailure:
            logger.warning(f"Summary failed for job {record_id}; "
                           f"using the mechanic's notes")
            description = transcript
        if hours_spent is None:
            hours_spent = Config.DEFAULT_HOURS_SPENT
        return self._commit(
            state_machine.complete(record, description or transcript,
                                   hours_spent)
        )
