"""Job status state machine.

Every event is a pure function ``(record, ...) -> record``. An event that
is not legal from the current status raises :class:`InvalidTransition`
before anything is built, so the caller's snapshot is never half-updated.

    PENDING -> INSPECTING -> AWAITING_APPROVAL -> IN_PROGRESS -> COMPLETED
    any non-terminal status -> CANCELLED
"""

import logging
import math
from dataclasses import replace
from typing import Iterable, Optional

from autofix.config import Config
from autofix.database.models import (
    JobStatus,
    LogEntryType,
    Part,
    PaymentStatus,
    VehicleRecord,
    new_id,
    utcnow,
)
from autofix.workflow.communication_log import append
from autofix.workflow.errors import (
    AmbiguousMatch,
    InvalidAmount,
    InvalidTransition,
    RecordNotFound,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.INSPECTING, JobStatus.CANCELLED}),
    JobStatus.INSPECTING: frozenset({
        JobStatus.AWAITING_APPROVAL, JobStatus.CANCELLED,
    }),
    # A revised quote keeps the job waiting on the client
    JobStatus.AWAITING_APPROVAL: frozenset({
        JobStatus.AWAITING_APPROVAL, JobStatus.IN_PROGRESS,
        JobStatus.CANCELLED,
    }),
    JobStatus.IN_PROGRESS: frozenset({JobStatus.COMPLETED, JobStatus.CANCELLED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
}


# Office status updates: check-in and completion only
NOTIFY_TARGETS = frozenset({JobStatus.INSPECTING, JobStatus.COMPLETED})


def can_transition(current: JobStatus, target: JobStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def _require(record: VehicleRecord, target: JobStatus, event: str):
    if not can_transition(record.status, target):
        raise InvalidTransition(record.status, event)


def _transition(record: VehicleRecord, target: JobStatus, event: str,
                entry_type: LogEntryType, message: str,
                **changes) -> VehicleRecord:
    _require(record, target, event)
    updated = replace(record, status=target, **changes)
    logger.info(
        f"Job {record.id} ({record.license_plate}): "
        f"{record.status.value} -> {target.value}"
    )
    return append(updated, entry_type, message)


# ── Intake ─────────────────────────────────────────────────────

def open_job(license_plate: str, client_name: str, contact_info: str = "",
             make: str = "", model: str = "",
             complaint: str = "") -> VehicleRecord:
    """Build a new PENDING record for a vehicle arriving at the office."""
    if not license_plate or not license_plate.strip():
        raise ValueError("License plate is required")
    if not client_name or not client_name.strip():
        raise ValueError("Client name is required")
    return VehicleRecord(
        id=new_id(),
        license_plate=license_plate.strip(),
        client_name=client_name.strip(),
        contact_info=contact_info.strip(),
        make=make.strip(),
        model=model.strip(),
        complaint=complaint.strip(),
        status=JobStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        created_at=utcnow(),
    )


# ── Check-in ───────────────────────────────────────────────────

def plate_matches(stored: str, scanned: str) -> bool:
    """Case-insensitive containment in either direction.

    Tolerates partial OCR reads. Punctuation is not normalized, so
    ``ABC1234`` does not match ``ABC-1234``.
    """
    stored = stored.strip().upper()
    scanned = scanned.strip().upper()
    if not stored or not scanned:
        return False
    return scanned in stored or stored in scanned


def match_plate(records: Iterable[VehicleRecord],
                scanned: str) -> VehicleRecord:
    """Resolve a scanned plate to exactly one open job."""
    scanned = (scanned or "").strip()
    if not scanned:
        raise RecordNotFound("No license plate text was read")
    matches = [
        r for r in records
        if not r.status.is_terminal and plate_matches(r.license_plate, scanned)
    ]
    if not matches:
        raise RecordNotFound(f"Record with plate {scanned} not found")
    if len(matches) > 1:
        raise AmbiguousMatch(scanned, matches)
    return matches[0]


def check_in(record: VehicleRecord) -> VehicleRecord:
    return _transition(
        record, JobStatus.INSPECTING, "check in",
        LogEntryType.CHECK_IN,
        "Vehicle checked in for inspection by mechanic.",
    )


def check_in_by_plate(records: Iterable[VehicleRecord],
                      scanned: str) -> VehicleRecord:
    return check_in(match_plate(records, scanned))


# ── Quote, approval, completion ────────────────────────────────

def send_quote(record: VehicleRecord, part: Part,
               message: str) -> VehicleRecord:
    """Accept *part* as the job's estimate and wait for the client."""
    return _transition(
        record, JobStatus.AWAITING_APPROVAL, "send a quote for",
        LogEntryType.QUOTE_SENT, message,
        identified_part=part,
    )


def approve(record: VehicleRecord,
            message: str = "Client approved the quote via WhatsApp.",
            ) -> VehicleRecord:
    return _transition(
        record, JobStatus.IN_PROGRESS, "approve",
        LogEntryType.APPROVAL_RECEIVED, message,
    )


def complete(record: VehicleRecord, description: str, hours_spent: float,
             entry_type: LogEntryType = LogEntryType.JOB_COMPLETED,
             message: str = (
                 "Job completed. Final summary generated and client notified."
             )) -> VehicleRecord:
    """Finish the work and fix the billable amount.

    ``final_amount`` is the accepted part price plus labor; a job that never
    had a quote bills 0.
    """
    _require(record, JobStatus.COMPLETED, "complete")
    if (isinstance(hours_spent, bool)
            or not isinstance(hours_spent, (int, float))
            or not math.isfinite(hours_spent) or hours_spent < 0):
        raise InvalidAmount(f"Hours spent must be a non-negative number, "
                            f"got {hours_spent!r}")
    return _transition(
        record, JobStatus.COMPLETED, "complete", entry_type, message,
        payment_status=PaymentStatus.PENDING,
        job_description=description,
        hours_spent=float(hours_spent),
        final_amount=record.estimate_total,
    )


def cancel(record: VehicleRecord, reason: str = "") -> VehicleRecord:
    message = "Job cancelled."
    if reason.strip():
        message = f"Job cancelled: {reason.strip()}"
    return _transition(
        record, JobStatus.CANCELLED, "cancel",
        LogEntryType.STATUS_UPDATE, message,
    )


# ── Office actions ─────────────────────────────────────────────

def notify_status(record: VehicleRecord, target: JobStatus,
                  hours_spent: Optional[float] = None) -> VehicleRecord:
    """Move the job to *target* and tell the client (one STATUS_UPDATE).

    The office only announces check-in and completion. Quotes, approvals and
    cancellations have their own events and log types. Completing from the
    office uses the existing description (or the complaint) and the
    configured default hours.
    """
    target = JobStatus(target)
    if target == JobStatus.AWAITING_APPROVAL:
        raise InvalidTransition(
            record.status, "notify",
            "A job only awaits approval once a quote has been sent",
        )
    if target == JobStatus.IN_PROGRESS:
        raise InvalidTransition(
            record.status, "notify",
            "Work only starts once the client approves the quote",
        )
    if target not in NOTIFY_TARGETS:
        raise InvalidTransition(
            record.status, "notify",
            f"A status update cannot move a job to {target.value}",
        )
    message = f"Status update sent to client: Job is now {target.label}."
    if target == JobStatus.COMPLETED:
        if hours_spent is None:
            hours_spent = Config.DEFAULT_HOURS_SPENT
        return complete(
            record, record.job_description or record.complaint, hours_spent,
            entry_type=LogEntryType.STATUS_UPDATE, message=message,
        )
    return _transition(record, target, "notify", LogEntryType.STATUS_UPDATE,
                       message)


def send_reminder(record: VehicleRecord) -> VehicleRecord:
    """Log a reminder to the client; the status does not change."""
    if record.status == JobStatus.CANCELLED:
        raise InvalidTransition(record.status, "send a reminder for")
    return append(
        record, LogEntryType.REMINDER_SENT,
        f"Automated reminder sent to {record.client_name} regarding job "
        f"status: {record.status.label}.",
    )


def assign_mechanic(record: VehicleRecord, mechanic_name: str) -> VehicleRecord:
    """Set the responsible mechanic. Not client-visible, so nothing is logged."""
    if record.status.is_terminal:
        raise InvalidTransition(record.status, "assign a mechanic to")
    if not mechanic_name or not mechanic_name.strip():
        raise ValueError("Mechanic name is required")
    return replace(record, mechanic_name=mechanic_name.strip())
