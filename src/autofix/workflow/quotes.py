"""Quote workflow for a job under inspection.

identify damage (AI, may be wrong) -> pick a distributor candidate ->
adjust price and labor by hand -> finalize into the job's accepted part.
Nothing becomes a billable estimate until :func:`finalize` runs.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from autofix.agent.client import RecognitionService
from autofix.database.models import (
    JobStatus,
    Part,
    PartCondition,
    QuoteCandidate,
    VehicleRecord,
    new_id,
)
from autofix.utils.constants import MANUAL_ENTRY_SOURCE
from autofix.utils.formatters import format_currency
from autofix.workflow.errors import InvalidAmount, InvalidTransition
from autofix.workflow.state_machine import can_transition, send_quote


@dataclass(frozen=True)
class DamageAssessment:
    """Outcome of photographing a damaged part."""
    record: VehicleRecord
    part_name: str
    estimated_price: float
    candidates: tuple[QuoteCandidate, ...]


@dataclass(frozen=True)
class QuoteSelection:
    """A candidate picked by the mechanic, open for adjustment."""
    source: str
    price: float
    labor_estimate: float

    @property
    def total(self) -> float:
        return self.price + self.labor_estimate


def validate_amount(value, label: str = "Amount") -> float:
    """Return *value* as a float, or raise InvalidAmount."""
    if isinstance(value, bool):
        raise InvalidAmount(f"{label} must be a number")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidAmount(f"{label} must be a number, got {value!r}") from None
    if not math.isfinite(amount):
        raise InvalidAmount(f"{label} must be finite")
    if amount < 0:
        raise InvalidAmount(f"{label} cannot be negative")
    return amount


def attach_photo(record: VehicleRecord, image: bytes) -> VehicleRecord:
    return replace(record, damaged_part_photo=image)


def remove_photo(record: VehicleRecord) -> VehicleRecord:
    return replace(record, damaged_part_photo=None)


def identify_damage(record: VehicleRecord, image: bytes,
                    collaborator: RecognitionService) -> DamageAssessment:
    """Ask the recognition service what is broken and who sells it.

    The returned record carries the photo; its status and log are untouched.
    A failing service raises CollaboratorFailure and the mechanic can fall
    back to :func:`finalize_manual`. A job already awaiting approval can be
    re-photographed for a revised quote.
    """
    if not can_transition(record.status, JobStatus.AWAITING_APPROVAL):
        raise InvalidTransition(record.status, "identify damage on")
    guess = collaborator.identify_part(image)
    candidates = collaborator.simulate_quotes(guess.name)
    return DamageAssessment(
        record=attach_photo(record, image),
        part_name=guess.name,
        estimated_price=guess.estimated_price,
        candidates=tuple(candidates),
    )


def select_candidate(candidates: Sequence[QuoteCandidate],
                     index: int) -> QuoteSelection:
    if not 0 <= index < len(candidates):
        raise IndexError(
            f"Quote {index} is out of range ({len(candidates)} candidates)"
        )
    chosen = candidates[index]
    return QuoteSelection(
        source=chosen.source,
        price=chosen.price,
        labor_estimate=chosen.labor_estimate,
    )


def adjust(selection: QuoteSelection, price: Optional[float] = None,
           labor: Optional[float] = None) -> QuoteSelection:
    """Override price and/or labor before the quote goes out."""
    changes = {}
    if price is not None:
        changes["price"] = validate_amount(price, "Price")
    if labor is not None:
        changes["labor_estimate"] = validate_amount(labor, "Labor estimate")
    return replace(selection, **changes)


def build_part(selection: QuoteSelection, part_name: str,
               photo: Optional[bytes] = None) -> Part:
    return Part(
        id=new_id(),
        name=part_name.strip() or "Identified Part",
        price=validate_amount(selection.price, "Price"),
        labor_estimate=validate_amount(selection.labor_estimate,
                                       "Labor estimate"),
        condition=PartCondition.NEW,
        source=selection.source,
        photo=photo,
    )


def finalize_manual(name: str, price: float, labor: float) -> Part:
    """Build a quote by hand, skipping photo identification entirely."""
    if not name or not name.strip():
        raise ValueError("Part name is required")
    return Part(
        id=new_id(),
        name=name.strip(),
        price=validate_amount(price, "Price"),
        labor_estimate=validate_amount(labor, "Labor estimate"),
        condition=PartCondition.NEW,
        source=MANUAL_ENTRY_SOURCE,
    )


def quote_message(part: Part) -> str:
    total = format_currency(part.total)
    if part.source == MANUAL_ENTRY_SOURCE:
        return f"Manual quote for {part.name} sent: {total}"
    return f"Quote for {part.source} parts sent: {total}"


def finalize(record: VehicleRecord, part: Part) -> VehicleRecord:
    """Commit *part* as the accepted estimate and send the quote.

    Replaces any earlier part outright and appends one QUOTE_SENT entry.
    Finalizing the same part twice leaves the same ``identified_part`` but
    two log entries.
    """
    validate_amount(part.price, "Price")
    validate_amount(part.labor_estimate, "Labor estimate")
    return send_quote(record, part, quote_message(part))
