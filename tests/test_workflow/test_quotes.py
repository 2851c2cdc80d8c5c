"""Tests for the quote workflow: identify, select, adjust, finalize."""

import pytest

from autofix.database.models import JobStatus, LogEntryType, QuoteCandidate
from autofix.utils.constants import MANUAL_ENTRY_SOURCE
from autofix.workflow import quotes
from autofix.workflow import state_machine as sm
from autofix.workflow.errors import (
    CollaboratorFailure,
    InvalidAmount,
    InvalidTransition,
)

CANDIDATES = (
    QuoteCandidate(source="AutoZone", price=120.0, labor_estimate=80.0),
    QuoteCandidate(source="NAPA", price=110.0, labor_estimate=90.0),
)


def _inspecting():
    return sm.check_in(sm.open_job("ABC-1234", "Maria Lopez"))


class TestValidateAmount:
    @pytest.mark.parametrize("value", [0, 12, 12.5, "7.25"])
    def test_accepts(self, value):
        assert quotes.validate_amount(value) == float(value)

    @pytest.mark.parametrize("value", [-1, "abc", None, float("nan"),
                                       float("inf"), False])
    def test_rejects(self, value):
        with pytest.raises(InvalidAmount):
            quotes.validate_amount(value, "Price")


class TestIdentifyDamage:
    def test_gathers_candidates_without_logging(self, make_collaborator):
        record = _inspecting()
        assessment = quotes.identify_damage(record, b"photo",
                                            make_collaborator())
        assert assessment.part_name == "Brake Pads"
        assert assessment.estimated_price == 50.0
        assert len(assessment.candidates) == 2
        assert assessment.record.damaged_part_photo == b"photo"
        assert assessment.record.status == JobStatus.INSPECTING
        assert assessment.record.communication_log == record.communication_log

    def test_requires_inspecting(self, make_collaborator):
        record = sm.open_job("ABC-1234", "Maria Lopez")
        with pytest.raises(InvalidTransition):
            quotes.identify_damage(record, b"photo", make_collaborator())

    def test_allowed_while_awaiting_approval(self, make_collaborator):
        record = quotes.finalize(_inspecting(),
                                 quotes.finalize_manual("Pads", 120, 80))
        assessment = quotes.identify_damage(record, b"photo",
                                            make_collaborator())
        assert assessment.record.status == JobStatus.AWAITING_APPROVAL

    def test_rejected_after_approval(self, make_collaborator):
        record = sm.approve(quotes.finalize(
            _inspecting(), quotes.finalize_manual("Pads", 120, 80),
        ))
        with pytest.raises(InvalidTransition):
            quotes.identify_damage(record, b"photo", make_collaborator())

    def test_collaborator_failure_propagates(self, make_collaborator):
        with pytest.raises(CollaboratorFailure):
            quotes.identify_damage(_inspecting(), b"photo",
                                   make_collaborator(fail=True))


class TestPhotos:
    def test_attach_and_remove_are_silent(self):
        record = _inspecting()
        with_photo = quotes.attach_photo(record, b"img")
        without = quotes.remove_photo(with_photo)
        assert with_photo.damaged_part_photo == b"img"
        assert without.damaged_part_photo is None
        assert without.communication_log == record.communication_log


class TestSelectAndAdjust:
    def test_select(self):
        selection = quotes.select_candidate(CANDIDATES, 1)
        assert selection.source == "NAPA"
        assert selection.total == 200.0

    def test_select_out_of_range(self):
        with pytest.raises(IndexError):
            quotes.select_candidate(CANDIDATES, 2)

    def test_adjust_price_only(self):
        selection = quotes.adjust(quotes.select_candidate(CANDIDATES, 0),
                                  price=100)
        assert selection.price == 100.0
        assert selection.labor_estimate == 80.0

    def test_adjust_rejects_negative_labor(self):
        selection = quotes.select_candidate(CANDIDATES, 0)
        with pytest.raises(InvalidAmount):
            quotes.adjust(selection, labor=-5)


class TestFinalize:
    def test_finalize_sets_part_and_logs(self):
        part = quotes.build_part(quotes.select_candidate(CANDIDATES, 0),
                                 "Brake Pads")
        record = quotes.finalize(_inspecting(), part)
        assert record.status == JobStatus.AWAITING_APPROVAL
        assert record.identified_part == part
        entry = record.communication_log[-1]
        assert entry.type == LogEntryType.QUOTE_SENT
        assert entry.message == "Quote for AutoZone parts sent: $200.00"

    def test_finalize_twice_same_part_two_entries(self):
        part = quotes.finalize_manual("Brake Pads", 120, 80)
        once = quotes.finalize(_inspecting(), part)
        twice = quotes.finalize(once, part)
        assert twice.identified_part == once.identified_part
        assert len(quotes_sent(twice)) == 2

    def test_revised_quote_replaces_part(self):
        first = quotes.finalize(_inspecting(),
                                quotes.finalize_manual("Pads", 120, 80))
        revised = quotes.finalize(first,
                                  quotes.finalize_manual("Pads", 90, 80))
        assert revised.identified_part.price == 90.0
        assert revised.estimate_total == 170.0

    def test_manual_quote(self):
        part = quotes.finalize_manual(" Alternator ", "185", 90)
        assert part.source == MANUAL_ENTRY_SOURCE
        assert part.name == "Alternator"
        assert part.price == 185.0
        assert quotes.quote_message(part) == (
            "Manual quote for Alternator sent: $275.00"
        )

    def test_manual_quote_requires_name(self):
        with pytest.raises(ValueError):
            quotes.finalize_manual(" ", 10, 0)

    def test_finalize_rejected_after_approval(self):
        part = quotes.finalize_manual("Pads", 120, 80)
        approved = sm.approve(quotes.finalize(_inspecting(), part))
        with pytest.raises(InvalidTransition):
            quotes.finalize(approved, part)


def quotes_sent(record):
    return [e for e in record.communication_log
            if e.type == LogEntryType.QUOTE_SENT]
