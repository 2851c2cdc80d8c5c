"""Tests for whole-entity persistence in the Repository."""

import dataclasses
import sqlite3
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from autofix.database.models import (
    InventoryPart,
    JobStatus,
    Part,
    VehicleRecord,
)
from autofix.database.repository import StaleRecordError, StoreError
from autofix.workflow import state_machine


def _job(plate="ABC-1234", client="Maria Lopez"):
    return state_machine.open_job(plate, client, make="Toyota",
                                  model="Corolla")


class TestRecords:
    def test_create_sets_version_one(self, repo):
        stored = repo.create_record(_job())
        assert stored.version == 1

    def test_create_and_get(self, repo):
        stored = repo.create_record(_job())
        assert repo.get_record(stored.id) == stored

    def test_get_missing_returns_none(self, repo):
        assert repo.get_record("missing") is None

    def test_list_newest_first(self, repo):
        older = dataclasses.replace(
            _job("OLD-1"),
            created_at=datetime.now(timezone.utc) - timedelta(days=1),
        )
        repo.create_record(older)
        newer = repo.create_record(_job("NEW-1"))
        plates = [r.license_plate for r in repo.list_records()]
        assert plates == [newer.license_plate, "OLD-1"]

    def test_update_replaces_whole_record(self, repo):
        stored = repo.create_record(_job())
        checked_in = state_machine.check_in(stored)
        saved = repo.update_record(checked_in)
        assert saved.version == 2
        loaded = repo.get_record(stored.id)
        assert loaded.status == JobStatus.INSPECTING
        assert len(loaded.communication_log) == 1

    def test_part_survives_round_trip(self, repo):
        stored = repo.create_record(_job())
        part = Part(id="p1", name="Brake Pads", price=120.0,
                    labor_estimate=80.0, source="AutoZone", photo=b"img")
        repo.update_record(dataclasses.replace(stored, identified_part=part))
        assert repo.get_record(stored.id).identified_part == part

    def test_empty_photo_survives_round_trip(self, repo):
        stored = repo.create_record(_job())
        saved = repo.update_record(
            dataclasses.replace(stored, damaged_part_photo=b""),
        )
        loaded = repo.get_record(stored.id)
        assert loaded.damaged_part_photo == b""
        assert loaded == saved

    def test_update_missing_raises(self, repo):
        with pytest.raises(StoreError, match="not found"):
            repo.update_record(_job())

    def test_last_writer_wins_without_version_check(self, repo):
        stored = repo.create_record(_job())
        repo.update_record(dataclasses.replace(stored, mechanic_name="Sam"))
        repo.update_record(dataclasses.replace(stored, contact_info="555"))
        loaded = repo.get_record(stored.id)
        assert loaded.contact_info == "555"
        assert loaded.mechanic_name is None

    def test_stale_write_rejected_with_version_check(self, repo):
        stored = repo.create_record(_job())
        repo.update_record(dataclasses.replace(stored, mechanic_name="Sam"),
                           check_version=True)
        with pytest.raises(StaleRecordError):
            repo.update_record(
                dataclasses.replace(stored, contact_info="555"),
                check_version=True,
            )
        assert repo.get_record(stored.id).mechanic_name == "Sam"

    def test_sqlite_error_wrapped(self, repo):
        with patch.object(repo.db, "execute",
                          side_effect=sqlite3.OperationalError("locked")):
            with pytest.raises(StoreError, match="locked"):
                repo.list_records()


class TestInventory:
    def test_empty(self, repo):
        assert repo.list_inventory() == []

    def test_replace_keeps_order(self, repo):
        parts = [
            InventoryPart(id="b", name="Zeta Belt", price=10.0,
                          stock_quantity=2, low_stock_threshold=1),
            InventoryPart(id="a", name="Alpha Filter", price=5.0,
                          stock_quantity=8, low_stock_threshold=3),
        ]
        repo.replace_inventory(parts)
        assert repo.list_inventory() == parts

    def test_replace_removes_missing_parts(self, repo):
        repo.replace_inventory([InventoryPart(id="a", name="Filter")])
        repo.replace_inventory([InventoryPart(id="b", name="Belt")])
        assert [p.id for p in repo.list_inventory()] == ["b"]

    def test_failed_replace_keeps_previous(self, repo):
        repo.replace_inventory([InventoryPart(id="a", name="Filter")])
        bad = [
            InventoryPart(id="b", name="Belt"),
            InventoryPart(id="c", name="Hose", stock_quantity=-1),
        ]
        with pytest.raises(StoreError):
            repo.replace_inventory(bad)
        assert [p.id for p in repo.list_inventory()] == ["a"]
