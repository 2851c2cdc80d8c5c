"""Shared test fixtures."""

import pytest

from autofix.agent.client import PartGuess
from autofix.database.connection import DatabaseConnection
from autofix.database.models import QuoteCandidate
from autofix.database.repository import Repository
from autofix.database.schema import initialize_database
from autofix.workflow.errors import CollaboratorFailure
from autofix.workflow.shop import Shop
from autofix.workflow.store import ShopStore


class StubCollaborator:
    """Deterministic recognition service for workflow tests."""

    def __init__(self, plate="ABC-1234", part=None, quotes=None,
                 summary="Replaced the front brake pads and tested.",
                 fail=False):
        self.plate = plate
        self.part = part or PartGuess(name="Brake Pads", estimated_price=50.0)
        self.quotes = quotes if quotes is not None else [
            QuoteCandidate(source="AutoZone", price=120.0, labor_estimate=80.0),
            QuoteCandidate(source="NAPA", price=110.0, labor_estimate=90.0),
        ]
        self.summary = summary
        self.fail = fail
        self.calls = []

    def _call(self, name):
        self.calls.append(name)
        if self.fail:
            raise CollaboratorFailure(f"{name} timed out")

    def recognize_plate(self, image):
        self._call("recognize_plate")
        return self.plate

    def identify_part(self, image):
        self._call("identify_part")
        return self.part

    def simulate_quotes(self, part_name):
        self._call("simulate_quotes")
        return list(self.quotes)

    def summarize_job(self, transcript):
        self._call("summarize_job")
        return self.summary


@pytest.fixture
def db_path(tmp_path):
    """Provide a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def db(db_path):
    """Provide an initialized database connection."""
    conn = DatabaseConnection(db_path)
    initialize_database(conn)
    return conn


@pytest.fixture
def repo(db):
    """Provide a repository with an initialized database."""
    return Repository(db)


@pytest.fixture
def store(repo):
    """Provide a loaded last-writer-wins store."""
    s = ShopStore(repo, optimistic_locking=False)
    s.load()
    return s


@pytest.fixture
def collaborator():
    return StubCollaborator()


@pytest.fixture
def shop(store, collaborator):
    return Shop(store, collaborator)


@pytest.fixture
def pending_job(shop):
    """A freshly registered vehicle."""
    return shop.register_vehicle(
        "ABC-1234", "Maria Lopez", "+1 555 0101", "Toyota", "Corolla",
        "Squealing noise when braking",
    )


@pytest.fixture
def inspecting_job(shop, pending_job):
    return shop.check_in_by_plate("ABC-1234")


@pytest.fixture
def awaiting_job(shop, inspecting_job):
    return shop.submit_manual_quote(inspecting_job.id, "Brake Pads", 120, 80)


@pytest.fixture
def in_progress_job(shop, awaiting_job):
    return shop.approve(awaiting_job.id)


@pytest.fixture
def completed_job(shop, in_progress_job):
    return shop.complete(in_progress_job.id, "swapped pads", hours_spent=1.5)


@pytest.fixture
def make_collaborator():
    """Build a stub recognition service with custom answers."""
    return StubCollaborator
