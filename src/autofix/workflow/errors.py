"""Failure conditions raised by the job workflow.

Pure workflow functions raise these instead of returning a partially
updated record, so a caller that catches one still holds the old snapshot.
"""


class AutoFixError(Exception):
    """Base class for every workflow failure surfaced to an actor."""


class InvalidTransition(AutoFixError):
    """The event is not legal from the record's current status."""

    def __init__(self, status, event: str, detail: str = ""):
        self.status = status
        self.event = event
        label = getattr(status, "value", status)
        super().__init__(detail or f"Cannot {event} a job that is {label}")


class RecordNotFound(AutoFixError):
    """No record matched the lookup (id or scanned plate)."""


class AmbiguousMatch(AutoFixError):
    """A scanned plate matched more than one record."""

    def __init__(self, scanned: str, matches: list):
        self.scanned = scanned
        self.matches = matches
        plates = ", ".join(r.license_plate for r in matches)
        super().__init__(
            f"Plate '{scanned}' matches {len(matches)} vehicles: {plates}"
        )


class InvalidAmount(AutoFixError, ValueError):
    """A monetary amount, hour count or stock figure is out of range."""


class PartNotFound(AutoFixError, KeyError):
    """No inventory part has the given id."""

    def __str__(self):
        return str(self.args[0]) if self.args else "Part not found"


class CollaboratorFailure(AutoFixError):
    """The recognition service errored or timed out."""


class StoreFailure(AutoFixError):
    """The record store rejected or failed a write; the change is unsaved."""


class Conflict(StoreFailure):
    """Another actor saved the record first (optimistic locking)."""
