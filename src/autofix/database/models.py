"""Data models for the job lifecycle and the inventory ledger.

Every entity is a frozen dataclass: workflow functions never mutate a
snapshot, they build a new one with ``dataclasses.replace``.
"""

import base64
import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, enum.Enum):
    PENDING = "PENDING"
    INSPECTING = "INSPECTING"
    AWAITING_APPROVAL = "AWAITING_APPROVAL"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.CANCELLED)

    @property
    def label(self) -> str:
        """Human-readable form used in client messages."""
        return self.value.replace("_", " ")


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class PartCondition(str, enum.Enum):
    NEW = "new"
    USED = "used"
    REFURBISHED = "refurbished"


class LogEntryType(str, enum.Enum):
    QUOTE_SENT = "QUOTE_SENT"
    APPROVAL_RECEIVED = "APPROVAL_RECEIVED"
    JOB_COMPLETED = "JOB_COMPLETED"
    CHECK_IN = "CHECK_IN"
    REMINDER_SENT = "REMINDER_SENT"
    STATUS_UPDATE = "STATUS_UPDATE"
    OTHER = "OTHER"


def _encode_photo(photo: Optional[bytes]) -> Optional[str]:
    if photo is None:
        return None
    return base64.b64encode(photo).decode("ascii")


def _decode_photo(data: Optional[str]) -> Optional[bytes]:
    if data is None:
        return None
    return base64.b64decode(data)


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Part:
    """A priced part with its labor estimate (an accepted quote)."""
    id: str = ""
    name: str = ""
    price: float = 0.0
    labor_estimate: float = 0.0
    condition: PartCondition = PartCondition.NEW
    source: str = ""
    photo: Optional[bytes] = field(default=None, repr=False)

    @property
    def total(self) -> float:
        return self.price + self.labor_estimate

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "labor_estimate": self.labor_estimate,
            "condition": self.condition.value,
            "source": self.source,
            "photo": _encode_photo(self.photo),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Part":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            price=float(data.get("price", 0.0)),
            labor_estimate=float(data.get("labor_estimate", 0.0)),
            condition=PartCondition(data.get("condition", "new")),
            source=data.get("source", ""),
            photo=_decode_photo(data.get("photo")),
        )


@dataclass(frozen=True)
class InventoryPart(Part):
    stock_quantity: int = 0
    low_stock_threshold: int = 0

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.low_stock_threshold

    @property
    def stock_value(self) -> float:
        return self.stock_quantity * self.price

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["stock_quantity"] = self.stock_quantity
        data["low_stock_threshold"] = self.low_stock_threshold
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "InventoryPart":
        base = Part.from_dict(data)
        return cls(
            id=base.id,
            name=base.name,
            price=base.price,
            labor_estimate=base.labor_estimate,
            condition=base.condition,
            source=base.source,
            photo=base.photo,
            stock_quantity=int(data.get("stock_quantity", 0)),
            low_stock_threshold=int(data.get("low_stock_threshold", 0)),
        )


@dataclass(frozen=True)
class CommunicationLogEntry:
    """One client-visible message in a job's audit trail."""
    id: str
    timestamp: datetime
    type: LogEntryType
    message: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CommunicationLogEntry":
        return cls(
            id=data["id"],
            timestamp=_parse_timestamp(data["timestamp"]),
            type=LogEntryType(data["type"]),
            message=data.get("message", ""),
        )


@dataclass(frozen=True)
class QuoteCandidate:
    """A distributor quote suggested by the recognition service."""
    source: str
    price: float
    labor_estimate: float

    @property
    def total(self) -> float:
        return self.price + self.labor_estimate


@dataclass(frozen=True)
class VehicleRecord:
    """One vehicle visit, from intake to payment."""
    id: str
    license_plate: str
    client_name: str
    contact_info: str = ""
    make: str = ""
    model: str = ""
    complaint: str = ""
    status: JobStatus = JobStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    mechanic_name: Optional[str] = None
    damaged_part_photo: Optional[bytes] = field(default=None, repr=False)
    identified_part: Optional[Part] = None
    hours_spent: Optional[float] = None
    job_description: Optional[str] = None
    final_amount: Optional[float] = None
    communication_log: tuple[CommunicationLogEntry, ...] = ()
    # Incremented by the store on every successful write
    version: int = 0

    @property
    def is_active(self) -> bool:
        return not self.status.is_terminal

    @property
    def estimate_total(self) -> float:
        """Part price plus labor of the accepted quote (0 without one)."""
        if self.identified_part is None:
            return 0.0
        return self.identified_part.total

    @property
    def vehicle_label(self) -> str:
        return " ".join(p for p in (self.make, self.model) if p)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "license_plate": self.license_plate,
            "client_name": self.client_name,
            "contact_info": self.contact_info,
            "make": self.make,
            "model": self.model,
            "complaint": self.complaint,
            "status": self.status.value,
            "payment_status": self.payment_status.value,
            "created_at": self.created_at.isoformat(),
            "mechanic_name": self.mechanic_name,
            "damaged_part_photo": _encode_photo(self.damaged_part_photo),
            "identified_part": (
                self.identified_part.to_dict()
                if self.identified_part else None
            ),
            "hours_spent": self.hours_spent,
            "job_description": self.job_description,
            "final_amount": self.final_amount,
            "communication_log": [e.to_dict() for e in self.communication_log],
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VehicleRecord":
        part = data.get("identified_part")
        return cls(
            id=data["id"],
            license_plate=data.get("license_plate", ""),
            client_name=data.get("client_name", ""),
            contact_info=data.get("contact_info", ""),
            make=data.get("make", ""),
            model=data.get("model", ""),
            complaint=data.get("complaint", ""),
            status=JobStatus(data.get("status", "PENDING")),
            payment_status=PaymentStatus(data.get("payment_status", "PENDING")),
            created_at=_parse_timestamp(data["created_at"]),
            mechanic_name=data.get("mechanic_name"),
            damaged_part_photo=_decode_photo(data.get("damaged_part_photo")),
            identified_part=Part.from_dict(part) if part else None,
            hours_spent=data.get("hours_spent"),
            job_description=data.get("job_description"),
            final_amount=data.get("final_amount"),
            communication_log=tuple(
                CommunicationLogEntry.from_dict(e)
                for e in data.get("communication_log") or []
            ),
            version=int(data.get("version", 0)),
        )
