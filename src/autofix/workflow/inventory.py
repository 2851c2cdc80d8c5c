"""Inventory stock ledger with low-stock detection.

The ledger is independent of jobs: accepting a quote never decrements
stock. Every operation returns a new ledger; persisting it is the store's
job (see :meth:`ShopStore.save_inventory`).
"""

from dataclasses import replace
from typing import Iterable, Iterator, Optional

from autofix.config import Config
from autofix.database.models import InventoryPart, PartCondition, new_id
from autofix.utils.constants import DEFAULT_PART_SOURCE
from autofix.workflow.errors import InvalidAmount, PartNotFound
from autofix.workflow.quotes import validate_amount


def is_low_stock(part: InventoryPart) -> bool:
    """True when stock has fallen to or below the alert threshold."""
    return part.is_low_stock


def _count(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{label} must be a whole number, got {value!r}")
    if value < 0:
        raise InvalidAmount(f"{label} cannot be negative")
    return value


class InventoryLedger:
    """An ordered, immutable collection of inventory parts."""

    def __init__(self, parts: Iterable[InventoryPart] = ()):
        self._parts: tuple[InventoryPart, ...] = tuple(parts)

    def __iter__(self) -> Iterator[InventoryPart]:
        return iter(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __eq__(self, other) -> bool:
        if not isinstance(other, InventoryLedger):
            return NotImplemented
        return self._parts == other._parts

    def __repr__(self) -> str:
        return f"InventoryLedger({len(self._parts)} parts)"

    @property
    def parts(self) -> tuple[InventoryPart, ...]:
        return self._parts

    def get_part(self, part_id: str) -> InventoryPart:
        for part in self._parts:
            if part.id == part_id:
                return part
        raise PartNotFound(f"Inventory part {part_id} not found")

    def add_part(self, name: str, price: float, labor_estimate: float = 0.0,
                 stock_quantity: int = 0,
                 low_stock_threshold: Optional[int] = None,
                 condition: PartCondition = PartCondition.NEW,
                 source: str = DEFAULT_PART_SOURCE) -> "InventoryLedger":
        """Append a new part with a freshly assigned id."""
        if not name or not name.strip():
            raise ValueError("Part name is required")
        if low_stock_threshold is None:
            low_stock_threshold = Config.DEFAULT_LOW_STOCK_THRESHOLD
        part = InventoryPart(
            id=new_id(),
            name=name.strip(),
            price=validate_amount(price, "Price"),
            labor_estimate=validate_amount(labor_estimate, "Labor estimate"),
            condition=PartCondition(condition),
            source=source.strip() or DEFAULT_PART_SOURCE,
            stock_quantity=_count(stock_quantity, "Stock quantity"),
            low_stock_threshold=_count(low_stock_threshold,
                                       "Low stock threshold"),
        )
        return InventoryLedger(self._parts + (part,))

    def _replace_part(self, part_id: str, **changes) -> "InventoryLedger":
        self.get_part(part_id)
        return InventoryLedger(
            replace(p, **changes) if p.id == part_id else p
            for p in self._parts
        )

    def update_threshold(self, part_id: str, value: int) -> "InventoryLedger":
        return self._replace_part(
            part_id, low_stock_threshold=_count(value, "Low stock threshold"),
        )

    def set_stock(self, part_id: str, quantity: int) -> "InventoryLedger":
        """Record a counted stock level (office stock-take)."""
        return self._replace_part(
            part_id, stock_quantity=_count(quantity, "Stock quantity"),
        )

    def remove_part(self, part_id: str) -> "InventoryLedger":
        self.get_part(part_id)
        return InventoryLedger(p for p in self._parts if p.id != part_id)

    def low_stock_parts(self) -> list[InventoryPart]:
        """The needs-reorder set, most depleted first."""
        low = [p for p in self._parts if is_low_stock(p)]
        return sorted(
            low, key=lambda p: p.low_stock_threshold - p.stock_quantity,
            reverse=True,
        )

    @property
    def has_low_stock(self) -> bool:
        return any(is_low_stock(p) for p in self._parts)

    @property
    def total_value(self) -> float:
        return sum(p.stock_value for p in self._parts)
