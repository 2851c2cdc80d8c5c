"""Validation rules for inventory import data."""

import math

from autofix.database.models import PartCondition

_CONDITIONS = {c.value for c in PartCondition}


def _check_amount(row: dict, key: str, row_num: int, errors: list[str]):
    value = row.get(key, "")
    if value in ("", None):
        return
    try:
        amount = float(value)
    except (ValueError, TypeError):
        errors.append(f"Row {row_num}: {key} must be a number")
        return
    if not math.isfinite(amount):
        errors.append(f"Row {row_num}: {key} must be finite")
    elif amount < 0:
        errors.append(f"Row {row_num}: {key} cannot be negative")


def _check_count(row: dict, key: str, row_num: int, errors: list[str]):
    value = row.get(key, "")
    if value in ("", None):
        return
    try:
        count = int(value)
    except (ValueError, TypeError):
        errors.append(f"Row {row_num}: {key} must be an integer")
        return
    if count < 0:
        errors.append(f"Row {row_num}: {key} cannot be negative")


def validate_inventory_row(row: dict, row_num: int) -> list[str]:
    """Validate one row of inventory import data. Returns error strings."""
    errors = []

    name = (row.get("name") or "").strip()
    if not name:
        errors.append(f"Row {row_num}: name is required")
    elif len(name) > 120:
        errors.append(f"Row {row_num}: name exceeds 120 chars")

    _check_amount(row, "price", row_num, errors)
    _check_amount(row, "labor_estimate", row_num, errors)
    _check_count(row, "stock_quantity", row_num, errors)
    _check_count(row, "low_stock_threshold", row_num, errors)

    condition = (row.get("condition") or "").strip().lower()
    if condition and condition not in _CONDITIONS:
        errors.append(
            f"Row {row_num}: condition must be one of "
            f"{', '.join(sorted(_CONDITIONS))}"
        )

    return errors
