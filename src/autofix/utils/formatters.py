"""Formatting utilities for display values."""


def format_currency(value: float) -> str:
    """Format a float as USD currency."""
    return f"${value:,.2f}"


def format_stock(quantity: int, threshold: int) -> str:
    """Format a stock level, flagging parts at or below their threshold."""
    if quantity <= threshold:
        return f"{quantity} units (LOW)"
    return f"{quantity} units"


def format_hours(hours: float | None) -> str:
    if hours is None:
        return "—"
    return f"{hours:g} h"
