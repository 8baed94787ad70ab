"""Output formatting helpers for the CLI."""

from decimal import Decimal


def format_amount(amount: Decimal) -> str:
    """Format an amount the German way, e.g. -1.234,56."""
    text = f"{amount:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")
