"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "250"
    - "250.00"
    - "₱1,250.50"
    - "PHP 1,250.50"
    - "(50.00)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount (sign preserved; validation is left to the caller)

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency markers
    amount_str = re.sub(r"(?i)^php\s*", "", amount_str.strip())
    amount_str = re.sub(r"[₱$]", "", amount_str)

    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'") from None
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def quantize_amount(amount: Decimal) -> Decimal:
    """Round an amount to whole centavos."""
    return amount.quantize(CENT)


def format_amount(amount: Decimal) -> str:
    """Format an amount for display, e.g. ``₱1,250.00``."""
    return f"₱{amount:,.2f}"
