"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

CENT = Decimal("0.01")
# Largest value a Numeric(14, 2) money column holds exactly.
MAX_AMOUNT = Decimal("999999999999.99")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "1,234.56"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Remove currency symbols
    amount_str = re.sub(r"[$€£¥฿]", "", amount_str)

    # Remove commas
    amount_str = amount_str.replace(",", "")

    # Remove whitespace again
    amount_str = amount_str.strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount


def to_money(value: Decimal | int | str) -> Decimal:
    """Coerce a positive transaction amount to two decimal places.

    Raises:
        ValueError: If the value is not a number, not positive, above
            MAX_AMOUNT, or has more than two decimal places
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError("Amounts must be given as Decimal, int or str")
    if isinstance(value, str):
        amount = parse_amount(value)
    else:
        amount = Decimal(value)
        if not amount.is_finite():
            raise ValueError(f"Could not parse amount '{value}'")

    if amount <= 0:
        raise ValueError("Please enter a valid amount greater than 0")
    if amount > MAX_AMOUNT:
        raise ValueError(f"Amount cannot exceed ${MAX_AMOUNT:,.2f}")
    quantized = amount.quantize(CENT)
    if quantized != amount:
        raise ValueError("Amount cannot have more than 2 decimal places")
    return quantized
