"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a positive amount string into a Decimal.

    Ledger amounts carry no sign; direction comes from the entry kind.
    Handles various formats:
    - "123.45"
    - "$123.45", "123.45 Ar"
    - "1,234.56"
    - "500 000" (space as thousands separator)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed or is not positive
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove currency symbols and codes
    cleaned = re.sub(r"[$€£¥]|\bAr\b|\bMGA\b", "", amount_str.strip(), flags=re.IGNORECASE)

    # Remove thousands separators
    cleaned = cleaned.replace(",", "").replace(" ", "").replace("\u00a0", "")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}': not a finite number")
    if amount <= 0:
        raise ValueError(f"Amount must be positive, got {amount}")
    return amount
