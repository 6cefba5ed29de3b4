"""Point amount parsing utilities."""

import re

from pointledger.domain.errors import InvalidAmountError, invalid_points


def require_points(value: object) -> int:
    """Validate that a value is a positive integer point amount.

    Args:
        value: Candidate amount

    Returns:
        The amount as int

    Raises:
        InvalidAmountError: If the value is not an int greater than zero
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidAmountError(invalid_points(value))
    return value


def parse_points(amount_str: str) -> int:
    """Parse a points string into a positive integer.

    Handles various formats:
    - "120"
    - "1,200"
    - "120 pts" / "120 points"
    - "+120"

    Args:
        amount_str: Amount string

    Returns:
        Points as int

    Raises:
        InvalidAmountError: If the string is empty, fractional or not positive
    """
    if not amount_str or not amount_str.strip():
        raise InvalidAmountError("Empty amount string")

    # Remove whitespace
    cleaned = amount_str.strip().lower()

    # Remove unit suffixes
    cleaned = re.sub(r"\s*(points|point|pts|pt)$", "", cleaned)

    # Remove thousands separators and a leading plus
    cleaned = cleaned.replace(",", "").replace("_", "")
    if cleaned.startswith("+"):
        cleaned = cleaned[1:]

    if not re.fullmatch(r"-?\d+", cleaned):
        raise InvalidAmountError(f"Could not parse points '{amount_str}'")

    return require_points(int(cleaned))
