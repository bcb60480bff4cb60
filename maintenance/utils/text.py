"""Text processing helpers shared by the maintenance commands."""

import re

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def normalize_email(email: str | None) -> str:
    """Normalize an email address for equality comparison and grouping.

    Only case is folded; addresses are otherwise compared verbatim.

    Args:
        email: Raw email address

    Returns:
        Lower-cased email, or empty string if input is empty/None
    """
    if not email:
        return ""
    return email.lower()


def parse_int(value) -> int | None:
    """Parse the leading integer of a value, the way spreadsheet exports expect.

    ``"42"``, ``42``, ``42.9`` and ``"42 books"`` all yield 42. Booleans and
    values without a leading integer yield None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))

