"""Shared parsing helpers for configuration and runtime value normalization."""

from __future__ import annotations


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_integer(value: object, field_name: str, *, minimum: int) -> int:
    """Parse an integer value that must be at least `minimum`.

    Booleans are rejected even though they are `int` subclasses.

    Raises:
        ValueError: If the value is not an integer token or is below `minimum`.
    """

    requirement = "a positive integer" if minimum == 1 else f"an integer >= {minimum}"
    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be {requirement}.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"`{field_name}` must be {requirement}.")
        try:
            parsed = int(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be {requirement}.") from exc

    if parsed < minimum:
        raise ValueError(f"`{field_name}` must be {requirement}.")
    return parsed


def parse_positive_float(value: object, field_name: str) -> float:
    """Parse a strictly positive floating-point value."""

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive number.")
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"`{field_name}` must be a positive number.") from exc
    if parsed <= 0.0:
        raise ValueError(f"`{field_name}` must be a positive number.")
    return parsed
