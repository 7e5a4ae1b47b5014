"""
Scalar validators for settings and configuration documents.

Each validator returns the normalized value or raises `ValidationError`
naming the offending field, so that a bad document is reported with the
dotted path of the key that needs fixing.
"""

from typing import Any, Callable, List, Optional, TypeVar

from .exceptions import ValidationError

N = TypeVar("N", int, float)


def _reject(field_name: str, value: Any, requirement: str) -> ValidationError:
    return ValidationError(f"{field_name} {requirement}, got {value!r}", field_name=field_name, value=value)


def _number(
    value: Any,
    convert: Callable[[Any], N],
    kind: str,
    min_value: N,
    max_value: Optional[N],
    field_name: str,
) -> N:
    # bool is an int subclass; TOML/JSON true must not pass as 1.
    if isinstance(value, bool):
        raise _reject(field_name, value, f"must be {kind}")
    try:
        number = convert(value)
    except (ValueError, TypeError):
        raise _reject(field_name, value, f"must be {kind}")
    if number < min_value:
        raise _reject(field_name, value, f"must be >= {min_value}")
    if max_value is not None and number > max_value:
        raise _reject(field_name, value, f"must be <= {max_value}")
    return number


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate an integer within ``[min_value, max_value]``.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Dotted name of the field, used in the error message

    Raises:
        ValidationError: If validation fails
    """
    return _number(value, int, "an integer", min_value, max_value, field_name)


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """Validate a number of seconds (or any float) within ``[min_value, max_value]``."""
    return _number(value, float, "a number", min_value, max_value, field_name)


def validate_bool(value: Any, field_name: str = "value") -> bool:
    if not isinstance(value, bool):
        raise _reject(field_name, value, "must be true or false")
    return value


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """Strip a string and require visible content."""
    if not isinstance(value, str) or not value.strip():
        raise _reject(field_name, value, "must be a non-empty string")
    return value.strip()


def validate_enum_choice(
    value: Any,
    choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of ``choices``.

    Returns:
        The canonical spelling from ``choices``

    Raises:
        ValidationError: If value is not one of the choices
    """
    text = str(value)
    for choice in choices:
        if choice == text or (not case_sensitive and choice.lower() == text.lower()):
            return choice
    raise _reject(field_name, value, f"must be one of {choices}")
