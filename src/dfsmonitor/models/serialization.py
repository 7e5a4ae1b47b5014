"""
JSON conversion helpers shared by every persisted document.

Persisted documents use camelCase keys, omit ``None`` values and store
timestamps as ISO-8601 UTC strings, so the reporting layer can read them
without knowing anything about the Python field names.
"""

import dataclasses
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


def camel_case(name: str) -> str:
    """Convert a snake_case field name to camelCase."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing ``Z`` and naive values (treated as UTC). Returns None
    for missing values.

    Raises:
        ValueError: If the value is present but not a valid timestamp
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_json_value(value: Any) -> Any:
    """
    Recursively convert dataclasses, enums and datetimes into JSON values.

    Dataclass fields are renamed to camelCase and ``None`` fields are dropped.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        result: Dict[str, Any] = {}
        for field in dataclasses.fields(value):
            field_value = getattr(value, field.name)
            if field_value is None:
                continue
            key = field.metadata.get("json_name", camel_case(field.name))
            result[key] = to_json_value(field_value)
        return result
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, dict):
        return {str(k): to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    return value


def section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Return a nested object from ``data``, or an empty dict if missing."""
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def items(data: Dict[str, Any], key: str) -> list:
    """Return a nested list from ``data``, or an empty list if missing."""
    value = data.get(key)
    return value if isinstance(value, list) else []
