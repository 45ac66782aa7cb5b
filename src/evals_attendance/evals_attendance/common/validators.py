from __future__ import annotations

from typing import Any, Mapping

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid '{field_name}'")
    return value.strip()


def require_field(body: Mapping[str, Any], field_name: str) -> Any:
    if field_name not in body or body[field_name] is None:
        raise ValidationError(f"Missing attribute '{field_name}'")
    return body[field_name]


def require_list(body: Mapping[str, Any], field_name: str) -> list:
    value = require_field(body, field_name)
    if not isinstance(value, list):
        raise ValidationError(f"Attribute '{field_name}' must be a list")
    return value


def parse_event_id(value: str) -> int:
    # ASCII digits only.
    if not isinstance(value, str) or not (value.isascii() and value.isdigit()):
        raise ValidationError("Invalid id")
    return int(value)
