from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_fields(payload: dict, *field_names: str) -> dict[str, str]:
    """Pick required string fields from a request payload."""
    return {name: require_non_empty(payload.get(name), name) for name in field_names}
