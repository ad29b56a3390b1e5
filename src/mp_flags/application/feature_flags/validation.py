"""Application feature flags – input rules and normalisation.

Every rule runs before the store is touched. Length limits apply to the value
as received; the trimmed value is what gets stored and looked up.
"""
from __future__ import annotations

from mp_flags.kernel.errors import ValidationError

MAX_ID_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


def _require_identifier(value: str | None, field: str, label: str) -> str:
    if value is None or not value.strip():
        raise ValidationError.for_field(field, f"{label} cannot be empty.")
    if len(value) > MAX_ID_LENGTH:
        raise ValidationError.for_field(field, f"{label} cannot exceed {MAX_ID_LENGTH} characters.")
    return value.strip()


def normalize_key(key: str | None) -> str:
    return _require_identifier(key, "key", "Feature flag key")


def normalize_user_id(user_id: str | None) -> str:
    return _require_identifier(user_id, "userId", "User ID")


def normalize_group_id(group_id: str | None) -> str:
    return _require_identifier(group_id, "groupId", "Group ID")


def normalize_description(description: str) -> str:
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError.for_field(
            "description",
            f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters.",
        )
    return description.strip()


__all__ = [
    "MAX_DESCRIPTION_LENGTH",
    "MAX_ID_LENGTH",
    "normalize_description",
    "normalize_group_id",
    "normalize_key",
    "normalize_user_id",
]
