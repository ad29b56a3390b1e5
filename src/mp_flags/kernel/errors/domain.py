"""Domain errors – validation, missing resources and uniqueness conflicts."""

from __future__ import annotations

from typing import Any

from mp_flags.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a business rule is violated."""

    default_code = "domain_error"


class ValidationError(DomainError):
    """Input data does not meet validation rules.

    ``errors`` maps a field name to the messages reported for it.
    """

    default_code = "validation_error"
    kind = "ValidationError"

    def __init__(
        self,
        message: str,
        *,
        errors: dict[str, list[str]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors: dict[str, list[str]] = errors or {}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors={field: [message]})

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["errors"] = self.errors
        return base


class NotFoundError(DomainError):
    """The requested resource does not exist."""

    default_code = "not_found"
    kind = "NotFound"


class FlagNotFoundError(NotFoundError):
    """No feature flag is stored under ``key``."""

    default_code = "flag_not_found"

    def __init__(self, key: str, **kwargs: Any) -> None:
        super().__init__(f"Feature flag with key '{key}' was not found.", detail={"key": key}, **kwargs)
        self.key = key


class OverrideNotFoundError(NotFoundError):
    """The flag exists but carries no override for ``override_id``."""

    default_code = "override_not_found"
    kind = "OverrideNotFound"

    def __init__(self, key: str, override_id: str, override_kind: str, **kwargs: Any) -> None:
        super().__init__(
            f"No {override_kind} override for '{override_id}' exists on feature flag '{key}'.",
            detail={"key": key, "override_id": override_id, "override_kind": override_kind},
            **kwargs,
        )
        self.key = key
        self.override_id = override_id
        self.override_kind = override_kind


class ConflictError(DomainError):
    """The operation conflicts with existing state."""

    default_code = "conflict"
    kind = "Conflict"


class DuplicateFlagError(ConflictError):
    default_code = "duplicate_flag"

    def __init__(self, key: str, **kwargs: Any) -> None:
        super().__init__(f"A feature flag with key '{key}' already exists.", detail={"key": key}, **kwargs)
        self.key = key


class DuplicateOverrideError(ConflictError):
    default_code = "duplicate_override"

    def __init__(self, key: str, override_id: str, override_kind: str, **kwargs: Any) -> None:
        super().__init__(
            f"A {override_kind} override for '{override_id}' already exists on feature flag '{key}'.",
            detail={"key": key, "override_id": override_id, "override_kind": override_kind},
            **kwargs,
        )
        self.key = key
        self.override_id = override_id
        self.override_kind = override_kind


__all__ = [
    "ConflictError",
    "DomainError",
    "DuplicateFlagError",
    "DuplicateOverrideError",
    "FlagNotFoundError",
    "NotFoundError",
    "OverrideNotFoundError",
    "ValidationError",
]
