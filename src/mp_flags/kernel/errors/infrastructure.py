"""Infrastructure errors – storage failures and other unexpected conditions."""

from __future__ import annotations

from typing import Any

from mp_flags.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class InternalError(InfrastructureError):
    """Any unexpected failure the caller cannot correct."""

    default_code = "internal_error"
    kind = "InternalError"


class StoreUnavailableError(InternalError):
    """The flag store could not complete the operation."""

    default_code = "store_unavailable"

    def __init__(
        self,
        operation: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Flag store failed during '{operation}'", **kwargs)
        self.operation = operation


__all__ = ["InfrastructureError", "InternalError", "StoreUnavailableError"]
