"""Kernel – framework-agnostic building blocks shared by every layer."""

from mp_flags.kernel.errors import (
    BaseError,
    ConflictError,
    DomainError,
    InfrastructureError,
    InternalError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "BaseError",
    "ConflictError",
    "DomainError",
    "InfrastructureError",
    "InternalError",
    "NotFoundError",
    "ValidationError",
]
