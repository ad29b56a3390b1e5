"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError              (domain.py)
    │   ├── ValidationError
    │   ├── NotFoundError
    │   │   ├── FlagNotFoundError
    │   │   └── OverrideNotFoundError
    │   └── ConflictError
    │       ├── DuplicateFlagError
    │       └── DuplicateOverrideError
    └── InfrastructureError      (infrastructure.py)
        └── InternalError
            └── StoreUnavailableError
"""

from mp_flags.kernel.errors.base import BaseError
from mp_flags.kernel.errors.domain import (
    ConflictError,
    DomainError,
    DuplicateFlagError,
    DuplicateOverrideError,
    FlagNotFoundError,
    NotFoundError,
    OverrideNotFoundError,
    ValidationError,
)
from mp_flags.kernel.errors.infrastructure import (
    InfrastructureError,
    InternalError,
    StoreUnavailableError,
)

__all__ = [
    "BaseError",
    "ConflictError",
    "DomainError",
    "DuplicateFlagError",
    "DuplicateOverrideError",
    "FlagNotFoundError",
    "InfrastructureError",
    "InternalError",
    "NotFoundError",
    "OverrideNotFoundError",
    "StoreUnavailableError",
    "ValidationError",
]
