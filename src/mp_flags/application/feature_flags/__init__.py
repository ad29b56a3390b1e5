"""Application feature flags – entities, evaluation engine, store port and service."""
from mp_flags.application.feature_flags.evaluation import evaluate
from mp_flags.application.feature_flags.flag import (
    EvaluationContext,
    Flag,
    GroupOverride,
    UserOverride,
)
from mp_flags.application.feature_flags.in_memory import InMemoryFlagStore
from mp_flags.application.feature_flags.service import FlagManagementService
from mp_flags.application.feature_flags.store import FlagStore

__all__ = [
    "EvaluationContext",
    "Flag",
    "FlagManagementService",
    "FlagStore",
    "GroupOverride",
    "InMemoryFlagStore",
    "UserOverride",
    "evaluate",
]
