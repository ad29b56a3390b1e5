"""Application feature flags – evaluation engine.

Precedence: user override, then group override, then the global default.
"""
from __future__ import annotations

from mp_flags.application.feature_flags.flag import EvaluationContext, Flag


def evaluate(flag: Flag, context: EvaluationContext | None = None) -> bool:
    """Resolve the effective value of *flag* for *context*.

    Pure and deterministic for a given snapshot. A user override is matched by
    exact, case-sensitive ``user_id``. Group overrides are scanned in stored
    order and the first one whose ``group_id`` appears anywhere in
    ``context.group_ids`` wins; the order of the requested groups does not
    matter.
    """
    if context is None:
        return flag.is_enabled

    if context.has_user:
        for override in flag.user_overrides:
            if override.user_id == context.user_id:
                return override.is_enabled

    if context.group_ids:
        requested = frozenset(context.group_ids)
        for override in flag.group_overrides:
            if override.group_id in requested:
                return override.is_enabled

    return flag.is_enabled


__all__ = ["evaluate"]
