"""Kernel types."""
from mp_flags.kernel.types.option import Nothing, Option, Some, from_nullable

__all__ = ["Nothing", "Option", "Some", "from_nullable"]
