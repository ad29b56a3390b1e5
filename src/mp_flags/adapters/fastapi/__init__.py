"""FastAPI adapter – routes, exception mapper and app factory."""
from mp_flags.adapters.fastapi.app import create_app
from mp_flags.adapters.fastapi.exception_mapper import FlagExceptionMapper
from mp_flags.adapters.fastapi.router import get_flag_service, router

__all__ = ["FlagExceptionMapper", "create_app", "get_flag_service", "router"]
