"""Observability – structlog configuration and logger helper."""
from mp_flags.observability.logging.factory import JsonLoggerFactory, configure_logging
from mp_flags.observability.logging.processors import get_logger

__all__ = ["JsonLoggerFactory", "configure_logging", "get_logger"]
