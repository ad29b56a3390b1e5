"""
mp_flags – Feature-flag management service.

Import path convention::

    from mp_flags.application.feature_flags import FlagManagementService, EvaluationContext
    from mp_flags.adapters.sqlalchemy import SqlAlchemyFlagStore
    from mp_flags.adapters.fastapi import create_app
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
