"""SQLAlchemy adapter – flag tables, session factory, unit of work and store."""
from mp_flags.adapters.sqlalchemy.models import Base, FlagRecord, GroupOverrideRecord, UserOverrideRecord
from mp_flags.adapters.sqlalchemy.session import SqlAlchemySessionFactory
from mp_flags.adapters.sqlalchemy.store import SqlAlchemyFlagStore
from mp_flags.adapters.sqlalchemy.uow import SqlAlchemyUnitOfWork

__all__ = [
    "Base",
    "FlagRecord",
    "GroupOverrideRecord",
    "SqlAlchemyFlagStore",
    "SqlAlchemySessionFactory",
    "SqlAlchemyUnitOfWork",
    "UserOverrideRecord",
]
