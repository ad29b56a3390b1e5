"""FastAPI adapter – application factory.

Run with any ASGI server, e.g. ``uvicorn --factory mp_flags.adapters.fastapi.app:create_app``.
"""
from __future__ import annotations

import contextlib
from typing import AsyncIterator

from fastapi import FastAPI

from mp_flags import __version__
from mp_flags.adapters.fastapi.exception_mapper import FlagExceptionMapper
from mp_flags.adapters.fastapi.router import router
from mp_flags.adapters.sqlalchemy import SqlAlchemyFlagStore, SqlAlchemySessionFactory
from mp_flags.application.feature_flags import FlagManagementService, FlagStore
from mp_flags.config import FlagServiceSettings, load_settings
from mp_flags.kernel.time import Clock
from mp_flags.observability.logging import configure_logging, get_logger

_log = get_logger(__name__)


def create_app(
    settings: FlagServiceSettings | None = None,
    *,
    store: FlagStore | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Wire settings, store and service into a FastAPI app.

    With an injected *store* the service is ready immediately. Otherwise a
    :class:`SqlAlchemyFlagStore` for ``settings.database_url`` is built when
    the app starts and its engine disposed when it stops.
    """
    settings = settings or load_settings()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level, json_logs=settings.json_logs)
        if store is not None:
            yield
            return
        sessions = SqlAlchemySessionFactory(settings.database_url, echo=settings.echo_sql)
        await sessions.create_all()
        app.state.flag_service = FlagManagementService(SqlAlchemyFlagStore(sessions), clock)
        _log.info("flag_store_ready", backend="sqlalchemy", dialect=sessions.engine.dialect.name)
        try:
            yield
        finally:
            await sessions.dispose()

    app = FastAPI(title="Feature Flags API", version=__version__, lifespan=lifespan)
    if store is not None:
        app.state.flag_service = FlagManagementService(store, clock)
    FlagExceptionMapper().register(app)
    app.include_router(router)
    return app


__all__ = ["create_app"]
