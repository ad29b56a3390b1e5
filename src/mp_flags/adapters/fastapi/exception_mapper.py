"""FastAPI adapter – FlagExceptionMapper."""
from __future__ import annotations

from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mp_flags.kernel.errors import (
    BaseError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from mp_flags.observability.logging import get_logger

_log = get_logger(__name__)

_INTERNAL_MESSAGE = "An unexpected error occurred."


def _field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body") or "body"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return errors


class FlagExceptionMapper:
    """Register error → HTTP status-code mappings on a FastAPI app.

    Error body schema::

        {"type": "NotFound", "code": "flag_not_found", "message": "...", "errors": null}

    Mappings
    --------
    ``ValidationError``         → 400
    ``RequestValidationError``  → 400
    ``NotFoundError``           → 404 (flag and override)
    ``ConflictError``           → 409
    ``InternalError``           → 500
    anything else               → 500
    """

    def __init__(self) -> None:
        self._map: list[tuple[type[BaseError], int]] = [
            (ValidationError, 400),
            (NotFoundError, 404),
            (ConflictError, 409),
            (InternalError, 500),
        ]

    @staticmethod
    def body_for(exc: BaseError, status_code: int) -> dict[str, Any]:
        if status_code >= 500:
            return {"type": "InternalError", "code": exc.code, "message": _INTERNAL_MESSAGE, "errors": None}
        return {
            "type": exc.kind,
            "code": exc.code,
            "message": exc.message,
            "errors": exc.errors if isinstance(exc, ValidationError) else None,
        }

    def register(self, app: FastAPI) -> None:
        """Register all error handlers on *app*."""
        for exc_type, status_code in self._map:

            def make_handler(code: int) -> Callable[[Request, Exception], Any]:
                async def handler(request: Request, exc: Any) -> JSONResponse:
                    if code >= 500:
                        _log.error("request_failed", path=request.url.path, status=code, error=repr(exc), exc_info=exc)
                    else:
                        _log.warning("request_rejected", path=request.url.path, status=code, message=exc.message)
                    return JSONResponse(status_code=code, content=self.body_for(exc, code))

                return handler

            app.add_exception_handler(exc_type, make_handler(status_code))

        app.add_exception_handler(RequestValidationError, self._request_validation_handler)
        app.add_exception_handler(Exception, self._unexpected_handler)

    @staticmethod
    async def _request_validation_handler(request: Request, exc: Any) -> JSONResponse:
        errors = _field_errors(exc)
        _log.warning("request_rejected", path=request.url.path, status=400, errors=errors)
        return JSONResponse(
            status_code=400,
            content={
                "type": ValidationError.kind,
                "code": ValidationError.default_code,
                "message": "One or more validation errors occurred.",
                "errors": errors,
            },
        )

    @staticmethod
    async def _unexpected_handler(request: Request, exc: Exception) -> JSONResponse:
        _log.error("unhandled_exception", path=request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"type": "InternalError", "code": "internal_error", "message": _INTERNAL_MESSAGE, "errors": None},
        )


__all__ = ["FlagExceptionMapper"]
