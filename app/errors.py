"""
Typed errors raised by the service layer and their HTTP rendering.

Services raise one of the ``AppError`` subclasses below; routers never
build error responses themselves.  ``register_exception_handlers`` maps
each class to its status code and a stable JSON body:

- ``ValidationError`` → 400 ``{"errors": [{"field": ..., "msg": ...}]}``
- every other ``AppError`` → its status ``{"error": message}``
- anything unexpected → 500 ``{"error": "Internal server error"}``
"""
import logging
from dataclasses import dataclass

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldError:
    field: str
    msg: str

    def to_dict(self) -> dict:
        return {"field": self.field, "msg": self.msg}


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input"

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        fields = ", ".join(e.field for e in self.errors)
        super().__init__(f"Invalid input: {fields}")

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]

    def to_dict(self) -> dict:
        return {"errors": [e.to_dict() for e in self.errors]}


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Forbidden(AppError):
    status_code = 403
    default_message = "Not authorized"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Authentication required"


class InternalError(AppError):
    status_code = 500


def _request_errors_to_fields(exc: RequestValidationError) -> list[FieldError]:
    fields = []
    for err in exc.errors():
        # loc is e.g. ("body", "name") or ("path", "post_id")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        fields.append(FieldError(".".join(loc) or "request", err.get("msg", "Invalid value")))
    return fields


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = ValidationError(_request_errors_to_fields(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def _unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=InternalError().to_dict())
