import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from schemas.common import ErrorResponse
from services.student_level import InvalidPerformanceLevel

logger = logging.getLogger(__name__)

INVALID_LEVEL_MESSAGE = "Le niveau doit être un entier entre 1 et 5."


def _error(status_code: int, message: str, code: str = None, headers: dict = None) -> JSONResponse:
    body = ErrorResponse(message=message, code=code).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def add_error_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc), code="VALIDATION_ERROR")

    @app.exception_handler(InvalidPerformanceLevel)
    async def invalid_level_handler(request: Request, exc: InvalidPerformanceLevel):
        return _error(400, INVALID_LEVEL_MESSAGE, code="INVALID_PERFORMANCE_LEVEL")

    @app.exception_handler(NoResultFound)
    async def not_found_handler(request: Request, exc: NoResultFound):
        logger.warning("Record not found on %s %s: %s", request.method, request.url.path, exc)
        return _error(404, "Record not found", code="NOT_FOUND")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error", code="INTERNAL_ERROR")
