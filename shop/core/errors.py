"""Error taxonomy and the JSON error schema exposed to clients.

Every failure leaves the service as ``{"error": <message>}`` or, for input
validation, ``{"errors": [{"field": ..., "message": ...}, ...]}``. Store
failures and unexpected exceptions are logged here with full detail and reduced
to a generic message.
"""
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ShopError(Exception):
    status_code = 500
    default_message = 'Server error'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        return {'error': self.message}


class ValidationError(ShopError):
    status_code = 400
    default_message = 'Validation failed'

    def __init__(self, errors: list[dict[str, str]] | None = None, message: str | None = None):
        super().__init__(message)
        self.errors = errors or [{'field': '', 'message': self.message}]

    @classmethod
    def for_field(cls, field: str, message: str) -> 'ValidationError':
        return cls([{'field': field, 'message': message}], message)

    def to_body(self) -> dict[str, Any]:
        return {'errors': self.errors}


class AuthenticationError(ShopError):
    status_code = 401
    default_message = 'Invalid credentials'


class AuthorizationError(ShopError):
    status_code = 403
    default_message = 'Forbidden'


class NotFoundError(ShopError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(ShopError):
    status_code = 409
    default_message = 'Conflict'


class PersistenceError(ShopError):
    status_code = 500
    default_message = 'Database error'


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc if p not in ('body', 'query', 'path', 'header')]
    return '.'.join(parts)


def _clean_message(msg: str) -> str:
    # pydantic prefixes messages raised from validators
    return msg.removeprefix('Value error, ')


def validation_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    return [{'field': _field_name(e.get('loc', ())), 'message': _clean_message(e.get('msg', ''))} for e in exc.errors()]


async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={'errors': validation_errors(exc)})


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={'error': str(exc.detail)}, headers=getattr(exc, 'headers', None))


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error('Unhandled store error on %s %s', request.method, request.url.path, exc_info=exc)
    err = PersistenceError()
    return JSONResponse(status_code=err.status_code, content=err.to_body())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    err = ShopError()
    return JSONResponse(status_code=err.status_code, content=err.to_body())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopError, shop_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
