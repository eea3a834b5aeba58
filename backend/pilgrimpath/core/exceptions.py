"""
Error responses for the API.

Validation problems are reported as HTTP 400 with a list of
``{"field", "message"}`` entries, whether pydantic caught them while parsing
the request or a service caught them against the database. Unexpected errors
become a generic HTTP 500; the cause is only written to the server log.
"""

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


class FieldValidationError(Exception):
    """Raised by services when input is well-formed but refers to bad data."""

    def __init__(self, field: str, message: str):
        self.errors = [{"field": field, "message": message}]
        super().__init__(f"{field}: {message}")


def _field_name(loc) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] in REQUEST_LOCATIONS:
        parts = parts[1:]
    return ".".join(parts)


def format_validation_errors(errors) -> List[Dict[str, Any]]:
    return [
        {"field": _field_name(error.get("loc", ())), "message": error.get("msg", "Invalid value")}
        for error in errors
    ]


def validation_error_response(errors: List[Dict[str, Any]]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation failed", "errors": errors},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return validation_error_response(format_validation_errors(exc.errors()))


async def field_validation_handler(request: Request, exc: FieldValidationError):
    return validation_error_response(exc.errors)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(FieldValidationError, field_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
