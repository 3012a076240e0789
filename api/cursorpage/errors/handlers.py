"""Exception handlers turning every failure into an RFC 9457 response."""

import logging
from typing import Any, Dict, List, Union
from fastapi import Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import ValidationError

from .problem_details import (
    ProblemDetailException,
    create_problem_response
)

logger = logging.getLogger(__name__)


# Statuses the service can answer with outside of ProblemDetailException
STATUS_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable"
}


def request_context(request: Request, **fields: Any) -> Dict[str, Any]:
    """Logging ``extra`` describing the failed request."""
    return {"path": str(request.url.path), "method": request.method, **fields}


def format_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Join validation errors into a single readable message."""
    return "; ".join(
        f"{' -> '.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in errors
    )


def validation_problem(
    request: Request,
    status: int,
    summary: str,
    errors: List[Dict[str, Any]]
) -> JSONResponse:
    logger.info(
        f"{summary}: {len(errors)} errors",
        extra=request_context(request, errors=errors)
    )
    return create_problem_response(
        status=status,
        title="Validation Error",
        detail=f"{summary}: {format_validation_errors(errors)}",
        request=request,
        validation_errors=errors
    )


async def problem_detail_exception_handler(
    request: Request,
    exc: ProblemDetailException
) -> JSONResponse:
    """Handle ProblemDetailException instances."""
    logger.info(
        f"Problem detail exception: {exc.status} - {exc.title}",
        extra=request_context(request, status_code=exc.status, detail=exc.detail)
    )
    return exc.to_response(request)


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """Handle FastAPI and Starlette HTTPException, keeping their headers."""
    logger.info(
        f"HTTP exception: {exc.status_code} - {exc.detail}",
        extra=request_context(request, status_code=exc.status_code, detail=exc.detail)
    )

    response = create_problem_response(
        status=exc.status_code,
        title=STATUS_TITLES.get(exc.status_code, "HTTP Error"),
        detail=str(exc.detail) if exc.detail else None,
        request=request
    )
    response.headers.update(getattr(exc, "headers", None) or {})
    return response


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Request validation errors raised by FastAPI are a 422."""
    return validation_problem(request, 422, "Validation failed", jsonable_encoder(exc.errors()))


async def pydantic_validation_exception_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """Model validation errors escaping a route are a 400."""
    errors = jsonable_encoder(exc.errors(include_url=False, include_context=False))
    return validation_problem(request, 400, "Data validation failed", errors)


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {exc}",
        extra=request_context(request, exception_type=type(exc).__name__),
        exc_info=True
    )

    # Internal error details stay in the log
    return create_problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred",
        request=request
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ProblemDetailException, problem_detail_exception_handler)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)

    app.add_exception_handler(Exception, general_exception_handler)
