"""Error handling module for the cursorpage service."""

from .problem_details import (
    LIMIT_ERROR,
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    InternalServerError,
    ServiceUnavailableError,
    InvalidLimitError,
    MalformedCursorTokenError,
    MalformedPositionError,
    ParameterParseError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "LIMIT_ERROR",
    "ProblemDetail",
    "ProblemDetailException",
    "BadRequestError",
    "InternalServerError",
    "ServiceUnavailableError",
    "InvalidLimitError",
    "MalformedCursorTokenError",
    "MalformedPositionError",
    "ParameterParseError",
    "create_problem_response",
    "register_exception_handlers"
]
