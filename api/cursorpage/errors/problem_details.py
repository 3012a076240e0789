"""Problem Details (RFC 9457) implementation for the cursorpage service."""

from typing import Optional, Any
from pydantic import BaseModel, Field
from fastapi import Request
from fastapi.responses import JSONResponse


PROBLEM_TYPE_BASE = "https://cursorpage.dev/problems/"

LIMIT_ERROR = "limit must be positive and non-zero"


class ProblemDetail(BaseModel):
    """Problem Details as defined in RFC 9457."""

    type: str = Field(default="about:blank", description="A URI reference that identifies the problem type")
    title: str = Field(description="A short, human-readable summary of the problem type")
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(default=None, description="A human-readable explanation specific to this occurrence")
    instance: Optional[str] = Field(default=None, description="A URI reference that identifies the specific occurrence")

    # Extension members are serialized next to the standard ones
    model_config = {"extra": "allow"}


class ProblemDetailException(Exception):
    """Base exception for Problem Details responses.

    Subclasses fix ``status``, ``title`` and ``type_uri`` as class
    attributes, and optionally an ``error_code`` extension. Any of them can
    still be overridden per instance.
    """

    status: int = 500
    title: str = "Internal Server Error"
    type_uri: str = "about:blank"
    error_code: Optional[str] = None

    def __init__(
        self,
        detail: Optional[str] = None,
        *,
        status: Optional[int] = None,
        title: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        **extensions: Any
    ):
        if status is not None:
            self.status = status
        if title is not None:
            self.title = title
        if type_uri is not None:
            self.type_uri = type_uri
        if self.error_code is not None:
            extensions.setdefault("error_code", self.error_code)
        self.detail = detail
        self.instance = instance
        self.extensions = extensions
        super().__init__(detail or self.title)

    def to_problem_detail(self, request: Optional[Request] = None) -> ProblemDetail:
        """Convert to ProblemDetail model, using the request path as instance."""
        instance = self.instance
        if instance is None and request:
            instance = str(request.url.path)

        return ProblemDetail(
            type=self.type_uri,
            title=self.title,
            status=self.status,
            detail=self.detail,
            instance=instance,
            **self.extensions
        )

    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        """Convert to JSONResponse with Problem Details format."""
        return problem_response(self.to_problem_detail(request))


class BadRequestError(ProblemDetailException):
    """400 Bad Request error."""

    status = 400
    title = "Bad Request"


class InternalServerError(ProblemDetailException):
    """500 Internal Server Error."""

    def __init__(self, detail: str = "Internal server error", **extensions: Any):
        super().__init__(detail, **extensions)


class ServiceUnavailableError(ProblemDetailException):
    """503 Service Unavailable error."""

    status = 503
    title = "Service Unavailable"

    def __init__(self, detail: str = "Service temporarily unavailable", **extensions: Any):
        super().__init__(detail, **extensions)


# Pagination errors. Every one of them is a client error raised before the
# data source is queried.

class InvalidLimitError(BadRequestError):
    """The ``limit`` parameter is non-numeric or not greater than zero."""

    type_uri = PROBLEM_TYPE_BASE + "invalid-limit"
    error_code = "INVALID_LIMIT"

    def __init__(self, value: Any, **extensions: Any):
        self.value = value
        super().__init__(f"Invalid limit {value!r}: {LIMIT_ERROR}", **extensions)


class MalformedCursorTokenError(BadRequestError):
    """The opaque ``next`` token could not be decoded."""

    type_uri = PROBLEM_TYPE_BASE + "malformed-cursor"
    error_code = "MALFORMED_CURSOR"


class MalformedPositionError(BadRequestError):
    """The ``position`` query parameter does not have a supported shape."""

    type_uri = PROBLEM_TYPE_BASE + "malformed-position"
    error_code = "MALFORMED_POSITION"


class ParameterParseError(BadRequestError):
    """A caller-defined query parameter is missing or invalid."""

    type_uri = PROBLEM_TYPE_BASE + "invalid-parameter"
    error_code = "INVALID_PARAMETER"

    def __init__(self, detail: str, parameter: Optional[str] = None, **extensions: Any):
        if parameter:
            extensions["parameter"] = parameter
        super().__init__(detail, **extensions)


def problem_response(problem: ProblemDetail) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(exclude_none=True),
        media_type="application/problem+json"
    )


def create_problem_response(
    status: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: str = "about:blank",
    instance: Optional[str] = None,
    request: Optional[Request] = None,
    **extensions: Any
) -> JSONResponse:
    """Create a Problem Details response for errors raised outside the service."""
    if instance is None and request:
        instance = str(request.url.path)

    return problem_response(ProblemDetail(
        type=type_uri,
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        **extensions
    ))
