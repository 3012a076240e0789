"""Cursor state, opaque token codec and pagination parameter parsing."""

import base64
import json
import logging
import re
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors.problem_details import (
    LIMIT_ERROR,
    InvalidLimitError,
    MalformedCursorTokenError,
    MalformedPositionError
)
from .position import PositionCodec, PositionDecodeError


logger = logging.getLogger(__name__)

ParamsT = TypeVar("ParamsT")
PositionT = TypeVar("PositionT")

REQUIRED_TOKEN_FIELDS = ("params", "lastPosition")

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def _is_valid_limit(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class Cursor(BaseModel, Generic[ParamsT, PositionT]):
    """Pagination state carried between requests.

    A cursor is rebuilt on every request, either from an opaque token or
    from query parameters, and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    params: ParamsT = Field(description="Caller-defined filter parameters")
    last_position: Optional[PositionT] = Field(
        alias="lastPosition",
        description="Position of the last item already returned, null on the first page"
    )
    limit: Optional[int] = Field(default=None, description="Page size, null for no limit")

    @field_validator("limit", mode="before")
    @classmethod
    def validate_limit_field(cls, v):
        """Reject non-positive and non-integer limits."""
        if v is not None and not _is_valid_limit(v):
            raise ValueError(LIMIT_ERROR)
        return v

    @classmethod
    def first(cls, params: Any, limit: Optional[int] = None) -> "Cursor":
        """Build a cursor pointing at the first page."""
        return cls(params=params, last_position=None, limit=limit)

    @property
    def is_first(self) -> bool:
        return self.last_position is None

    def after(self, position: PositionT) -> "Cursor":
        """Return a copy of this cursor that resumes after ``position``."""
        return self.model_copy(update={"last_position": position})


def validate_limit(value: Any) -> Optional[int]:
    """Validate an already-typed limit.

    Returns:
        The limit, or None when no limit was given

    Raises:
        InvalidLimitError: If the limit is not an integer greater than zero
    """
    if value is None:
        return None
    if not _is_valid_limit(value):
        raise InvalidLimitError(value)
    return value


def parse_limit(raw: Optional[str]) -> Optional[int]:
    """Parse the ``limit`` query parameter.

    Args:
        raw: Raw query parameter text, or None if the parameter is absent

    Returns:
        The page size, or None for no limit

    Raises:
        InvalidLimitError: If the text is not a base-10 integer greater than zero
    """
    if raw is None:
        return None
    if not _INTEGER_RE.fullmatch(raw):
        raise InvalidLimitError(raw)
    return validate_limit(int(raw))


def encode_cursor(cursor: Cursor) -> str:
    """Encode a cursor as an opaque token.

    The token is the standard base64 encoding of the UTF-8 JSON document
    ``{"params": ..., "lastPosition": ..., "limit": ...}``.

    Args:
        cursor: Cursor to encode

    Returns:
        Base64 encoded cursor string
    """
    cursor_json = cursor.model_dump_json(by_alias=True)
    return base64.b64encode(cursor_json.encode("utf-8")).decode("ascii")


def decode_cursor(
    token: str,
    params_type: Any = Any,
    position_type: Any = Any,
    max_size: Optional[int] = None
) -> Cursor:
    """Decode an opaque cursor token.

    Args:
        token: Base64 encoded cursor string
        params_type: Type the ``params`` field is validated against
        position_type: Type the ``lastPosition`` field is validated against
        max_size: Maximum accepted token length, unlimited if None

    Returns:
        Decoded cursor

    Raises:
        MalformedCursorTokenError: If the token is empty, too large, not
            base64, not JSON, or does not describe a cursor
        InvalidLimitError: If the embedded limit is not positive
    """
    if not token:
        raise MalformedCursorTokenError("Empty cursor token provided")

    if max_size is not None and len(token) > max_size:
        raise MalformedCursorTokenError(
            f"Invalid cursor token: exceeds maximum size of {max_size} characters"
        )

    try:
        raw = base64.b64decode(token.encode("ascii"), validate=True)
        payload = json.loads(raw.decode("utf-8"))
    except (ValueError, RecursionError) as e:
        logger.info(f"Rejected undecodable cursor token: {e}")
        raise MalformedCursorTokenError(f"Invalid cursor token: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedCursorTokenError("Invalid cursor token: expected a JSON object")

    missing = [name for name in REQUIRED_TOKEN_FIELDS if name not in payload]
    if missing:
        logger.info(f"Rejected cursor token missing fields: {missing}")
        raise MalformedCursorTokenError(
            f"Invalid cursor token: missing required field(s) {', '.join(missing)}"
        )

    validate_limit(payload.get("limit"))

    try:
        return Cursor[params_type, position_type].model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) for error in e.errors()
        )
        logger.info(f"Rejected cursor token with invalid fields: {fields}")
        raise MalformedCursorTokenError(f"Invalid cursor token: invalid field(s) {fields}") from e


def render_first_position() -> str:
    """Render the ``position`` query parameter for the first page."""
    return json.dumps({"position": "first"}, separators=(",", ":"))


def render_next_position(position: Any, codec: PositionCodec) -> str:
    """Render the ``position`` query parameter resuming after ``position``."""
    return json.dumps(
        {"position": "next", "keySet": codec.to_json_value(position)},
        separators=(",", ":")
    )


def parse_position(raw: Optional[str], codec: PositionCodec) -> Optional[Any]:
    """Parse the ``position`` query parameter.

    Accepted shapes are ``{"position": "first"}`` and
    ``{"position": "next", "keySet": <position>}``.

    Args:
        raw: Raw query parameter text, or None if the parameter is absent
        codec: Codec used to validate the ``keySet`` value

    Returns:
        The last position already seen, or None for the first page

    Raises:
        MalformedPositionError: If the parameter has any other shape
    """
    if raw is None:
        return None

    try:
        value = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise MalformedPositionError(f"Invalid position parameter: {e}") from e

    if value == {"position": "first"}:
        return None

    if isinstance(value, dict) and value.get("position") == "next" and set(value) == {"position", "keySet"}:
        try:
            return codec.from_json_value(value["keySet"])
        except PositionDecodeError as e:
            raise MalformedPositionError(f"Invalid position parameter: {e}") from e

    raise MalformedPositionError(
        'Invalid position parameter: expected {"position": "first"} '
        'or {"position": "next", "keySet": ...}'
    )
