"""Pagination module for cursor-based pagination."""

from .position import PositionCodec, PositionDecodeError
from .cursor import (
    Cursor,
    encode_cursor,
    decode_cursor,
    parse_limit,
    validate_limit,
    parse_position,
    render_first_position,
    render_next_position
)
from .params import ParamsParser, ParamField, required, optional, fail, no_params
from .links import with_query_param, without_query_params, create_link_header
from .page import (
    TokenPage,
    LinkPage,
    PageSlice,
    collect_page,
    build_token_page,
    build_link_page
)
from .request import Paginator, entity_payload

__all__ = [
    "PositionCodec",
    "PositionDecodeError",
    "Cursor",
    "encode_cursor",
    "decode_cursor",
    "parse_limit",
    "validate_limit",
    "parse_position",
    "render_first_position",
    "render_next_position",
    "ParamsParser",
    "ParamField",
    "required",
    "optional",
    "fail",
    "no_params",
    "with_query_param",
    "without_query_params",
    "create_link_header",
    "TokenPage",
    "LinkPage",
    "PageSlice",
    "collect_page",
    "build_token_page",
    "build_link_page",
    "Paginator",
    "entity_payload"
]
