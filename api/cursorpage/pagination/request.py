"""Request-level pagination: build a cursor, fetch, assemble the page."""

import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, Mapping, Optional, Sequence, TypeVar, Union

from starlette.requests import Request

from ..errors.problem_details import MalformedCursorTokenError
from .cursor import Cursor, decode_cursor, parse_limit, parse_position
from .links import create_link_header
from .page import (
    LIMIT_PARAM,
    NEXT_PARAM,
    POSITION_PARAM,
    LinkPage,
    MakePayload,
    TokenPage,
    build_link_page,
    build_token_page
)
from .params import Lookup, no_params
from .position import PositionCodec


logger = logging.getLogger(__name__)

ParamsT = TypeVar("ParamsT")
PositionT = TypeVar("PositionT")

Fetch = Callable[[Cursor], Union[Sequence[Any], Awaitable[Sequence[Any]]]]


def entity_payload(key: str = "id") -> MakePayload:
    """Projection using an item's own identifier as its position.

    Works for attribute-style objects and for mappings.
    """
    def make_payload(item: Any):
        if isinstance(item, Mapping):
            return item[key], item
        return getattr(item, key), item

    return make_payload


class Paginator(Generic[ParamsT, PositionT]):
    """Cursor pagination for one kind of list endpoint.

    Two request shapes are supported. When a ``next`` query parameter is
    present it is decoded as an opaque cursor token and nothing else is
    consulted. Otherwise the cursor is rebuilt from the ``position`` and
    ``limit`` query parameters plus the caller's params parser.

    Args:
        parser: Callable turning a query parameter lookup into the params value
        params_type: Type used to validate params embedded in tokens
        position_type: Type used to validate positions
        max_cursor_size: Maximum accepted length of a ``next`` token
        lookahead: Ask fetch for one item more than the limit so that an
            exactly full last page is recognised as the last one
    """

    def __init__(
        self,
        parser: Callable[[Lookup], ParamsT] = no_params,
        *,
        params_type: Any = Any,
        position_type: Any = Any,
        max_cursor_size: Optional[int] = None,
        lookahead: bool = False
    ):
        self.parser = parser
        self.params_type = params_type
        self.position_type = position_type
        self.max_cursor_size = max_cursor_size
        self.lookahead = lookahead
        self.codec = PositionCodec(position_type)
        self.cursor_type = Cursor[params_type, position_type]

    def cursor_from_query(self, query: Mapping[str, str], allow_token: bool = True) -> Cursor:
        """Build the cursor described by a set of query parameters.

        Link-navigated pages pass ``allow_token=False``: their links are
        rewritten request URLs, and a URL holding only a token would lose
        the caller parameters and limit.

        Raises:
            MalformedCursorTokenError: If the ``next`` token cannot be decoded,
                or a token is sent where none is accepted
            MalformedPositionError: If ``position`` has an unsupported shape
            InvalidLimitError: If ``limit`` is not a positive integer
            ParameterParseError: If the params parser rejects the request
        """
        token = query.get(NEXT_PARAM)
        if token is not None and not allow_token:
            raise MalformedCursorTokenError(
                "Cursor tokens are not accepted here; follow the next link instead"
            )
        if token is not None:
            cursor = decode_cursor(
                token,
                params_type=self.params_type,
                position_type=self.position_type,
                max_size=self.max_cursor_size
            )
            logger.debug(f"Resuming from cursor token (limit={cursor.limit})")
            return cursor

        last_position = parse_position(query.get(POSITION_PARAM), self.codec)
        limit = parse_limit(query.get(LIMIT_PARAM))
        params = self.parser(query.get)

        return self.cursor_type(params=params, last_position=last_position, limit=limit)

    def cursor_from_request(self, request: Request, allow_token: bool = True) -> Cursor:
        """Build the cursor for an incoming request."""
        return self.cursor_from_query(request.query_params, allow_token)

    async def fetch(self, fetch: Fetch, cursor: Cursor) -> Sequence[Any]:
        """Run the caller's fetch function, awaiting it if needed."""
        if self.lookahead and cursor.limit is not None:
            cursor = cursor.model_copy(update={"limit": cursor.limit + 1})
        result = fetch(cursor)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def token_page(self, request: Request, fetch: Fetch, make_payload: MakePayload) -> TokenPage:
        """Paginate a request, returning a page with an opaque ``next`` token."""
        cursor = self.cursor_from_request(request)
        items = await self.fetch(fetch, cursor)
        return build_token_page(cursor, items, make_payload, self.lookahead)

    async def link_page(self, request: Request, fetch: Fetch, make_payload: MakePayload) -> LinkPage:
        """Paginate a request, returning a page with ``first`` and ``next`` URLs."""
        cursor = self.cursor_from_request(request, allow_token=False)
        items = await self.fetch(fetch, cursor)
        return build_link_page(request.url, cursor, items, make_payload, self.codec, self.lookahead)

    @staticmethod
    def link_header(page: LinkPage) -> Optional[str]:
        """Link header advertising the navigation of a link page."""
        return create_link_header({"first": page.first, "next": page.next})
