"""Page assembly: turn a fetched batch into a page with navigation."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, Field
from starlette.datastructures import URL

from .cursor import Cursor, encode_cursor, render_next_position
from .links import with_query_param, without_query_params
from .position import PositionCodec


logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT")

MakePayload = Callable[[Any], Tuple[Any, Any]]

POSITION_PARAM = "position"
NEXT_PARAM = "next"
LIMIT_PARAM = "limit"


class TokenPage(BaseModel, Generic[PayloadT]):
    """A page whose continuation is an opaque cursor token."""

    data: List[PayloadT] = Field(description="Items on this page, in fetch order")
    next: Optional[str] = Field(default=None, description="Token for the next page, null when exhausted")


class LinkPage(BaseModel, Generic[PayloadT]):
    """A page whose navigation is expressed as request URLs."""

    data: List[PayloadT] = Field(description="Items on this page, in fetch order")
    first: str = Field(description="URL of the first page")
    next: Optional[str] = Field(default=None, description="URL of the next page, null when exhausted")


@dataclass(frozen=True)
class PageSlice:
    """Result of a single pass over a fetched batch."""

    data: List[Any]
    last_position: Any
    has_next: bool

    def next_cursor(self, cursor: Cursor) -> Optional[Cursor]:
        """Cursor resuming after this slice, or None if the results are exhausted."""
        if not self.has_next:
            return None
        return cursor.after(self.last_position)


def collect_page(
    cursor: Cursor,
    items: Iterable[Any],
    make_payload: MakePayload,
    lookahead: bool = False
) -> PageSlice:
    """Project a fetched batch and decide whether another page exists.

    The batch is expected to hold the next ``cursor.limit`` items (fewer when
    the results run out). A next page exists only when the batch is non-empty,
    a limit was requested, and the batch is at least that long.

    With ``lookahead`` the batch was fetched with one extra item. That item is
    not returned; its presence alone means a next page exists, so an exactly
    full final page gets no next link.

    Args:
        cursor: Cursor the batch was fetched with
        items: Items returned by the data source
        make_payload: Projection ``item -> (position, payload)``
        lookahead: Whether the batch may hold one item past the limit

    Returns:
        The payloads, the position of the last item, and the next-page flag
    """
    limit = cursor.limit
    data: List[Any] = []
    last_position = None
    extra = False

    for item in items:
        if lookahead and limit is not None and len(data) == limit:
            extra = True
            break
        last_position, payload = make_payload(item)
        data.append(payload)

    count = len(data)
    if lookahead:
        has_next = extra
    else:
        has_next = count > 0 and limit is not None and count >= limit
    logger.debug(f"Collected page of {count} items (limit={limit}, has_next={has_next})")

    return PageSlice(data=data, last_position=last_position, has_next=has_next)


def build_token_page(
    cursor: Cursor,
    items: Iterable[Any],
    make_payload: MakePayload,
    lookahead: bool = False
) -> TokenPage:
    """Assemble a page carrying an opaque token for the next page."""
    page = collect_page(cursor, items, make_payload, lookahead)
    next_cursor = page.next_cursor(cursor)
    return TokenPage(
        data=page.data,
        next=encode_cursor(next_cursor) if next_cursor is not None else None
    )


def first_page_url(url: URL) -> str:
    """URL of the first page: the request URL without any cursor parameters."""
    return without_query_params(url, POSITION_PARAM, NEXT_PARAM)


def build_link_page(
    url: URL,
    cursor: Cursor,
    items: Iterable[Any],
    make_payload: MakePayload,
    codec: Optional[PositionCodec] = None,
    lookahead: bool = False
) -> LinkPage:
    """Assemble a page whose navigation links are rewritten request URLs.

    Args:
        url: URL of the current request
        cursor: Cursor the batch was fetched with
        items: Items returned by the data source
        make_payload: Projection ``item -> (position, payload)``
        codec: Codec used to render the position of the last item
        lookahead: Whether the batch may hold one item past the limit

    Returns:
        Page with ``first`` always set and ``next`` set only when more data exists
    """
    codec = codec or PositionCodec()
    page = collect_page(cursor, items, make_payload, lookahead)

    next_url = None
    if page.has_next:
        base = without_query_params(url, NEXT_PARAM)
        next_url = with_query_param(base, POSITION_PARAM, render_next_position(page.last_position, codec))

    return LinkPage(data=page.data, first=first_page_url(url), next=next_url)
