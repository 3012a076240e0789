"""Tests for page assembly."""

import json
from urllib.parse import parse_qs, urlsplit

import pytest
from starlette.datastructures import URL

from cursorpage.pagination.cursor import Cursor, decode_cursor
from cursorpage.pagination.page import (
    build_link_page,
    build_token_page,
    collect_page
)
from cursorpage.pagination.position import PositionCodec


def make_payload(n):
    return n, {"key": n}


def query_of(url: str):
    return parse_qs(urlsplit(url).query)


class TestCollectPage:
    """Test the single-pass page collection."""

    def test_full_page_has_next(self):
        """A batch exactly as long as the limit has a next page."""
        cursor = Cursor.first({"teacherId": 1}, limit=4)

        page = collect_page(cursor, [1, 2, 3, 4], make_payload)

        assert page.data == [{"key": 1}, {"key": 2}, {"key": 3}, {"key": 4}]
        assert page.has_next
        assert page.last_position == 4

    def test_next_cursor_resumes_after_last_item(self):
        """The next cursor keeps params and limit and moves the position."""
        cursor = Cursor.first({"teacherId": 1}, limit=2)

        next_cursor = collect_page(cursor, [5, 6], make_payload).next_cursor(cursor)

        assert next_cursor == Cursor(params={"teacherId": 1}, last_position=6, limit=2)

    def test_short_page_is_last(self):
        """Fewer items than the limit signals exhaustion."""
        cursor = Cursor.first({}, limit=3)

        page = collect_page(cursor, [1, 2], make_payload)

        assert not page.has_next
        assert page.next_cursor(cursor) is None
        assert page.data == [{"key": 1}, {"key": 2}]

    def test_empty_page_is_last(self):
        """An empty batch never has a next page."""
        cursor = Cursor.first({}, limit=3)

        page = collect_page(cursor, [], make_payload)

        assert page.data == []
        assert not page.has_next

    @pytest.mark.parametrize("count", [0, 1, 5, 100])
    def test_no_limit_never_has_next(self, count):
        """Without a limit there is no way to know a page was full."""
        cursor = Cursor.first({})

        page = collect_page(cursor, range(count), make_payload)

        assert len(page.data) == count
        assert not page.has_next

    def test_batch_longer_than_limit_has_next(self):
        """Oversized batches are passed through untouched."""
        cursor = Cursor.first({}, limit=2)

        page = collect_page(cursor, [1, 2, 3], make_payload)

        assert len(page.data) == 3
        assert page.has_next
        assert page.last_position == 3

    def test_consumes_iterators_once(self):
        """Batches may be one-shot iterators."""
        cursor = Cursor.first({}, limit=3)

        page = collect_page(cursor, iter([3, 1, 2]), make_payload)

        assert page.data == [{"key": 3}, {"key": 1}, {"key": 2}]
        assert page.last_position == 2


class TestLookahead:
    """Test collection of batches fetched with one extra item."""

    def test_extra_item_means_next(self):
        """The extra item signals more data and is not returned."""
        cursor = Cursor.first({}, limit=2)

        page = collect_page(cursor, [1, 2, 3], make_payload, lookahead=True)

        assert page.data == [{"key": 1}, {"key": 2}]
        assert page.has_next
        assert page.last_position == 2

    def test_exactly_full_page_is_last(self):
        """Without the extra item a full page is the last one."""
        cursor = Cursor.first({}, limit=2)

        page = collect_page(cursor, [1, 2], make_payload, lookahead=True)

        assert page.data == [{"key": 1}, {"key": 2}]
        assert not page.has_next

    def test_no_limit(self):
        cursor = Cursor.first({})

        page = collect_page(cursor, [1, 2, 3], make_payload, lookahead=True)

        assert len(page.data) == 3
        assert not page.has_next

    def test_token_page_with_lookahead(self):
        """The next token points after the last returned item."""
        cursor = Cursor.first({}, limit=2)

        page = build_token_page(cursor, [1, 2, 3], make_payload, lookahead=True)

        assert decode_cursor(page.next) == cursor.after(2)


class TestTokenPage:
    """Test build_token_page."""

    def test_next_token_encodes_last_position(self):
        """The next token decodes to the cursor after the last item."""
        cursor = Cursor.first({"teacherId": 1}, limit=4)

        page = build_token_page(cursor, [1, 2, 3, 4], make_payload)

        assert page.next is not None
        assert decode_cursor(page.next) == cursor.after(4)

    def test_exhausted_page_has_null_next(self):
        cursor = Cursor.first({"teacherId": 1}, limit=4)

        page = build_token_page(cursor, [1, 2], make_payload)

        assert page.next is None
        assert json.loads(page.model_dump_json()) == {"data": [{"key": 1}, {"key": 2}], "next": None}

    def test_same_input_same_body(self):
        """Pages are byte-identical for the same cursor and items."""
        cursor = Cursor.first({"teacherId": 1}, limit=2).after(2)

        first = build_token_page(cursor, [3, 4], make_payload).model_dump_json()
        second = build_token_page(cursor, [3, 4], make_payload).model_dump_json()

        assert first == second


class TestLinkPage:
    """Test build_link_page."""

    @pytest.fixture
    def codec(self) -> PositionCodec:
        return PositionCodec(int)

    def test_first_and_next_links(self, codec):
        """next rewrites position, first drops it, other params survive."""
        url = URL("http://testserver/v1/items?teacherId=1&limit=2")
        cursor = Cursor.first({"teacherId": 1}, limit=2)

        page = build_link_page(url, cursor, [1, 2], make_payload, codec)

        assert page.first == "http://testserver/v1/items?teacherId=1&limit=2"
        next_query = query_of(page.next)
        assert next_query["teacherId"] == ["1"]
        assert next_query["limit"] == ["2"]
        assert json.loads(next_query["position"][0]) == {"position": "next", "keySet": 2}

    def test_existing_position_is_replaced(self, codec):
        """Following next from a later page moves the position forward."""
        url = URL(
            "http://testserver/v1/items?teacherId=1&limit=2"
            "&position=%7B%22position%22%3A%22next%22%2C%22keySet%22%3A2%7D"
        )
        cursor = Cursor.first({"teacherId": 1}, limit=2).after(2)

        page = build_link_page(url, cursor, [3, 4], make_payload, codec)

        assert query_of(page.next)["position"] == ['{"position":"next","keySet":4}']
        assert "position" not in query_of(page.first)

    def test_last_page_has_first_but_no_next(self, codec):
        """first is always present, next only while data remains."""
        url = URL("http://testserver/v1/items?limit=2")
        cursor = Cursor.first(None, limit=2)

        page = build_link_page(url, cursor, [1], make_payload, codec)

        assert page.next is None
        assert page.first == "http://testserver/v1/items?limit=2"

    def test_next_token_is_not_carried_into_links(self, codec):
        """Links never carry an opaque next token."""
        url = URL("http://testserver/v1/items?limit=1&next=abc")
        cursor = Cursor.first(None, limit=1)

        page = build_link_page(url, cursor, [1], make_payload, codec)

        assert "next" not in query_of(page.first)
        assert "next" not in query_of(page.next)
