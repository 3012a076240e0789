"""URL rewriting and Link header helpers for route-based pagination."""

from typing import Mapping, Optional, Union

from starlette.datastructures import URL


def with_query_param(url: Union[str, URL], name: str, value: str) -> str:
    """Return ``url`` with query parameter ``name`` set to ``value``.

    All other query parameters are preserved in their original order.
    """
    return str(URL(str(url)).include_query_params(**{name: value}))


def without_query_params(url: Union[str, URL], *names: str) -> str:
    """Return ``url`` with the given query parameters removed."""
    return str(URL(str(url)).remove_query_params(list(names)))


def create_link_header(links: Mapping[str, Optional[str]]) -> Optional[str]:
    """Create Link header for pagination as per RFC 8288.

    Args:
        links: Relation name to URL, in the order they should appear.
            Relations whose URL is None are skipped.

    Returns:
        Link header value or None if no links
    """
    parts = [f'<{url}>; rel="{rel}"' for rel, url in links.items() if url]
    return ", ".join(parts) if parts else None
