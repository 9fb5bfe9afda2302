"""Cursor-based pagination over GraphQL connections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from linctl.constants import FETCH_ALL_PAGE_SIZE, MAX_PAGE_SIZE
from linctl.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from linctl.client import LinearClient
    from linctl.queries import Operation

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class Page(Generic[T]):
    """One page of a connection."""

    items: list[T] = field(default_factory=list)
    has_more: bool = False
    cursor: str | None = None

    @classmethod
    def from_connection(
        cls,
        connection: dict[str, Any],
        decode: Callable[[dict[str, Any]], T],
    ) -> Page[T]:
        """Decode a ``{nodes, pageInfo}`` connection.

        A connection without ``pageInfo`` is treated as a single, final page.
        """
        page_info = connection.get("pageInfo") or {}
        return cls(
            items=[decode(node) for node in connection.get("nodes", [])],
            has_more=bool(page_info.get("hasNextPage", False)),
            cursor=page_info.get("endCursor"),
        )


def collect(
    fetch_page: Callable[[int, str | None], Page[T]],
    limit: int,
    fetch_all: bool = False,
) -> list[T]:
    """Gather records from one or more pages.

    Args:
        fetch_page: Called as ``fetch_page(first, after)``; the caller binds
            the filter into it
        limit: Maximum records for a single bounded fetch (capped at 250)
        fetch_all: Follow cursors until the service reports no further page

    Returns:
        Records in the order the service returned them
    """
    if limit < 1:
        msg = f"Limit must be at least 1, got {limit}"
        raise ValidationError(msg)

    if not fetch_all:
        return fetch_page(min(limit, MAX_PAGE_SIZE), None).items

    records: list[T] = []
    cursor: str | None = None
    while True:
        page = fetch_page(FETCH_ALL_PAGE_SIZE, cursor)
        records.extend(page.items)
        if not page.has_more:
            break
        if page.cursor is None:
            logger.debug(
                "Service reported more pages without a cursor; "
                "stopping after %d record(s)",
                len(records),
            )
            break
        cursor = page.cursor
    return records


def fetch_every(
    client: LinearClient,
    operation: Operation[Page[T]],
    variables: dict[str, Any] | None = None,
) -> list[T]:
    """Collect every page of a list operation, binding *variables* to each."""
    base = dict(variables or {})

    def fetch(first: int, after: str | None) -> Page[T]:
        return client.execute(operation, {**base, "first": first, "after": after})

    return collect(fetch, limit=1, fetch_all=True)
