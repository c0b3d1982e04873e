"""Paged listing."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loguru import logger

from hangar.client import ApiResponse
from hangar.constants import DEFAULT_PAGE_SIZE
from hangar.validation import assert_valid_response

type PageFetcher = Callable[[int, int], ApiResponse]


def fetch_all_pages(
    fetch_page: PageFetcher,
    items_key: str,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[Any]:
    """Walk a paged listing from page 1 and concatenate all items.

    Stops only when the provider reports no next page; an empty page that
    still points to a next page is followed.

    Args:
        fetch_page: Called with (page, per_page).
        items_key: Key of the item list in the response body.
        page_size: Items requested per page.
    """
    result: list[Any] = []
    page: int | None = 1
    while page is not None:
        logger.bind(component="pagination").debug(
            "Fetching page {page} of {key}", page=page, key=items_key
        )
        items, page = assert_valid_response(
            fetch_page(page, page_size),
            lambda b: (b[items_key], b["meta"]["pagination"]["next_page"]),
        )
        result.extend(items)
    return result
