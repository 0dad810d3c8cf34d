"""Materialize a listing into memory, grouped by fetch call."""

import logging
from typing import TypeVar

from nvisy_storage.datatypes import Page
from nvisy_storage.errors import FetchError, ListingCancelledError
from nvisy_storage.pagination import Paginator

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def collect_all(paginator: Paginator[T]) -> list[Page[T]]:
    """Drain `paginator` and return its pages in fetch order.

    Each entry corresponds to one fetch call, empty pages included, so the
    result mirrors the service's own page boundaries. Memory use grows with
    the listing; iterate the paginator directly for large containers.

    On failure or cancellation the `FetchError` or `ListingCancelledError`
    is re-raised with `pages` set to what was collected before it.
    """
    pages: list[Page[T]] = []
    try:
        async for page in paginator.pages():
            pages.append(page)
    except (FetchError, ListingCancelledError) as e:
        e.pages = pages
        logger.debug("Listing stopped after %d pages at %s", len(pages), e.token)
        raise

    logger.debug(
        "Collected %d items across %d pages",
        sum(len(page.items) for page in pages),
        len(pages),
    )
    return pages
