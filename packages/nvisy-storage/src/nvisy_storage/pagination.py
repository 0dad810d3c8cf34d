"""Segmented listing driver.

A `Paginator` walks a `PageFetcher` from a start token until the service
returns the terminal token, exposing the result as a lazy async sequence.
Pages are fetched strictly one after another since each call needs the
token returned by the previous one.
"""

import asyncio
import logging
from collections import deque
from collections.abc import AsyncIterator, Awaitable
from typing import Generic, TypeVar

from nvisy_storage.datatypes import Page
from nvisy_storage.errors import ErrorKind, FetchError, ListingCancelledError, StorageError
from nvisy_storage.protocols import PageFetcher
from nvisy_storage.tokens import ContinuationToken

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Paginator(Generic[T]):
    """Lazy, forward-only enumeration over a paginated listing.

    Iterate it with `async for` to get items, or use `pages()` to get them
    grouped per fetch call. Use only one of the two views per instance. A
    finished paginator stays finished; call `start` again for a new one.

    If `cancel` is set before or during a fetch, the in-flight call is
    abandoned and iteration raises `ListingCancelledError`.
    """

    __slots__ = (
        "_buffer",
        "_cancel",
        "_failed",
        "_fetcher",
        "_item_view",
        "_pages_fetched",
        "_token",
    )

    def __init__(
        self,
        fetcher: PageFetcher[T],
        token: ContinuationToken | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._token = token if token is not None else ContinuationToken.initial()
        self._cancel = cancel
        self._buffer: deque[T] = deque()
        self._pages_fetched = 0
        self._failed = False
        self._item_view = False

    @property
    def token(self) -> ContinuationToken:
        """Token the next fetch will use."""
        return self._token

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    @property
    def done(self) -> bool:
        return not self._buffer and (self._failed or self._token.is_terminal)

    def __aiter__(self) -> "Paginator[T]":
        return self

    async def __anext__(self) -> T:
        self._item_view = True
        # Empty pages are skipped; only the terminal token ends the loop.
        while not self._buffer:
            if self._failed or self._token.is_terminal:
                raise StopAsyncIteration
            page = await self._next_page()
            self._buffer.extend(page.items)
        return self._buffer.popleft()

    async def pages(self) -> AsyncIterator[Page[T]]:
        """Yield each fetched page, empty ones included, in fetch order."""
        if self._item_view:
            msg = "Paginator is already being consumed item by item"
            raise StorageError(msg, kind=ErrorKind.INVALID_INPUT)
        while not (self._failed or self._token.is_terminal):
            yield await self._next_page()

    async def _next_page(self) -> Page[T]:
        # A failed enumeration reports its error once, then stays finished.
        try:
            page = await self._fetch(self._token)
            if page.next_token.is_initial:
                msg = f"Fetcher returned an initial token after fetching {self._token}"
                raise FetchError(msg, self._token, kind=ErrorKind.INVALID_INPUT)  # noqa: TRY301
        except StorageError:
            self._failed = True
            raise

        self._pages_fetched += 1
        self._token = page.next_token
        logger.debug(
            "Fetched page %d with %d items, next token: %s",
            self._pages_fetched,
            len(page.items),
            page.next_token,
        )
        return page

    async def _fetch(self, token: ContinuationToken) -> Page[T]:
        if self._cancel is not None and self._cancel.is_set():
            msg = f"Listing cancelled before fetching {token}"
            raise ListingCancelledError(msg, token)

        try:
            if self._cancel is None:
                return await self._fetcher.fetch_page(token)
            return await _race(self._fetcher.fetch_page(token), self._cancel, token)
        except ListingCancelledError:
            raise
        except TimeoutError as e:
            msg = f"Timed out fetching page at {token}"
            raise FetchError(msg, token, kind=ErrorKind.TIMEOUT, source=e) from e
        except StorageError as e:
            msg = f"Failed to fetch page at {token}: {e.message}"
            raise FetchError(msg, token, kind=e.kind, source=e) from e
        except Exception as e:
            msg = f"Failed to fetch page at {token}: {e}"
            raise FetchError(msg, token, source=e) from e

    def __repr__(self) -> str:
        return f"Paginator(token={self._token}, pages_fetched={self._pages_fetched})"


async def _race(
    fetch: Awaitable[Page[T]],
    cancel: asyncio.Event,
    token: ContinuationToken,
) -> Page[T]:
    """Await `fetch` unless `cancel` fires first."""
    fetch_task = asyncio.ensure_future(fetch)
    cancel_task = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait(
            {fetch_task, cancel_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        pending = [task for task in (fetch_task, cancel_task) if not task.done()]
        for task in pending:
            _ = task.cancel()
        # Let cancelled tasks unwind before returning or propagating.
        _ = await asyncio.gather(*pending, return_exceptions=True)

    if fetch_task in done:
        return fetch_task.result()

    msg = f"Listing cancelled while fetching {token}"
    raise ListingCancelledError(msg, token)


def start(
    fetcher: PageFetcher[T],
    token: ContinuationToken | None = None,
    *,
    cancel: asyncio.Event | None = None,
) -> Paginator[T]:
    """Begin a new enumeration over `fetcher`.

    `token` defaults to the initial token. Pass the token from a
    `FetchError` to resume a failed enumeration at the page that failed.
    """
    return Paginator(fetcher, token, cancel=cancel)
