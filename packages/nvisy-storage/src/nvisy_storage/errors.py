"""Error types for storage operations."""

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from nvisy_storage.datatypes import Page
    from nvisy_storage.tokens import ContinuationToken


class ErrorKind(StrEnum):
    """Classification of storage errors."""

    CONNECTION = "connection"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    INVALID_INPUT = "invalid_input"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    PROVIDER = "provider"


class StorageError(Exception):
    """Base error for all storage operations.

    Providers raise this for any failure reported by the remote service
    (network, authentication, malformed response, service error code).
    """

    __slots__ = ("kind", "message", "source")

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.PROVIDER,
        source: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.source = source

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, kind={self.kind!r})"


class FetchError(StorageError):
    """A page fetch failed partway through an enumeration.

    `token` is the continuation token that was being fetched, so a new
    enumeration started from it resumes at the failed page. `pages` holds
    the pages collected before the failure when raised from `collect_all`.
    """

    __slots__ = ("pages", "token")

    def __init__(
        self,
        message: str,
        token: "ContinuationToken",
        kind: ErrorKind = ErrorKind.PROVIDER,
        source: BaseException | None = None,
    ) -> None:
        super().__init__(message, kind=kind, source=source)
        self.token = token
        self.pages: "list[Page[Any]]" = []


class ListingCancelledError(StorageError):
    """An enumeration was stopped through its cancellation event.

    `pages` holds the pages collected before cancellation when raised from
    `collect_all`.
    """

    __slots__ = ("pages", "token")

    def __init__(self, message: str, token: "ContinuationToken") -> None:
        super().__init__(message, kind=ErrorKind.CANCELLED)
        self.token = token
        self.pages: "list[Page[Any]]" = []
