"""Data types for storage listings and handles.

These types represent what flows out of providers:
- `ObjectItem` for blob-like entries (Azure Blob, S3, MinIO)
- `DirectoryEntryItem` for file share entries (Azure Files)
- `Page` for one batch returned by a single listing call
- `ContainerHandle` and `ObjectHandle` identifying remote entities
"""

from datetime import datetime
from typing import Generic, TypeAlias, TypeVar

from pydantic import BaseModel, Field

from nvisy_storage.tokens import ContinuationToken

T = TypeVar("T")

# Metadata associated with stored items.
Metadata: TypeAlias = dict[str, str]


class ObjectItem(BaseModel, frozen=True):
    """A blob or object listed from a container or bucket."""

    name: str
    """Name or key identifying this object."""

    size: int | None = None
    """Content length in bytes."""

    content_type: str | None = None
    """Content type (MIME type)."""

    etag: str | None = None
    last_modified: datetime | None = None

    metadata: Metadata = Field(default_factory=dict)
    """User-defined metadata, when the listing includes it."""


class DirectoryEntryItem(BaseModel, frozen=True):
    """A file or directory listed from a file share directory."""

    name: str
    is_directory: bool = False
    size: int | None = None
    """Content length in bytes. Not reported for directories."""

    last_modified: datetime | None = None


class Page(BaseModel, Generic[T], frozen=True):
    """One bounded batch of items returned by a single fetch call."""

    items: list[T] = Field(default_factory=list)
    """Items in service order. May be empty on a non-terminal page."""

    token: ContinuationToken = Field(default_factory=ContinuationToken.initial)
    """Token that was used to fetch this page."""

    next_token: ContinuationToken
    """Token for the following fetch call."""

    @property
    def is_last(self) -> bool:
        return self.next_token.is_terminal


class ContainerHandle(BaseModel, frozen=True):
    """Reference to a container, file share or bucket."""

    account: str | None = None
    """Storage account owning the container, if the service has one."""

    name: str
    url: str


class ObjectHandle(BaseModel, frozen=True):
    """Reference to a stored blob, file or object."""

    container: ContainerHandle
    name: str
    url: str
