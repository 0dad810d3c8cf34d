"""Segmented listing and object operations for remote storage services."""

from nvisy_storage.accumulate import collect_all
from nvisy_storage.datatypes import (
    ContainerHandle,
    DirectoryEntryItem,
    ObjectHandle,
    ObjectItem,
    Page,
)
from nvisy_storage.errors import ErrorKind, FetchError, ListingCancelledError, StorageError
from nvisy_storage.pagination import Paginator, start
from nvisy_storage.protocols import ObjectStore, PageFetcher, Provider
from nvisy_storage.tokens import ContinuationToken, TokenState

__all__ = [
    "ContainerHandle",
    "ContinuationToken",
    "DirectoryEntryItem",
    "ErrorKind",
    "FetchError",
    "ListingCancelledError",
    "ObjectHandle",
    "ObjectItem",
    "ObjectStore",
    "Page",
    "PageFetcher",
    "Paginator",
    "Provider",
    "StorageError",
    "TokenState",
    "collect_all",
    "start",
]
