"""Core protocols for storage providers."""

from typing import Protocol, Self, TypeVar, runtime_checkable

from nvisy_storage.datatypes import ObjectHandle, Page
from nvisy_storage.tokens import ContinuationToken

T_co = TypeVar("T_co", covariant=True)
Cred_contra = TypeVar("Cred_contra", contravariant=True)
Params_contra = TypeVar("Params_contra", contravariant=True)


@runtime_checkable
class PageFetcher(Protocol[T_co]):
    """Protocol for fetching one page of a segmented listing."""

    async def fetch_page(self, token: ContinuationToken) -> Page[T_co]:
        """Fetch the page starting at `token`.

        The returned page carries the token for the next call; a terminal
        next token means the listing is complete. Raises `StorageError`
        when the service call fails.
        """
        ...


@runtime_checkable
class ObjectStore(Protocol):
    """Protocol for single request/response operations on a container."""

    async def create_container(self) -> None:
        """Create the container bound to this store."""
        ...

    async def delete_container(self) -> None:
        """Delete the container bound to this store."""
        ...

    async def upload(
        self,
        name: str,
        data: bytes,
        content_type: str | None = None,
    ) -> ObjectHandle:
        """Upload `data` as object `name`, replacing any existing one."""
        ...

    async def download(self, name: str) -> bytes:
        """Download the full content of object `name`."""
        ...

    async def delete(self, name: str) -> None:
        """Delete object `name`."""
        ...

    async def exists(self, name: str) -> bool:
        """Check if object `name` exists."""
        ...


@runtime_checkable
class Provider(Protocol[Cred_contra, Params_contra]):
    """Protocol for provider lifecycle management."""

    @classmethod
    async def connect(cls, credentials: Cred_contra, params: Params_contra) -> Self:
        """Establish connection to the storage service."""
        ...

    async def disconnect(self) -> None:
        """Release resources and close connections."""
        ...
