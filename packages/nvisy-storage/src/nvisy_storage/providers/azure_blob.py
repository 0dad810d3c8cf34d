"""Azure Blob Storage provider using azure-storage-blob."""

import asyncio
import logging
from typing import TYPE_CHECKING, ClassVar, Self

from nvisy_storage.datatypes import ContainerHandle, ObjectHandle, ObjectItem, Page
from nvisy_storage.errors import ErrorKind, StorageError
from nvisy_storage.pagination import Paginator, start
from nvisy_storage.params import AzureCredentials, ObjectParams
from nvisy_storage.providers._azure import storage_error
from nvisy_storage.tokens import ContinuationToken

if TYPE_CHECKING:
    from azure.storage.blob import BlobProperties

try:
    from azure.core.credentials import AzureNamedKeyCredential
    from azure.core.exceptions import AzureError
    from azure.storage.blob import ContentSettings
    from azure.storage.blob.aio import ContainerClient
except ImportError as e:
    _msg = "azure-storage-blob is required for Azure Blob support. Install with: uv add 'nvisy-storage[azure]'"
    raise ImportError(_msg) from e

logger = logging.getLogger(__name__)


class AzureBlobParams(ObjectParams, frozen=True):
    """Parameters for Azure Blob operations.

    Inherits `container`, `prefix`, `batch_size` and `content_type` from ObjectParams.
    """

    include_metadata: bool = False
    """Ask the service to return user metadata with each listed blob."""


def _to_item(blob: "BlobProperties") -> ObjectItem:
    content_settings = blob.content_settings
    return ObjectItem(
        name=blob.name,
        size=blob.size,
        content_type=content_settings.content_type if content_settings else None,
        etag=blob.etag,
        last_modified=blob.last_modified,
        metadata=dict(blob.metadata or {}),
    )


class AzureBlobProvider:
    """Azure Blob provider bound to a single container.

    Implements Provider[AzureCredentials, AzureBlobParams], ObjectStore and
    PageFetcher[ObjectItem].
    """

    __slots__: ClassVar[tuple[str, str]] = ("_container", "_params")

    _container: ContainerClient
    _params: AzureBlobParams

    def __init__(self, container: ContainerClient, params: AzureBlobParams) -> None:
        self._container = container
        self._params = params

    @classmethod
    async def connect(cls, credentials: AzureCredentials, params: AzureBlobParams) -> Self:
        """Create a container client for the configured account."""
        try:
            container = ContainerClient(
                account_url=credentials.blob_url(),
                container_name=params.container,
                credential=AzureNamedKeyCredential(
                    credentials.account_name,
                    credentials.account_key.get_secret_value(),
                ),
            )
        except (AzureError, ValueError) as e:
            msg = f"Failed to connect to Azure Blob Storage: {e}"
            raise StorageError(msg, kind=ErrorKind.CONNECTION, source=e) from e

        return cls(container, params)

    async def disconnect(self) -> None:
        """Close the underlying HTTP transport."""
        await self._container.close()

    @property
    def handle(self) -> ContainerHandle:
        return ContainerHandle(
            account=self._container.account_name,
            name=self._container.container_name,
            url=self._container.url,
        )

    async def fetch_page(self, token: ContinuationToken) -> Page[ObjectItem]:
        """List one segment of blobs starting at `token`."""
        segments = self._container.list_blobs(
            name_starts_with=self._params.prefix,
            include=["metadata"] if self._params.include_metadata else None,
            results_per_page=self._params.batch_size,
        ).by_page(continuation_token=token.value)

        try:
            segment = await anext(segments)
            items = [_to_item(blob) async for blob in segment]
        except AzureError as e:
            msg = f"Failed to list blobs in '{self._params.container}'"
            raise storage_error(msg, e) from e

        return Page[ObjectItem](
            items=items,
            token=token,
            next_token=ContinuationToken.from_marker(segments.continuation_token),
        )

    def list_items(
        self,
        token: ContinuationToken | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Paginator[ObjectItem]:
        """Enumerate the container's blobs lazily."""
        return start(self, token, cancel=cancel)

    async def create_container(self) -> None:
        try:
            _ = await self._container.create_container()
        except AzureError as e:
            msg = f"Failed to create container '{self._params.container}'"
            raise storage_error(msg, e) from e
        logger.info("Created container '%s'", self._params.container)

    async def delete_container(self) -> None:
        try:
            await self._container.delete_container()
        except AzureError as e:
            msg = f"Failed to delete container '{self._params.container}'"
            raise storage_error(msg, e) from e
        logger.info("Deleted container '%s'", self._params.container)

    async def upload(
        self,
        name: str,
        data: bytes,
        content_type: str | None = None,
    ) -> ObjectHandle:
        """Upload a block blob, overwriting any existing blob of that name."""
        try:
            blob = await self._container.upload_blob(
                name,
                data,
                overwrite=True,
                content_settings=ContentSettings(
                    content_type=content_type or self._params.content_type,
                ),
            )
        except AzureError as e:
            msg = f"Failed to upload blob '{name}'"
            raise storage_error(msg, e) from e

        return ObjectHandle(container=self.handle, name=name, url=blob.url)

    async def download(self, name: str) -> bytes:
        try:
            downloader = await self._container.download_blob(name)
            return await downloader.readall()
        except AzureError as e:
            msg = f"Failed to download blob '{name}'"
            raise storage_error(msg, e) from e

    async def delete(self, name: str) -> None:
        try:
            await self._container.delete_blob(name)
        except AzureError as e:
            msg = f"Failed to delete blob '{name}'"
            raise storage_error(msg, e) from e

    async def exists(self, name: str) -> bool:
        try:
            return await self._container.get_blob_client(name).exists()
        except AzureError as e:
            msg = f"Failed to check blob existence '{name}'"
            raise storage_error(msg, e) from e


Provider = AzureBlobProvider
