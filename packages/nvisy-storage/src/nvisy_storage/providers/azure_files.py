"""Azure Files provider using azure-storage-file-share."""

import asyncio
import logging
from typing import TYPE_CHECKING, ClassVar, Self

from nvisy_storage.datatypes import ContainerHandle, DirectoryEntryItem, ObjectHandle, Page
from nvisy_storage.errors import ErrorKind, StorageError
from nvisy_storage.pagination import Paginator, start
from nvisy_storage.params import AzureCredentials, ObjectParams
from nvisy_storage.providers._azure import storage_error
from nvisy_storage.tokens import ContinuationToken

if TYPE_CHECKING:
    from azure.storage.fileshare import DirectoryProperties, FileProperties

try:
    from azure.core.credentials import AzureNamedKeyCredential
    from azure.core.exceptions import AzureError, ResourceExistsError
    from azure.storage.fileshare import ContentSettings
    from azure.storage.fileshare.aio import ShareClient, ShareDirectoryClient, ShareFileClient
except ImportError as e:
    _msg = "azure-storage-file-share is required for Azure Files support. Install with: uv add 'nvisy-storage[azure]'"
    raise ImportError(_msg) from e

logger = logging.getLogger(__name__)


class AzureFilesParams(ObjectParams, frozen=True):
    """Parameters for Azure Files operations.

    `container` names the file share. Inherits `prefix`, `batch_size` and
    `content_type` from ObjectParams.
    """

    directory: str = ""
    """Directory used for listing, uploads and downloads. Empty is the share root."""


def _to_item(entry: "DirectoryProperties | FileProperties") -> DirectoryEntryItem:
    # Listings mix DirectoryProperties and FileProperties; only files carry a size.
    is_directory = bool(getattr(entry, "is_directory", False))
    return DirectoryEntryItem(
        name=entry.name,
        is_directory=is_directory,
        size=None if is_directory else getattr(entry, "size", None),
        last_modified=entry.last_modified,
    )


class AzureFilesProvider:
    """Azure Files provider bound to a single share directory.

    Implements Provider[AzureCredentials, AzureFilesParams], ObjectStore and
    PageFetcher[DirectoryEntryItem].
    """

    __slots__: ClassVar[tuple[str, str]] = ("_params", "_share")

    _params: AzureFilesParams
    _share: ShareClient

    def __init__(self, share: ShareClient, params: AzureFilesParams) -> None:
        self._share = share
        self._params = params

    @classmethod
    async def connect(cls, credentials: AzureCredentials, params: AzureFilesParams) -> Self:
        """Create a share client for the configured account."""
        try:
            share = ShareClient(
                account_url=credentials.file_url(),
                share_name=params.container,
                credential=AzureNamedKeyCredential(
                    credentials.account_name,
                    credentials.account_key.get_secret_value(),
                ),
            )
        except (AzureError, ValueError) as e:
            msg = f"Failed to connect to Azure Files: {e}"
            raise StorageError(msg, kind=ErrorKind.CONNECTION, source=e) from e

        return cls(share, params)

    async def disconnect(self) -> None:
        """Close the underlying HTTP transport."""
        await self._share.close()

    @property
    def handle(self) -> ContainerHandle:
        return ContainerHandle(
            account=self._share.account_name,
            name=self._share.share_name,
            url=self._share.url,
        )

    def _directory(self) -> ShareDirectoryClient:
        return self._share.get_directory_client(self._params.directory)

    def _file(self, name: str) -> ShareFileClient:
        return self._directory().get_file_client(name)

    async def fetch_page(self, token: ContinuationToken) -> Page[DirectoryEntryItem]:
        """List one segment of files and directories starting at `token`."""
        segments = self._directory().list_directories_and_files(
            name_starts_with=self._params.prefix,
            results_per_page=self._params.batch_size,
        ).by_page(continuation_token=token.value)

        try:
            segment = await anext(segments)
            items = [_to_item(entry) async for entry in segment]
        except AzureError as e:
            msg = f"Failed to list files in share '{self._params.container}'"
            raise storage_error(msg, e) from e

        return Page[DirectoryEntryItem](
            items=items,
            token=token,
            next_token=ContinuationToken.from_marker(segments.continuation_token),
        )

    def list_items(
        self,
        token: ContinuationToken | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Paginator[DirectoryEntryItem]:
        """Enumerate the directory's files and subdirectories lazily."""
        return start(self, token, cancel=cancel)

    async def create_container(self) -> None:
        """Create the share. An existing share is reused."""
        try:
            _ = await self._share.create_share()
        except ResourceExistsError:
            logger.warning("Share '%s' already exists", self._params.container)
            return
        except AzureError as e:
            msg = f"Failed to create share '{self._params.container}'"
            raise storage_error(msg, e) from e
        logger.info("Created share '%s'", self._params.container)

    async def delete_container(self) -> None:
        try:
            await self._share.delete_share()
        except AzureError as e:
            msg = f"Failed to delete share '{self._params.container}'"
            raise storage_error(msg, e) from e
        logger.info("Deleted share '%s'", self._params.container)

    async def upload(
        self,
        name: str,
        data: bytes,
        content_type: str | None = None,
    ) -> ObjectHandle:
        """Create the file with its full length and upload the content."""
        file = self._file(name)
        try:
            _ = await file.upload_file(
                data,
                content_settings=ContentSettings(
                    content_type=content_type or self._params.content_type,
                ),
            )
        except AzureError as e:
            msg = f"Failed to upload file '{name}'"
            raise storage_error(msg, e) from e

        return ObjectHandle(container=self.handle, name=name, url=file.url)

    async def download(self, name: str) -> bytes:
        try:
            stream = await self._file(name).download_file()
            return await stream.readall()
        except AzureError as e:
            msg = f"Failed to download file '{name}'"
            raise storage_error(msg, e) from e

    async def delete(self, name: str) -> None:
        try:
            await self._file(name).delete_file()
        except AzureError as e:
            msg = f"Failed to delete file '{name}'"
            raise storage_error(msg, e) from e

    async def exists(self, name: str) -> bool:
        try:
            return await self._file(name).exists()
        except AzureError as e:
            msg = f"Failed to check file existence '{name}'"
            raise storage_error(msg, e) from e


Provider = AzureFilesProvider
