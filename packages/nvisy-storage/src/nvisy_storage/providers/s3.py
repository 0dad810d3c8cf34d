"""S3 provider using boto3."""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, ClassVar, Self

from nvisy_storage.datatypes import ContainerHandle, ObjectHandle, ObjectItem, Page
from nvisy_storage.errors import ErrorKind, StorageError
from nvisy_storage.pagination import Paginator, start
from nvisy_storage.params import ObjectParams, S3Credentials
from nvisy_storage.tokens import ContinuationToken

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

try:
    import boto3
    from botocore.exceptions import (
        BotoCoreError,
        ClientError,
        ConnectTimeoutError,
        EndpointConnectionError,
        ReadTimeoutError,
    )
except ImportError as e:
    _msg = "boto3 is required for S3 support. Install with: uv add 'nvisy-storage[s3]'"
    raise ImportError(_msg) from e

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchBucket", "NoSuchKey", "NotFound"})
_EXISTS_CODES = frozenset({"BucketAlreadyExists", "BucketAlreadyOwnedByYou"})


class S3Params(ObjectParams, frozen=True):
    """Parameters for S3 operations.

    `container` names the bucket. Inherits `prefix`, `batch_size` and
    `content_type` from ObjectParams. Object names are resolved under `prefix`.
    """


def _error(message: str, error: BotoCoreError | ClientError) -> StorageError:
    if isinstance(error, ClientError):
        code = error.response.get("Error", {}).get("Code", "Unknown")
        if code in _NOT_FOUND_CODES:
            kind = ErrorKind.NOT_FOUND
        elif code in _EXISTS_CODES:
            kind = ErrorKind.ALREADY_EXISTS
        else:
            kind = ErrorKind.PROVIDER
    elif isinstance(error, ConnectTimeoutError | ReadTimeoutError):
        kind = ErrorKind.TIMEOUT
    elif isinstance(error, EndpointConnectionError):
        kind = ErrorKind.CONNECTION
    else:
        kind = ErrorKind.PROVIDER
    return StorageError(f"{message}: {error}", kind=kind, source=error)


def _to_item(obj: dict[str, Any]) -> ObjectItem:
    return ObjectItem(
        name=obj["Key"],
        size=obj.get("Size"),
        etag=obj.get("ETag"),
        last_modified=obj.get("LastModified"),
    )


class S3Provider:
    """S3 provider bound to a single bucket.

    boto3 is synchronous, so every call runs in a worker thread.
    """

    __slots__: ClassVar[tuple[str, str]] = ("_client", "_params")

    _client: "S3Client"
    _params: S3Params

    def __init__(self, client: "S3Client", params: S3Params) -> None:
        self._client = client
        self._params = params

    @classmethod
    async def connect(cls, credentials: S3Credentials, params: S3Params) -> Self:
        """Create S3 client."""
        try:
            client: S3Client = boto3.client(  # pyright: ignore[reportUnknownMemberType]
                "s3",
                aws_access_key_id=credentials.access_key_id,
                aws_secret_access_key=credentials.secret_access_key.get_secret_value(),
                region_name=credentials.region,
                endpoint_url=credentials.endpoint_url,
            )
        except (BotoCoreError, ValueError) as e:
            msg = f"Failed to connect to S3: {e}"
            raise StorageError(msg, kind=ErrorKind.CONNECTION, source=e) from e

        return cls(client, params)

    async def disconnect(self) -> None:
        """Close the S3 client's connection pool."""
        self._client.close()

    @property
    def handle(self) -> ContainerHandle:
        bucket = self._params.container
        return ContainerHandle(name=bucket, url=f"s3://{bucket}")

    async def fetch_page(self, token: ContinuationToken) -> Page[ObjectItem]:
        """List one page of keys using ListObjectsV2 continuation tokens."""
        request: dict[str, Any] = {"Bucket": self._params.container}
        if self._params.prefix:
            request["Prefix"] = self._params.prefix
        if self._params.batch_size:
            request["MaxKeys"] = self._params.batch_size
        if token.value:
            request["ContinuationToken"] = token.value

        try:
            response = await asyncio.to_thread(self._client.list_objects_v2, **request)
        except (BotoCoreError, ClientError) as e:
            msg = f"Failed to list objects in '{self._params.container}'"
            raise _error(msg, e) from e

        next_marker = response.get("NextContinuationToken") if response.get("IsTruncated") else None
        return Page[ObjectItem](
            items=[_to_item(obj) for obj in response.get("Contents", [])],
            token=token,
            next_token=ContinuationToken.from_marker(next_marker),
        )

    def list_items(
        self,
        token: ContinuationToken | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Paginator[ObjectItem]:
        """Enumerate the bucket's keys lazily."""
        return start(self, token, cancel=cancel)

    async def create_container(self) -> None:
        request: dict[str, Any] = {"Bucket": self._params.container}
        region = self._client.meta.region_name
        if region and region != "us-east-1":
            request["CreateBucketConfiguration"] = {"LocationConstraint": region}
        try:
            _ = await asyncio.to_thread(self._client.create_bucket, **request)
        except (BotoCoreError, ClientError) as e:
            msg = f"Failed to create bucket '{self._params.container}'"
            raise _error(msg, e) from e
        logger.info("Created bucket '%s'", self._params.container)

    async def delete_container(self) -> None:
        try:
            _ = await asyncio.to_thread(self._client.delete_bucket, Bucket=self._params.container)
        except (BotoCoreError, ClientError) as e:
            msg = f"Failed to delete bucket '{self._params.container}'"
            raise _error(msg, e) from e
        logger.info("Deleted bucket '%s'", self._params.container)

    async def upload(
        self,
        name: str,
        data: bytes,
        content_type: str | None = None,
    ) -> ObjectHandle:
        key = self._resolve_key(name)
        try:
            _ = await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._params.container,
                Key=key,
                Body=data,
                ContentType=content_type or self._params.content_type,
            )
        except (BotoCoreError, ClientError) as e:
            msg = f"Failed to put object '{name}'"
            raise _error(msg, e) from e

        container = self.handle
        return ObjectHandle(container=container, name=key, url=f"{container.url}/{key}")

    async def download(self, name: str) -> bytes:
        try:
            response = await asyncio.to_thread(
                self._client.get_object,
                Bucket=self._params.container,
                Key=self._resolve_key(name),
            )
            return await asyncio.to_thread(response["Body"].read)
        except (BotoCoreError, ClientError) as e:
            msg = f"Failed to get object '{name}'"
            raise _error(msg, e) from e

    async def delete(self, name: str) -> None:
        try:
            _ = await asyncio.to_thread(
                self._client.delete_object,
                Bucket=self._params.container,
                Key=self._resolve_key(name),
            )
        except (BotoCoreError, ClientError) as e:
            msg = f"Failed to remove object '{name}'"
            raise _error(msg, e) from e

    async def exists(self, name: str) -> bool:
        try:
            _ = await asyncio.to_thread(
                self._client.head_object,
                Bucket=self._params.container,
                Key=self._resolve_key(name),
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in _NOT_FOUND_CODES:
                return False
            msg = f"Failed to check object existence '{name}'"
            raise _error(msg, e) from e
        except BotoCoreError as e:
            msg = f"Failed to check object existence '{name}'"
            raise _error(msg, e) from e
        else:
            return True

    def _resolve_key(self, key: str) -> str:
        """Resolve key with prefix if needed."""
        if self._params.prefix and not key.startswith(self._params.prefix):
            return f"{self._params.prefix}{key}"
        return key


Provider = S3Provider
