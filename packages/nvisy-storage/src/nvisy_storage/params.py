"""Credential and parameter types shared by storage providers.

Credentials identify the account, params define how a provider operates
(which container, prefix, page size). Runtime listing state lives in
`ContinuationToken`, not here.
"""

from pydantic import BaseModel, Field, SecretStr


class AzureCredentials(BaseModel, frozen=True):
    """Shared-key credentials for an Azure Storage account."""

    account_name: str
    account_key: SecretStr

    blob_endpoint: str = "https://{account_name}.blob.core.windows.net"
    """Blob service URL template. `{account_name}` is substituted."""

    file_endpoint: str = "https://{account_name}.file.core.windows.net"
    """File service URL template. `{account_name}` is substituted."""

    def blob_url(self) -> str:
        return self.blob_endpoint.format(account_name=self.account_name)

    def file_url(self) -> str:
        return self.file_endpoint.format(account_name=self.account_name)


class ObjectParams(BaseModel, frozen=True):
    """Common parameters for object storage operations."""

    container: str
    """Container name (Azure container, Azure file share, S3 bucket)."""

    prefix: str | None = None
    """Name prefix used to filter listings."""

    batch_size: int | None = Field(default=None, ge=1, le=5000)
    """Maximum items per listing page. None lets the service decide."""

    content_type: str = "application/octet-stream"
    """Default content type for uploaded objects."""


class S3Credentials(BaseModel, frozen=True):
    """Credentials for S3 connection."""

    access_key_id: str
    secret_access_key: SecretStr
    region: str = "us-east-1"
    endpoint_url: str | None = None
