"""Environment configuration using pydantic-settings."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from nvisy_storage.params import AzureCredentials, S3Credentials

_ENV_FILES = (".env", "../.env")


class AzureStorageSettings(BaseSettings):
    """Azure Storage account configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AZURE_STORAGE_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    account_name: str
    account_key: SecretStr
    blob_endpoint: str = "https://{account_name}.blob.core.windows.net"
    file_endpoint: str = "https://{account_name}.file.core.windows.net"

    def to_credentials(self) -> AzureCredentials:
        return AzureCredentials(
            account_name=self.account_name,
            account_key=self.account_key,
            blob_endpoint=self.blob_endpoint,
            file_endpoint=self.file_endpoint,
        )


class S3Settings(BaseSettings):
    """S3 / MinIO configuration."""

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    access_key_id: str
    secret_access_key: SecretStr
    region: str = "us-east-1"
    endpoint_url: str | None = None

    def to_credentials(self) -> S3Credentials:
        return S3Credentials(
            access_key_id=self.access_key_id,
            secret_access_key=self.secret_access_key,
            region=self.region,
            endpoint_url=self.endpoint_url,
        )
