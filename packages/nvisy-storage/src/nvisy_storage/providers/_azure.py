"""Error translation shared by the Azure providers."""

from nvisy_storage.errors import ErrorKind, StorageError

try:
    from azure.core.exceptions import (
        AzureError,
        ClientAuthenticationError,
        ResourceExistsError,
        ResourceNotFoundError,
        ServiceRequestError,
        ServiceRequestTimeoutError,
        ServiceResponseTimeoutError,
    )
except ImportError as e:
    _msg = "azure-core is required for Azure support. Install with: uv add 'nvisy-storage[azure]'"
    raise ImportError(_msg) from e


def error_kind(error: AzureError) -> ErrorKind:
    """Classify an Azure SDK exception."""
    match error:
        case ResourceNotFoundError():
            return ErrorKind.NOT_FOUND
        case ResourceExistsError():
            return ErrorKind.ALREADY_EXISTS
        case ServiceRequestTimeoutError() | ServiceResponseTimeoutError():
            return ErrorKind.TIMEOUT
        case ClientAuthenticationError() | ServiceRequestError():
            return ErrorKind.CONNECTION
        case _:
            return ErrorKind.PROVIDER


def storage_error(message: str, error: AzureError) -> StorageError:
    """Wrap an Azure SDK exception, appending its description to `message`."""
    return StorageError(f"{message}: {error}", kind=error_kind(error), source=error)
