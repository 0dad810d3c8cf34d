"""Provider implementations for storage services.

Each provider module exports a `Provider` class alias for the main provider class,
along with its params type. Every provider is both an `ObjectStore` and a
`PageFetcher` bound to one container.

Available providers (require optional dependencies):
- azure_blob: Azure Blob Storage via azure-storage-blob
- azure_files: Azure Files via azure-storage-file-share
- s3: AWS S3 / MinIO via boto3
"""

from nvisy_storage.providers import azure_blob, azure_files, s3

__all__ = [
    "azure_blob",
    "azure_files",
    "s3",
]
