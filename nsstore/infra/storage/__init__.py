"""Object storage abstraction layer.

This module provides a protocol-based abstraction for the shared underlying
bucket, enabling support for S3, MinIO, and other S3-compatible services.
"""

from .client import (
    BucketNotFoundError,
    CredentialProvider,
    Credentials,
    ObjectListing,
    ObjectNotFoundError,
    StorageClient,
    StorageError,
)

__all__ = [
    "BucketNotFoundError",
    "CredentialProvider",
    "Credentials",
    "ObjectListing",
    "ObjectNotFoundError",
    "StorageClient",
    "StorageError",
]
