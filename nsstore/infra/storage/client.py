"""Storage client protocol and data types.

This module defines the abstract interface for the shared underlying bucket:
bucket bookkeeping, object get/put/delete, paginated listing and presigned
URLs. Every call is a coroutine so the adapter never blocks the event loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence


class StorageError(RuntimeError):
    """Raised when object storage operations fail.

    Attributes:
        message: Human-readable error message.
        code: Provider error code (e.g. ``NoSuchKey``), if one was reported.
        status: HTTP status reported by the provider, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


class BucketNotFoundError(StorageError):
    """Raised when the underlying bucket does not exist."""


class ObjectNotFoundError(StorageError):
    """Raised when a key does not exist in the underlying bucket."""


@dataclass(frozen=True, slots=True)
class ObjectListing:
    """One page of keys returned by a prefix listing."""

    keys: tuple[str, ...]
    truncated: bool = False


@dataclass(frozen=True, slots=True)
class Credentials:
    """Credentials used to sign URLs."""

    access_key_id: str
    secret_access_key: str
    region: str
    session_token: str | None = None


class CredentialProvider(Protocol):
    async def get_credentials(self) -> Credentials:
        ...


class StorageClient(Protocol):
    """Protocol defining the interface for object storage backends.

    Implementations must provide all methods defined here.
    Currently supports S3-compatible storage services.
    """

    async def create_bucket(self, *, bucket: str) -> None:
        """Create a bucket.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    async def head_bucket(self, *, bucket: str) -> None:
        """Check that a bucket exists.

        Raises:
            BucketNotFoundError: If the bucket does not exist.
            StorageError: If the operation fails for any other reason.
        """
        ...

    async def list_buckets(self) -> list[str]:
        """Return the names of all buckets visible to the client."""
        ...

    async def put_object(self, *, bucket: str, object_key: str, body: bytes) -> None:
        """Write ``body`` at ``object_key``, overwriting any previous value.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    async def get_object(self, *, bucket: str, object_key: str) -> bytes:
        """Read the full content of an object.

        Raises:
            ObjectNotFoundError: If the key does not exist.
            StorageError: If the operation fails for any other reason.
        """
        ...

    async def delete_object(self, *, bucket: str, object_key: str) -> None:
        """Delete an object. Deleting a missing key succeeds.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    async def delete_objects(self, *, bucket: str, object_keys: Sequence[str]) -> None:
        """Delete several objects in bulk.

        Args:
            bucket: Target bucket name.
            object_keys: Keys to delete. Must not be empty.

        Raises:
            StorageError: If the operation fails or any key could not be deleted.
        """
        ...

    async def list_objects(self, *, bucket: str, prefix: str) -> ObjectListing:
        """List a single page of keys starting with ``prefix``.

        Returns:
            ObjectListing with the page's keys and whether more pages remain.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    async def sign_url(
        self,
        *,
        bucket: str,
        object_key: str,
        method: str,
        expires_in: int,
        credentials: Credentials,
    ) -> str:
        """Generate a presigned URL for ``method`` (``GET`` or ``PUT``).

        Args:
            bucket: Target bucket name.
            object_key: Object key (path) in the bucket.
            method: HTTP method the URL is valid for.
            expires_in: URL expiration time in seconds.
            credentials: Credentials used to sign the URL.

        Returns:
            Presigned URL.

        Raises:
            StorageError: If URL generation fails.
        """
        ...
