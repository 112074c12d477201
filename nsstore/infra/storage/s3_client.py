"""S3-compatible storage client implementation.

This module provides an S3-compatible storage client that works with
AWS S3, MinIO, and other S3-compatible object storage services.

boto3 is synchronous, so every call is dispatched to the threadpool.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from starlette.concurrency import run_in_threadpool

from nsstore.infra.storage.client import (
    BucketNotFoundError,
    Credentials,
    ObjectListing,
    ObjectNotFoundError,
    StorageError,
)

if TYPE_CHECKING:
    from nsstore.common.config import Settings

# S3 rejects DeleteObjects requests carrying more keys than this
MAX_DELETE_BATCH = 1000

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}
_SIGNABLE_OPERATIONS = {"GET": "get_object", "PUT": "put_object"}


def _error_details(exc: Exception) -> tuple[str | None, int | None]:
    """Extract the provider error code and HTTP status from a botocore error."""
    response = getattr(exc, "response", None)
    if not isinstance(response, dict):
        return None, None
    code = response.get("Error", {}).get("Code")
    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return (str(code) if code is not None else None), (
        int(status) if status is not None else None
    )


def _wrap(exc: Exception, action: str) -> StorageError:
    code, status = _error_details(exc)
    return StorageError(f"Failed to {action}: {exc}", code=code, status=status)


class S3StorageClient:
    """S3-compatible object storage client.

    Supports AWS S3, MinIO, and other S3-compatible services.
    Uses boto3 for all storage operations.
    """

    def __init__(self, *, settings: "Settings") -> None:
        """Initialize the S3 client with configuration from settings.

        Args:
            settings: Application settings containing S3 configuration.

        Raises:
            StorageError: If boto3 is not installed.
        """
        self._settings = settings
        self._client = self._build_client(settings)

    @staticmethod
    def _build_config(settings: "Settings") -> Any:
        from botocore.config import Config

        addressing_style = (settings.S3_ADDRESSING_STYLE or "path").strip().lower()
        # Dualstack stays off so traffic can use a VPC gateway endpoint
        return Config(
            signature_version="s3v4",
            s3={"addressing_style": addressing_style, "use_dualstack_endpoint": False},
        )

    @classmethod
    def _build_client(
        cls, settings: "Settings", credentials: Credentials | None = None
    ) -> Any:
        """Create a boto3 S3 client from settings.

        When ``credentials`` is omitted, explicit keys from settings are used
        and boto3 falls back to its default credential chain if they are unset.
        """
        try:
            import boto3
        except ImportError as exc:
            raise StorageError(
                "boto3 and botocore are required for S3 storage backend. "
                "Install with: pip install boto3"
            ) from exc

        if credentials is not None:
            auth = {
                "region_name": credentials.region,
                "aws_access_key_id": credentials.access_key_id,
                "aws_secret_access_key": credentials.secret_access_key,
                "aws_session_token": credentials.session_token,
            }
        else:
            auth = {
                "region_name": settings.AWS_REGION,
                "aws_access_key_id": settings.AWS_ACCESS_KEY_ID,
                "aws_secret_access_key": settings.AWS_SECRET_ACCESS_KEY,
                "aws_session_token": settings.AWS_SESSION_TOKEN,
            }

        return boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            use_ssl=bool(settings.S3_USE_SSL),
            config=cls._build_config(settings),
            **auth,
        )

    async def create_bucket(self, *, bucket: str) -> None:
        """Create a bucket in the configured region."""
        params: dict[str, Any] = {"Bucket": bucket}
        region = self._settings.AWS_REGION
        if region and region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            await run_in_threadpool(self._client.create_bucket, **params)
        except Exception as exc:
            raise _wrap(exc, "create bucket") from exc

    async def head_bucket(self, *, bucket: str) -> None:
        """Check that a bucket exists."""
        try:
            await run_in_threadpool(self._client.head_bucket, Bucket=bucket)
        except Exception as exc:
            code, status = _error_details(exc)
            if code in _NOT_FOUND_CODES or status == 404:
                raise BucketNotFoundError(
                    f"Bucket not found: {bucket}", code=code, status=status
                ) from exc
            raise _wrap(exc, "check bucket") from exc

    async def list_buckets(self) -> list[str]:
        """Return the names of all buckets visible to the client."""
        try:
            response = await run_in_threadpool(self._client.list_buckets)
        except Exception as exc:
            raise _wrap(exc, "list buckets") from exc

        return [str(b["Name"]) for b in response.get("Buckets", []) if b.get("Name")]

    async def put_object(self, *, bucket: str, object_key: str, body: bytes) -> None:
        """Write an object."""
        try:
            await run_in_threadpool(
                self._client.put_object, Bucket=bucket, Key=object_key, Body=body
            )
        except Exception as exc:
            raise _wrap(exc, "put object") from exc

    async def get_object(self, *, bucket: str, object_key: str) -> bytes:
        """Read the full content of an object."""

        def _read() -> bytes:
            response = self._client.get_object(Bucket=bucket, Key=object_key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()

        try:
            return await run_in_threadpool(_read)
        except Exception as exc:
            code, status = _error_details(exc)
            if code in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(
                    f"NoSuchKey: {object_key}", code=code, status=status
                ) from exc
            raise _wrap(exc, "get object") from exc

    async def delete_object(self, *, bucket: str, object_key: str) -> None:
        """Delete an object from storage."""
        try:
            await run_in_threadpool(
                self._client.delete_object, Bucket=bucket, Key=object_key
            )
        except Exception as exc:
            raise _wrap(exc, "delete object") from exc

    async def delete_objects(self, *, bucket: str, object_keys: Sequence[str]) -> None:
        """Delete objects in batches of at most ``MAX_DELETE_BATCH`` keys."""
        keys = list(object_keys)
        if not keys:
            raise StorageError("delete_objects requires at least one key")

        for start in range(0, len(keys), MAX_DELETE_BATCH):
            batch = keys[start : start + MAX_DELETE_BATCH]
            try:
                response = await run_in_threadpool(
                    self._client.delete_objects,
                    Bucket=bucket,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                )
            except Exception as exc:
                raise _wrap(exc, "delete objects") from exc

            errors = response.get("Errors") or []
            if errors:
                first = errors[0]
                raise StorageError(
                    f"Failed to delete {len(errors)} object(s): "
                    f"{first.get('Key')}: {first.get('Message') or first.get('Code')}",
                    code=first.get("Code"),
                )

    async def list_objects(self, *, bucket: str, prefix: str) -> ObjectListing:
        """List one page of keys under ``prefix``."""
        try:
            response = await run_in_threadpool(
                self._client.list_objects_v2, Bucket=bucket, Prefix=prefix
            )
        except Exception as exc:
            raise _wrap(exc, "list objects") from exc

        contents = response.get("Contents") or []
        return ObjectListing(
            keys=tuple(str(item["Key"]) for item in contents if item.get("Key")),
            truncated=bool(response.get("IsTruncated")),
        )

    async def sign_url(
        self,
        *,
        bucket: str,
        object_key: str,
        method: str,
        expires_in: int,
        credentials: Credentials,
    ) -> str:
        """Generate a presigned URL signed with ``credentials``."""
        operation = _SIGNABLE_OPERATIONS.get(method.upper())
        if operation is None:
            raise StorageError(f"Unsupported presign method: {method}")

        def _presign() -> str:
            # boto3 client construction is blocking
            signer = self._build_client(self._settings, credentials)
            return signer.generate_presigned_url(
                operation,
                Params={"Bucket": bucket, "Key": object_key},
                ExpiresIn=int(expires_in),
                HttpMethod=method.upper(),
            )

        try:
            url = await run_in_threadpool(_presign)
        except StorageError:
            raise
        except Exception as exc:
            raise _wrap(exc, "generate presigned URL") from exc

        if not url:
            raise StorageError("Generated presigned URL is empty")

        return str(url)
