"""In-memory fakes of the storage client and credential provider."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Sequence

from nsstore.infra.storage.client import (
    BucketNotFoundError,
    Credentials,
    ObjectListing,
    ObjectNotFoundError,
)
from nsstore.services.metadata import META_KEY

EXISTING_NAMESPACE = "foo"

FAKE_CREDENTIALS = Credentials(
    access_key_id="foo",
    secret_access_key="secret",
    session_token="token",
    region="us-east-1",
)


@dataclass
class FakeStorageClient:
    """In-memory mock of StorageClient for testing.

    ``failures`` maps an operation name to the exception it raises;
    ``key_failures`` does the same for ``get_object``/``put_object`` on a
    specific key. ``call_failures`` maps ``(operation, n)`` to the exception
    raised by the n-th call (1-based) of that operation. ``pages`` scripts
    the listings returned by ``list_objects`` before it falls back to the
    stored objects.
    """

    buckets: set[str] = field(default_factory=set)
    objects: dict[str, bytes] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    failures: dict[str, Exception] = field(default_factory=dict)
    key_failures: dict[str, Exception] = field(default_factory=dict)
    call_failures: dict[tuple[str, int], Exception] = field(default_factory=dict)
    pages: list[ObjectListing] = field(default_factory=list)
    page_size: int | None = None

    def _record(self, operation: str, **kwargs: Any) -> None:
        self.calls.append((operation, kwargs))
        if operation in self.failures:
            raise self.failures[operation]
        attempt = (operation, len(self.calls_to(operation)))
        if attempt in self.call_failures:
            raise self.call_failures[attempt]
        key = kwargs.get("object_key")
        if key is not None and key in self.key_failures and operation in (
            "get_object",
            "put_object",
        ):
            raise self.key_failures[key]

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    async def create_bucket(self, *, bucket: str) -> None:
        self._record("create_bucket", bucket=bucket)
        self.buckets.add(bucket)

    async def head_bucket(self, *, bucket: str) -> None:
        self._record("head_bucket", bucket=bucket)
        if bucket not in self.buckets:
            raise BucketNotFoundError(f"Bucket not found: {bucket}", code="404", status=404)

    async def list_buckets(self) -> list[str]:
        self._record("list_buckets")
        return sorted(self.buckets)

    async def put_object(self, *, bucket: str, object_key: str, body: bytes) -> None:
        self._record("put_object", bucket=bucket, object_key=object_key, body=body)
        self.objects[object_key] = body

    async def get_object(self, *, bucket: str, object_key: str) -> bytes:
        self._record("get_object", bucket=bucket, object_key=object_key)
        if object_key not in self.objects:
            raise ObjectNotFoundError(f"NoSuchKey: {object_key}", code="NoSuchKey", status=404)
        return self.objects[object_key]

    async def delete_object(self, *, bucket: str, object_key: str) -> None:
        self._record("delete_object", bucket=bucket, object_key=object_key)
        self.objects.pop(object_key, None)

    async def delete_objects(self, *, bucket: str, object_keys: Sequence[str]) -> None:
        self._record("delete_objects", bucket=bucket, object_keys=list(object_keys))
        for key in object_keys:
            self.objects.pop(key, None)

    async def list_objects(self, *, bucket: str, prefix: str) -> ObjectListing:
        self._record("list_objects", bucket=bucket, prefix=prefix)
        if self.pages:
            return self.pages.pop(0)
        keys = sorted(k for k in self.objects if k.startswith(prefix))
        if self.page_size is not None and len(keys) > self.page_size:
            return ObjectListing(keys=tuple(keys[: self.page_size]), truncated=True)
        return ObjectListing(keys=tuple(keys), truncated=False)

    async def sign_url(
        self,
        *,
        bucket: str,
        object_key: str,
        method: str,
        expires_in: int,
        credentials: Credentials,
    ) -> str:
        self._record(
            "sign_url",
            bucket=bucket,
            object_key=object_key,
            method=method,
            expires_in=expires_in,
            credentials=credentials,
        )
        return f"https://signed.example/{bucket}/{object_key}?method={method}&expires={expires_in}"


@dataclass
class FakeCredentialProvider:
    credentials: Credentials = FAKE_CREDENTIALS
    calls: int = 0
    failure: Exception | None = None

    async def get_credentials(self) -> Credentials:
        self.calls += 1
        if self.failure is not None:
            raise self.failure
        return self.credentials


def read_meta(storage: FakeStorageClient) -> dict:
    return json.loads(storage.objects[META_KEY].decode("utf-8"))
