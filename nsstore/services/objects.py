"""Object transfer scoped to a namespace.

Each transfer can be made inline, with the adapter moving the bytes, or via a
presigned URL that the caller uses directly against the storage provider.
Presigned URLs are issued without checking whether the target object exists.
"""

from __future__ import annotations

import inspect
from typing import Any

from starlette.concurrency import run_in_threadpool

from nsstore.infra.storage.client import CredentialProvider, StorageClient, StorageError
from nsstore.services.base import InvalidPayloadError, NotFoundError
from nsstore.services.metadata import is_missing_key
from nsstore.services.namespaces import NamespaceManager
from nsstore.services.naming import check_name, check_namespace, join_key

DEFAULT_PUT_URL_EXPIRES_SECONDS = 60 * 5
DEFAULT_GET_URL_EXPIRES_SECONDS = 60 * 60


def _chunk_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk)
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    raise InvalidPayloadError(f"unsupported chunk type: {type(chunk).__name__}")


async def read_all(payload: Any) -> bytes:
    """Buffer ``payload`` fully into memory.

    Accepts bytes-like values, ``str`` (UTF-8 encoded), file-like objects with
    a sync or async ``read``, and sync or async iterables of byte (or text)
    chunks. Any other chunk type is rejected.
    """
    if payload is None:
        raise InvalidPayloadError()
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode("utf-8")

    read = getattr(payload, "read", None)
    if callable(read):
        if inspect.iscoroutinefunction(read):
            data = await read()
        else:
            data = await run_in_threadpool(read)
        return _chunk_bytes(data)

    if hasattr(payload, "__aiter__"):
        return b"".join([_chunk_bytes(chunk) async for chunk in payload])
    if hasattr(payload, "__iter__"):
        return b"".join(_chunk_bytes(chunk) for chunk in payload)

    raise InvalidPayloadError(f"unsupported payload type: {type(payload).__name__}")


class ObjectGateway:
    def __init__(
        self,
        storage: StorageClient,
        namespaces: NamespaceManager,
        credentials: CredentialProvider,
        *,
        bucket: str,
        put_url_expires_in: int = DEFAULT_PUT_URL_EXPIRES_SECONDS,
        get_url_expires_in: int = DEFAULT_GET_URL_EXPIRES_SECONDS,
    ) -> None:
        self._storage = storage
        self._namespaces = namespaces
        self._credentials = credentials
        self._bucket = bucket
        self._put_url_expires_in = put_url_expires_in
        self._get_url_expires_in = get_url_expires_in

    async def _resolve(self, namespace: str, key: str) -> str:
        check_namespace(namespace)
        check_name(key)
        await self._namespaces.require_namespace(namespace)
        return join_key(namespace, key)

    async def _sign(self, object_key: str, method: str, expires_in: int) -> str:
        credentials = await self._credentials.get_credentials()
        return await self._storage.sign_url(
            bucket=self._bucket,
            object_key=object_key,
            method=method,
            expires_in=expires_in,
            credentials=credentials,
        )

    async def put_object(
        self, namespace: str, key: str, payload: Any = None, *, use_signed_url: bool = False
    ) -> str | None:
        """Upload ``payload``, or return a presigned PUT URL when ``use_signed_url``."""
        object_key = await self._resolve(namespace, key)
        if use_signed_url:
            return await self._sign(object_key, "PUT", self._put_url_expires_in)

        body = await read_all(payload)
        await self._storage.put_object(bucket=self._bucket, object_key=object_key, body=body)
        return None

    async def get_object(
        self, namespace: str, key: str, *, use_signed_url: bool = False
    ) -> bytes | str:
        """Return the object's bytes, or a presigned GET URL when ``use_signed_url``.

        Raises:
            NotFoundError: If the object does not exist (inline mode only).
        """
        object_key = await self._resolve(namespace, key)
        if use_signed_url:
            return await self._sign(object_key, "GET", self._get_url_expires_in)

        try:
            return await self._storage.get_object(bucket=self._bucket, object_key=object_key)
        except StorageError as exc:
            if not is_missing_key(exc):
                raise
            raise NotFoundError("object not found") from exc

    async def remove_object(self, namespace: str, key: str) -> None:
        object_key = await self._resolve(namespace, key)
        await self._storage.delete_object(bucket=self._bucket, object_key=object_key)

    async def list_objects(self, namespace: str, prefix: str = "") -> list[str]:
        """Keys under ``prefix`` from the first listing page only.

        Truncated listings are not followed, so very large namespaces return an
        incomplete result.
        """
        object_prefix = await self._resolve(namespace, prefix)
        listing = await self._storage.list_objects(bucket=self._bucket, prefix=object_prefix)
        return list(listing.keys)
