"""Metadata document bookkeeping.

The shared bucket holds a single JSON document, ``meta.json``, recording
which namespaces exist::

    {
        "createdAt": "2024-01-01T00:00:00.000Z",
        "movies": {"createdAt": "2024-01-02T00:00:00.000Z"},
        "old": {"createdAt": "...", "deletedAt": "..."}
    }

An entry carrying ``deletedAt`` is soft-deleted and treated as nonexistent.

The underlying store has no conditional writes, so the document is read,
modified and overwritten as a whole. Mutations made through one
``MetadataStore`` are serialized by an ``asyncio.Lock``; writers in other
processes sharing the same bucket can still overwrite each other (last
write wins).
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from nsstore.infra.storage.client import (
    BucketNotFoundError,
    ObjectNotFoundError,
    StorageClient,
    StorageError,
)

logger = logging.getLogger(__name__)

META_KEY = "meta.json"
CREATED_AT = "createdAt"
DELETED_AT = "deletedAt"
NO_SUCH_KEY = "NoSuchKey"

MetaDocument = dict[str, Any]


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def namespace_exists(meta: MetaDocument, name: str) -> bool:
    entry = meta.get(name)
    if not isinstance(entry, dict):
        return False
    return DELETED_AT not in entry


def name_in_use(meta: MetaDocument, name: str) -> bool:
    """True when ``name`` is a live entry or a reserved document field."""
    if name not in meta:
        return False
    entry = meta[name]
    if isinstance(entry, dict):
        return DELETED_AT not in entry
    return True


def live_namespaces(meta: MetaDocument) -> list[str]:
    return [
        name
        for name, entry in meta.items()
        if name != CREATED_AT and isinstance(entry, dict) and DELETED_AT not in entry
    ]


def is_missing_key(exc: StorageError) -> bool:
    return isinstance(exc, ObjectNotFoundError) or NO_SUCH_KEY in str(exc)


class MetadataStore:
    """Owns every read and write of the metadata document."""

    def __init__(self, storage: StorageClient, *, bucket: str) -> None:
        self._storage = storage
        self._bucket = bucket
        self._lock = asyncio.Lock()

    @property
    def bucket(self) -> str:
        return self._bucket

    async def find_or_create_bucket(self) -> None:
        try:
            await self._storage.head_bucket(bucket=self._bucket)
        except BucketNotFoundError:
            logger.info(
                "creating shared bucket bucket=%s",
                self._bucket,
                extra={"extra": {"bucket": self._bucket}},
            )
            await self._storage.create_bucket(bucket=self._bucket)

    async def get_meta(self) -> MetaDocument:
        """Load the metadata document, creating it on first access."""
        await self.find_or_create_bucket()
        try:
            raw = await self._storage.get_object(bucket=self._bucket, object_key=META_KEY)
        except StorageError as exc:
            if not is_missing_key(exc):
                raise
            meta: MetaDocument = {CREATED_AT: utc_timestamp()}
            await self.save_meta(meta)
            return meta

        try:
            meta = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise StorageError(f"Failed to decode {META_KEY}: {exc}") from exc
        if not isinstance(meta, dict):
            raise StorageError(f"Failed to decode {META_KEY}: expected a JSON object")
        return meta

    async def save_meta(self, meta: MetaDocument) -> None:
        body = json.dumps(meta).encode("utf-8")
        await self._storage.put_object(bucket=self._bucket, object_key=META_KEY, body=body)

    async def update(
        self, mutator: Callable[[MetaDocument], MetaDocument]
    ) -> MetaDocument:
        """Apply ``mutator`` to a fresh copy of the document and persist the result.

        Exceptions raised by ``mutator`` abort the update without writing.
        """
        async with self._lock:
            meta = await self.get_meta()
            updated = mutator(meta)
            await self.save_meta(updated)
            return updated
