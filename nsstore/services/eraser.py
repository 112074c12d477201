from __future__ import annotations

import logging

from nsstore.infra.storage.client import StorageClient

logger = logging.getLogger(__name__)


class PrefixEraser:
    """Deletes every object under a key prefix, one listing page at a time.

    Pages are deleted sequentially. Each non-empty page removes at least one
    key, so the loop ends once the listing stops reporting truncation. A
    failure on any page propagates and leaves earlier pages deleted.
    """

    def __init__(self, storage: StorageClient, *, bucket: str) -> None:
        self._storage = storage
        self._bucket = bucket

    async def remove_objects(self, prefix: str) -> int:
        """Delete all objects under ``prefix`` and return how many were removed."""
        removed = 0
        while True:
            listing = await self._storage.list_objects(bucket=self._bucket, prefix=prefix)
            if not listing.keys:
                break

            await self._storage.delete_objects(
                bucket=self._bucket, object_keys=list(listing.keys)
            )
            removed += len(listing.keys)

            if not listing.truncated:
                break

        logger.info(
            "removed objects prefix=%s count=%s",
            prefix,
            removed,
            extra={"extra": {"bucket": self._bucket, "prefix": prefix, "removed": removed}},
        )
        return removed
