"""Namespace lifecycle on top of the metadata document.

Namespaces are never hard-deleted: removal erases the namespace's objects and
then stamps its entry with ``deletedAt``. Creating the name again replaces the
entry with a fresh one.
"""

from __future__ import annotations

import logging

from nsstore.services.base import ConflictError, NotFoundError
from nsstore.services.eraser import PrefixEraser
from nsstore.services.metadata import (
    CREATED_AT,
    DELETED_AT,
    MetadataStore,
    MetaDocument,
    live_namespaces,
    name_in_use,
    namespace_exists,
    utc_timestamp,
)
from nsstore.services.naming import check_namespace, namespace_prefix

logger = logging.getLogger(__name__)


class NamespaceManager:
    def __init__(self, metadata: MetadataStore, eraser: PrefixEraser) -> None:
        self._metadata = metadata
        self._eraser = eraser

    async def make_namespace(self, name: str) -> None:
        """Create ``name``, reviving it if it was previously soft-deleted.

        Raises:
            InvalidNameError: If ``name`` is unsafe.
            ConflictError: If ``name`` is already live or is a reserved field
                of the metadata document.
        """
        check_namespace(name)

        def register(meta: MetaDocument) -> MetaDocument:
            if name_in_use(meta, name):
                raise ConflictError()
            meta[name] = {CREATED_AT: utc_timestamp()}
            return meta

        await self._metadata.update(register)
        logger.info("namespace created name=%s", name, extra={"extra": {"namespace": name}})

    async def remove_namespace(self, name: str) -> None:
        """Erase every object of ``name`` and soft-delete its entry.

        If erasing fails part-way the entry stays live, so the call can be
        retried.

        Raises:
            InvalidNameError: If ``name`` is unsafe.
            NotFoundError: If ``name`` is not live.
        """
        check_namespace(name)
        meta = await self._metadata.get_meta()
        if not namespace_exists(meta, name):
            raise NotFoundError()

        await self._eraser.remove_objects(namespace_prefix(name))

        def mark_deleted(current: MetaDocument) -> MetaDocument:
            entry = current.get(name)
            if not isinstance(entry, dict):
                entry = dict(meta[name])
            entry[DELETED_AT] = utc_timestamp()
            current[name] = entry
            return current

        await self._metadata.update(mark_deleted)
        logger.info("namespace removed name=%s", name, extra={"extra": {"namespace": name}})

    async def list_namespaces(self) -> list[str]:
        return live_namespaces(await self._metadata.get_meta())

    async def require_namespace(self, name: str) -> None:
        """Raise ``NotFoundError`` unless ``name`` is live."""
        meta = await self._metadata.get_meta()
        if not namespace_exists(meta, name):
            raise NotFoundError()
