"""Public storage port.

``NamespacedStorageAdapter`` presents namespaces as buckets. Every operation
returns a result value; failures of any kind come back as ``ErrorResult``
instead of propagating to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, TypeVar

from nsstore.infra.observability.metrics import STORAGE_OPERATIONS
from nsstore.services.base import ServiceError
from nsstore.services.errors import normalize_error
from nsstore.services.namespaces import NamespaceManager
from nsstore.services.objects import ObjectGateway
from nsstore.services.results import (
    BucketsResult,
    ErrorResult,
    ObjectResult,
    ObjectsResult,
    OkResult,
    UrlResult,
)

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class NamespacedStorageAdapter:
    def __init__(self, namespaces: NamespaceManager, objects: ObjectGateway) -> None:
        self._namespaces = namespaces
        self._objects = objects

    async def _run(
        self, operation: str, call: Callable[[], Awaitable[ResultT]]
    ) -> ResultT | ErrorResult:
        try:
            result = await call()
        except Exception as exc:
            error = normalize_error(exc)
            expected = isinstance(exc, ServiceError)
            STORAGE_OPERATIONS.labels(operation, "rejected" if expected else "failed").inc()
            logger.log(
                logging.INFO if expected else logging.WARNING,
                "storage operation failed operation=%s status=%s msg=%s",
                operation,
                error.status,
                error.msg,
                exc_info=not expected,
                extra={
                    "extra": {
                        "operation": operation,
                        "status": error.status,
                        "msg": error.msg,
                    }
                },
            )
            return error
        STORAGE_OPERATIONS.labels(operation, "ok").inc()
        return result

    async def make_bucket(self, name: str) -> OkResult | ErrorResult:
        async def call() -> OkResult:
            await self._namespaces.make_namespace(name)
            return OkResult()

        return await self._run("make_bucket", call)

    async def remove_bucket(self, name: str) -> OkResult | ErrorResult:
        async def call() -> OkResult:
            await self._namespaces.remove_namespace(name)
            return OkResult()

        return await self._run("remove_bucket", call)

    async def list_buckets(self) -> BucketsResult | ErrorResult:
        async def call() -> BucketsResult:
            return BucketsResult(buckets=await self._namespaces.list_namespaces())

        return await self._run("list_buckets", call)

    async def put_object(
        self,
        bucket: str,
        object: str,
        payload: Any = None,
        *,
        use_signed_url: bool = False,
    ) -> OkResult | UrlResult | ErrorResult:
        async def call() -> OkResult | UrlResult:
            url = await self._objects.put_object(
                bucket, object, payload, use_signed_url=use_signed_url
            )
            return UrlResult(url=url) if url is not None else OkResult()

        return await self._run("put_object", call)

    async def get_object(
        self, bucket: str, object: str, *, use_signed_url: bool = False
    ) -> ObjectResult | UrlResult | ErrorResult:
        async def call() -> ObjectResult | UrlResult:
            value = await self._objects.get_object(
                bucket, object, use_signed_url=use_signed_url
            )
            if isinstance(value, str):
                return UrlResult(url=value)
            return ObjectResult(body=value)

        return await self._run("get_object", call)

    async def remove_object(self, bucket: str, object: str) -> OkResult | ErrorResult:
        async def call() -> OkResult:
            await self._objects.remove_object(bucket, object)
            return OkResult()

        return await self._run("remove_object", call)

    async def list_objects(
        self, bucket: str, prefix: str = ""
    ) -> ObjectsResult | ErrorResult:
        async def call() -> ObjectsResult:
            return ObjectsResult(objects=await self._objects.list_objects(bucket, prefix))

        return await self._run("list_objects", call)
