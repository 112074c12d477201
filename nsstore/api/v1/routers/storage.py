"""Storage API router.

Exposes the namespaced adapter over HTTP: namespaces appear as buckets and
objects are addressed as ``/storage/{bucket}/{object path}``.
"""

from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Depends, Query, Request, Response, status

from nsstore.api.v1.deps import get_adapter, raise_for_error
from nsstore.api.v1.schemas.storage import (
    BucketsOut,
    ObjectsOut,
    OkOut,
    SignedUrlOut,
)
from nsstore.services.adapter import NamespacedStorageAdapter
from nsstore.services.results import ObjectResult, UrlResult

router = APIRouter()


@router.get(
    "/storage",
    response_model=BucketsOut,
    summary="List buckets",
    description="List every live namespace.",
)
async def list_buckets(
    adapter: NamespacedStorageAdapter = Depends(get_adapter),
) -> BucketsOut:
    result = await adapter.list_buckets()
    raise_for_error(result)
    return BucketsOut(buckets=result.buckets)


@router.put(
    "/storage/{bucket}",
    response_model=OkOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create bucket",
    description="Create a namespace, reviving it if it was previously removed.",
)
async def make_bucket(
    bucket: str,
    adapter: NamespacedStorageAdapter = Depends(get_adapter),
) -> OkOut:
    raise_for_error(await adapter.make_bucket(bucket))
    return OkOut()


@router.delete(
    "/storage/{bucket}",
    response_model=OkOut,
    summary="Remove bucket",
    description="Delete every object in the namespace and mark it removed.",
)
async def remove_bucket(
    bucket: str,
    adapter: NamespacedStorageAdapter = Depends(get_adapter),
) -> OkOut:
    raise_for_error(await adapter.remove_bucket(bucket))
    return OkOut()


@router.get(
    "/storage/{bucket}",
    response_model=ObjectsOut,
    summary="List objects",
    description="List object keys under a prefix (first page only).",
)
async def list_objects(
    bucket: str,
    prefix: str = Query(default=""),
    adapter: NamespacedStorageAdapter = Depends(get_adapter),
) -> ObjectsOut:
    result = await adapter.list_objects(bucket, prefix)
    raise_for_error(result)
    return ObjectsOut(objects=result.objects)


@router.put(
    "/storage/{bucket}/{object_key:path}",
    response_model=Union[SignedUrlOut, OkOut],
    status_code=status.HTTP_201_CREATED,
    summary="Upload object",
    description=(
        "Upload the raw request body, or return a presigned PUT URL when"
        " `useSignedUrl=true`."
    ),
)
async def put_object(
    request: Request,
    bucket: str,
    object_key: str,
    use_signed_url: bool = Query(default=False, alias="useSignedUrl"),
    adapter: NamespacedStorageAdapter = Depends(get_adapter),
) -> OkOut | SignedUrlOut:
    payload = None if use_signed_url else request.stream()
    result = await adapter.put_object(
        bucket, object_key, payload, use_signed_url=use_signed_url
    )
    raise_for_error(result)
    if isinstance(result, UrlResult):
        return SignedUrlOut(url=result.url)
    return OkOut()


@router.get(
    "/storage/{bucket}/{object_key:path}",
    summary="Download object",
    description=(
        "Return the object's bytes, or a presigned GET URL when"
        " `useSignedUrl=true`."
    ),
    responses={200: {"content": {"application/octet-stream": {}}}},
)
async def get_object(
    bucket: str,
    object_key: str,
    use_signed_url: bool = Query(default=False, alias="useSignedUrl"),
    adapter: NamespacedStorageAdapter = Depends(get_adapter),
):
    result = await adapter.get_object(bucket, object_key, use_signed_url=use_signed_url)
    raise_for_error(result)
    if isinstance(result, ObjectResult):
        return Response(content=result.body, media_type="application/octet-stream")
    return SignedUrlOut(url=result.url)


@router.delete(
    "/storage/{bucket}/{object_key:path}",
    response_model=OkOut,
    summary="Remove object",
)
async def remove_object(
    bucket: str,
    object_key: str,
    adapter: NamespacedStorageAdapter = Depends(get_adapter),
) -> OkOut:
    raise_for_error(await adapter.remove_object(bucket, object_key))
    return OkOut()
