"""Pydantic schemas for the storage API endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class OkOut(BaseModel):
    """Acknowledgement for operations without a payload."""

    ok: bool = True


class BucketsOut(OkOut):
    buckets: list[str] = Field(default_factory=list)


class ObjectsOut(OkOut):
    objects: list[str] = Field(default_factory=list)


class SignedUrlOut(OkOut):
    """Presigned URL the caller uses directly against the storage provider."""

    url: str
