"""Result values returned by the adapter's public operations."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class OkResult:
    ok: bool = field(default=True, init=False)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ErrorResult:
    msg: str
    status: int | None = None
    ok: bool = field(default=False, init=False)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"ok": self.ok, "msg": self.msg}
        if self.status is not None:
            payload["status"] = self.status
        return payload


@dataclass(frozen=True, slots=True)
class BucketsResult(OkResult):
    buckets: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ObjectsResult(OkResult):
    objects: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class UrlResult(OkResult):
    url: str = ""


@dataclass(frozen=True, slots=True)
class ObjectResult(OkResult):
    body: bytes = b""
