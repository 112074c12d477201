from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

MAX_BUCKET_PREFIX_LENGTH = 32


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    BUCKET_PREFIX: str = "local"
    BUCKET_NAME_PREFIX: str = "hyper-storage-namespaced"
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None
    AWS_SESSION_TOKEN: str | None = None
    AWS_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: str | None = None
    S3_ADDRESSING_STYLE: str = "path"
    S3_USE_SSL: bool = True
    PUT_URL_EXPIRES_SECONDS: int = 60 * 5
    GET_URL_EXPIRES_SECONDS: int = 60 * 60
    ENABLE_METRICS: bool = True
    API_KEY_ENABLED: bool = False
    API_KEY: str | None = None
    CORS_ENABLED: bool = False
    CORS_ORIGINS: list[str] = field(default_factory=list)
    TRACE_HTTP: bool = False

    def __post_init__(self) -> None:
        if not self.BUCKET_PREFIX or len(self.BUCKET_PREFIX) > MAX_BUCKET_PREFIX_LENGTH:
            raise ValueError(
                "BUCKET_PREFIX must be a string of 1-32 alphanumeric characters."
            )
        if self.PUT_URL_EXPIRES_SECONDS <= 0 or self.GET_URL_EXPIRES_SECONDS <= 0:
            raise ValueError("Signed URL expirations must be positive.")

    @property
    def namespaced_bucket(self) -> str:
        """Name of the single underlying bucket shared by every namespace."""
        return f"{self.BUCKET_NAME_PREFIX}-{self.BUCKET_PREFIX}"

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            BUCKET_PREFIX=os.environ.get("BUCKET_PREFIX", cls.BUCKET_PREFIX),
            BUCKET_NAME_PREFIX=os.environ.get(
                "BUCKET_NAME_PREFIX", cls.BUCKET_NAME_PREFIX
            ),
            AWS_ACCESS_KEY_ID=os.environ.get("AWS_ACCESS_KEY_ID"),
            AWS_SECRET_ACCESS_KEY=os.environ.get("AWS_SECRET_ACCESS_KEY"),
            AWS_SESSION_TOKEN=os.environ.get("AWS_SESSION_TOKEN"),
            AWS_REGION=os.environ.get("AWS_REGION", cls.AWS_REGION),
            S3_ENDPOINT_URL=os.environ.get("S3_ENDPOINT_URL"),
            S3_ADDRESSING_STYLE=os.environ.get(
                "S3_ADDRESSING_STYLE", cls.S3_ADDRESSING_STYLE
            ),
            S3_USE_SSL=_as_bool(os.environ.get("S3_USE_SSL"), cls.S3_USE_SSL),
            PUT_URL_EXPIRES_SECONDS=int(
                os.environ.get("PUT_URL_EXPIRES_SECONDS", cls.PUT_URL_EXPIRES_SECONDS)
            ),
            GET_URL_EXPIRES_SECONDS=int(
                os.environ.get("GET_URL_EXPIRES_SECONDS", cls.GET_URL_EXPIRES_SECONDS)
            ),
            ENABLE_METRICS=_as_bool(
                os.environ.get("ENABLE_METRICS"), cls.ENABLE_METRICS
            ),
            API_KEY_ENABLED=_as_bool(
                os.environ.get("API_KEY_ENABLED"), cls.API_KEY_ENABLED
            ),
            API_KEY=os.environ.get("API_KEY"),
            CORS_ENABLED=_as_bool(os.environ.get("CORS_ENABLED"), cls.CORS_ENABLED),
            CORS_ORIGINS=_as_list(os.environ.get("CORS_ORIGINS")),
            TRACE_HTTP=_as_bool(os.environ.get("TRACE_HTTP"), cls.TRACE_HTTP),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
