from __future__ import annotations

import json
import os

import pytest

os.environ.setdefault("BUCKET_PREFIX", "test")
os.environ.setdefault("ENABLE_METRICS", "true")
os.environ.setdefault("API_KEY_ENABLED", "false")

from nsstore.common.config import Settings, get_settings  # noqa: E402
from nsstore.services.factory import build_adapter  # noqa: E402
from nsstore.services.metadata import META_KEY  # noqa: E402

from tests.fakes import (  # noqa: E402
    EXISTING_NAMESPACE,
    FakeCredentialProvider,
    FakeStorageClient,
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture
def settings() -> Settings:
    return Settings(BUCKET_PREFIX="test")


@pytest.fixture
def bucket(settings: Settings) -> str:
    return settings.namespaced_bucket


@pytest.fixture
def storage(bucket: str) -> FakeStorageClient:
    """Shared bucket holding a metadata document with one live namespace."""
    client = FakeStorageClient(buckets={bucket})
    client.objects[META_KEY] = json.dumps(
        {
            "createdAt": "2024-01-01T00:00:00.000Z",
            EXISTING_NAMESPACE: {"createdAt": "2024-01-01T00:00:00.000Z"},
        }
    ).encode("utf-8")
    return client


@pytest.fixture
def credentials() -> FakeCredentialProvider:
    return FakeCredentialProvider()


@pytest.fixture
def adapter(settings, storage, credentials):
    return build_adapter(
        settings, storage_client=storage, credential_provider=credentials
    )
