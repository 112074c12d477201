from __future__ import annotations

from nsstore.common.config import Settings, get_settings
from nsstore.infra.storage.client import CredentialProvider, StorageClient
from nsstore.infra.storage.credentials import build_credential_provider
from nsstore.infra.storage.s3_client import S3StorageClient
from nsstore.services.adapter import NamespacedStorageAdapter
from nsstore.services.eraser import PrefixEraser
from nsstore.services.metadata import MetadataStore
from nsstore.services.namespaces import NamespaceManager
from nsstore.services.objects import ObjectGateway


def build_adapter(
    settings: Settings | None = None,
    *,
    storage_client: StorageClient | None = None,
    credential_provider: CredentialProvider | None = None,
) -> NamespacedStorageAdapter:
    """Wire the adapter's components around one shared bucket.

    The storage client and credential provider default to the boto3-backed
    implementations configured from ``settings``.
    """
    settings = settings or get_settings()
    storage = storage_client or S3StorageClient(settings=settings)
    credentials = credential_provider or build_credential_provider(settings)
    bucket = settings.namespaced_bucket

    metadata = MetadataStore(storage, bucket=bucket)
    namespaces = NamespaceManager(metadata, PrefixEraser(storage, bucket=bucket))
    objects = ObjectGateway(
        storage,
        namespaces,
        credentials,
        bucket=bucket,
        put_url_expires_in=settings.PUT_URL_EXPIRES_SECONDS,
        get_url_expires_in=settings.GET_URL_EXPIRES_SECONDS,
    )
    return NamespacedStorageAdapter(namespaces, objects)
