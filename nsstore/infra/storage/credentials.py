"""Credential providers used for URL signing.

Explicit keys from settings win when key, secret and region are all set;
otherwise credentials come from boto3's default chain (environment, shared
config, container/instance metadata), re-resolved on every call so rotated
credentials are picked up.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.concurrency import run_in_threadpool

from nsstore.infra.storage.client import CredentialProvider, Credentials, StorageError

if TYPE_CHECKING:
    from nsstore.common.config import Settings

DEFAULT_REGION = "us-east-1"


class StaticCredentialProvider:
    """Serves a fixed set of credentials."""

    def __init__(self, credentials: Credentials) -> None:
        self._credentials = credentials

    async def get_credentials(self) -> Credentials:
        return self._credentials


class DefaultCredentialProvider:
    """Resolves credentials through boto3's default provider chain."""

    def __init__(self, *, region: str | None = None, session=None) -> None:
        self._region = region
        self._session = session

    def _resolve(self) -> Credentials:
        session = self._session
        if session is None:
            import boto3

            session = boto3.session.Session()

        resolved = session.get_credentials()
        if resolved is None:
            raise StorageError(
                "NoCredentialsError: unable to locate AWS credentials",
                code="NoCredentialsError",
            )
        frozen = resolved.get_frozen_credentials()
        return Credentials(
            access_key_id=frozen.access_key,
            secret_access_key=frozen.secret_key,
            session_token=frozen.token,
            region=self._region or session.region_name or DEFAULT_REGION,
        )

    async def get_credentials(self) -> Credentials:
        return await run_in_threadpool(self._resolve)


def build_credential_provider(settings: "Settings") -> CredentialProvider:
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY and settings.AWS_REGION:
        return StaticCredentialProvider(
            Credentials(
                access_key_id=settings.AWS_ACCESS_KEY_ID,
                secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                session_token=settings.AWS_SESSION_TOKEN,
                region=settings.AWS_REGION,
            )
        )
    return DefaultCredentialProvider(region=settings.AWS_REGION)
