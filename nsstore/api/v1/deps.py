from __future__ import annotations

import logging

from fastapi import Header, HTTPException, Request

from nsstore.common.config import get_settings
from nsstore.services.adapter import NamespacedStorageAdapter
from nsstore.services.factory import build_adapter
from nsstore.services.results import ErrorResult

logger = logging.getLogger("http")

DEFAULT_ERROR_STATUS = 500


def get_adapter(request: Request) -> NamespacedStorageAdapter:
    adapter = getattr(request.app.state, "adapter", None)
    if adapter is None:
        adapter = build_adapter(get_settings())
        request.app.state.adapter = adapter
    return adapter


def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
    settings = get_settings()
    if settings.API_KEY_ENABLED:
        api_key_expected = getattr(settings, "API_KEY", None)
        if not x_api_key or (api_key_expected and x_api_key != api_key_expected):
            preview = f"{x_api_key[:4]}***" if x_api_key else "<missing>"
            logger.warning("api_key_mismatch api_key_preview=%s", preview)
            raise HTTPException(status_code=401, detail="Invalid API key")


def raise_for_error(result: object) -> None:
    """Turn an adapter ``ErrorResult`` into an ``HTTPException``."""
    if isinstance(result, ErrorResult):
        raise HTTPException(
            status_code=result.status or DEFAULT_ERROR_STATUS,
            detail=result.msg,
        )
