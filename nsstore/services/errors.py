"""Translate failure values into a single error result shape.

Rules, in priority order:

1. a string is used as the message;
2. an object exposing ``message`` or ``msg`` (attribute or mapping key) uses it;
3. a list, tuple or set of sub-errors is flattened into one comma-joined message;
4. any other non-empty value is stringified;
5. nothing at all yields ``"An error occurred"``.

Provider credential failures (invalid, expired or mismatched keys and
signatures, unauthorized responses) replace the message with a fixed one and
a 500 status so operators see a distinct signal without raw provider text.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from nsstore.infra.observability.metrics import CREDENTIAL_FAILURES
from nsstore.services.results import ErrorResult

logger = logging.getLogger("nsstore.credentials")

DEFAULT_MESSAGE = "An error occurred"
CREDENTIALS_INVALID_MESSAGE = "AWS credentials are invalid"
CREDENTIALS_INVALID_STATUS = 500

CREDENTIAL_ERROR_TOKENS = (
    "InvalidAccessKeyId",
    "ExpiredToken",
    "SignatureDoesNotMatch",
    "InvalidToken",
    "InvalidClientTokenId",
    "UnrecognizedClientException",
    "TokenRefreshRequired",
    "AuthFailure",
    "NoCredentialsError",
    "Unable to locate credentials",
)
UNAUTHORIZED_STATUS = 401


def _field(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def error_message(value: Any) -> str:
    if isinstance(value, str):
        return value if value else DEFAULT_MESSAGE

    for name in ("message", "msg"):
        field_value = _field(value, name)
        if field_value:
            return field_value if isinstance(field_value, str) else error_message(field_value)

    if isinstance(value, (list, tuple, set, frozenset)):
        parts = [error_message(item) for item in value if item]
        return ", ".join(parts) if parts else DEFAULT_MESSAGE

    if value is not None and value != {}:
        text = str(value)
        if text:
            return text
    return DEFAULT_MESSAGE


def error_status(value: Any) -> int | None:
    if isinstance(value, str):
        return None
    status = _field(value, "status")
    if isinstance(status, int) and not isinstance(status, bool):
        return status
    return None


def is_credential_error(message: str, status: int | None = None) -> bool:
    if status == UNAUTHORIZED_STATUS:
        return True
    return any(token in message for token in CREDENTIAL_ERROR_TOKENS)


def normalize_error(value: Any = None) -> ErrorResult:
    message = error_message(value)
    status = error_status(value)
    code = _field(value, "code") if not isinstance(value, str) else None
    if is_credential_error(f"{message} {code or ''}", status):
        CREDENTIAL_FAILURES.inc()
        logger.error(
            "storage credentials rejected",
            extra={"extra": {"provider_status": status, "provider_code": code}},
        )
        return ErrorResult(msg=CREDENTIALS_INVALID_MESSAGE, status=CREDENTIALS_INVALID_STATUS)
    return ErrorResult(msg=message, status=status)
