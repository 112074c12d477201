from .adapter import NamespacedStorageAdapter
from .base import (
    ConflictError,
    InvalidNameError,
    InvalidPayloadError,
    NotFoundError,
    ServiceError,
)
from .errors import normalize_error
from .factory import build_adapter
from .results import (
    BucketsResult,
    ErrorResult,
    ObjectResult,
    ObjectsResult,
    OkResult,
    UrlResult,
)

__all__ = [
    "NamespacedStorageAdapter",
    "build_adapter",
    "normalize_error",
    "ServiceError",
    "InvalidNameError",
    "InvalidPayloadError",
    "ConflictError",
    "NotFoundError",
    "OkResult",
    "ErrorResult",
    "BucketsResult",
    "ObjectsResult",
    "ObjectResult",
    "UrlResult",
]
