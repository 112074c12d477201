from __future__ import annotations


class ServiceError(Exception):
    """Base class for expected failures raised by the namespace services.

    Attributes:
        message: Human-readable error message returned to callers.
        status: HTTP-style status code describing the failure class.
    """

    default_message = "An error occurred"
    default_status: int | None = None

    def __init__(self, message: str | None = None, *, status: int | None = None) -> None:
        self.message = message or self.default_message
        self.status = status if status is not None else self.default_status
        super().__init__(self.message)


class InvalidNameError(ServiceError):
    """Raised when a namespace or object name contains an unsafe sequence."""

    default_message = "name cannot contain '..'"
    default_status = 400


class InvalidPayloadError(ServiceError):
    """Raised when an inline upload has nothing to upload."""

    default_message = "payload is required unless a signed url is requested"
    default_status = 400


class ConflictError(ServiceError):
    """Raised when creating a namespace that is already live."""

    default_message = "bucket already exists"
    default_status = 409


class NotFoundError(ServiceError):
    """Raised when a namespace or object does not exist."""

    default_message = "bucket does not exist"
    default_status = 404
