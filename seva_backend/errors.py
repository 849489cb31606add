"""Domain errors raised by the services and translated to HTTP in `main`."""


class ServiceError(Exception):
    """Base class for errors with a fixed HTTP status."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """A required field is missing or empty."""

    status_code = 400


class UnsupportedMediaError(ServiceError):
    """The uploaded file is not an accepted image type."""

    status_code = 400


class PayloadTooLargeError(ServiceError):
    status_code = 413


class NotFoundError(ServiceError):
    status_code = 404


class StorageError(ServiceError):
    """Raised when media storage operations fail."""

    status_code = 500


__all__ = [
    "ServiceError",
    "ValidationError",
    "UnsupportedMediaError",
    "PayloadTooLargeError",
    "NotFoundError",
    "StorageError",
]
