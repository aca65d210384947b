from typing import Any, Mapping, Optional


class KitchenGuideError(Exception):
    """Base class for errors that handlers turn into an HTTP status and message.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Internal error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(KitchenGuideError):
    """Raised when input data is malformed or outside an allowed set of values."""

    http_status = 400
    default_message = "Invalid input"


class NotFoundError(KitchenGuideError):
    """Raised when a requested resource was not found."""

    http_status = 404
    default_message = "Not found"


class ConflictError(KitchenGuideError):
    """Raised when a uniqueness constraint is violated (e.g., duplicate entry)."""

    http_status = 409
    default_message = "Conflict"


class UnsupportedMediaTypeError(KitchenGuideError):
    """Raised when an upload is not one of the accepted image formats."""

    http_status = 415
    default_message = "Invalid file type. Only JPG, PNG, and WEBP are allowed."


class PayloadTooLargeError(KitchenGuideError):
    """Raised when an upload exceeds the configured size limit."""

    http_status = 413
    default_message = "Uploaded file is too large"


class StorageUnavailableError(KitchenGuideError):
    """Raised when the image store cannot be written (disk full, bucket unreachable)."""

    http_status = 500
    default_message = "Image storage is unavailable"


class AuthenticationFailedError(KitchenGuideError):
    """Raised when credentials or a token are rejected.

    The message never says which part of the credentials was wrong.
    """

    http_status = 401
    default_message = "Invalid username or password"


class PoolTimeoutError(KitchenGuideError):
    """Raised when no database connection could be acquired in time."""

    http_status = 503
    default_message = "The service is busy, please try again"


# Errors a handler shows on the submitted form instead of an error page
FORM_ERRORS = (
    ServiceValidationError,
    ConflictError,
    UnsupportedMediaTypeError,
    PayloadTooLargeError,
)
