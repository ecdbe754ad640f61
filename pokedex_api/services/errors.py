class ServiceError(Exception):
    """Base for failures that map onto an HTTP status."""

    status_code = 500

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class ValidationError(ServiceError, ValueError):
    status_code = 400


class AuthorizationError(ServiceError):
    status_code = 401


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class RateLimitError(ServiceError):
    status_code = 429

    def __init__(self, message: str, *, retry_after_seconds: int) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds

    @property
    def headers(self) -> dict[str, str] | None:
        return {"Retry-After": str(self.retry_after_seconds)}


class UpstreamFailure(ServiceError):
    """The external catalog could not answer."""

    status_code = 500


class UpstreamNotFound(UpstreamFailure):
    status_code = 404


class StoreFailure(ServiceError):
    status_code = 500


class MalformedBodyError(ServiceError):
    status_code = 400
