"""
Service layer exceptions.
"""


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, service_id: str | None = None):
        self.service_id = service_id
        super().__init__(message)


class UpstreamError(ServiceError):
    """Upstream API answered with a non-success status."""

    def __init__(self, service_id: str, status_code: int, body: str = ""):
        self.status_code = status_code
        msg = f"HTTP {status_code}"
        if body:
            msg += f": {body[:200]}"
        super().__init__(msg, service_id=service_id)


class RequestTimeoutError(ServiceError):
    """Request timed out."""

    def __init__(self, service_id: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Request to service '{service_id}' timed out after {timeout}s",
            service_id=service_id,
        )


class NotFoundError(ServiceError):
    """A single resource lookup did not succeed."""

    pass


class FetchError(ServiceError):
    """A read failed after all retry attempts."""

    pass


class MutationError(ServiceError):
    """A create, update or delete was rejected upstream."""

    pass
