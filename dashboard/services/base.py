"""
Base class shared by the role and user services.
"""

from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from dashboard.services.cache import Caches
from dashboard.services.client import ApiClient
from dashboard.services.deduplicator import RequestDeduplicator
from dashboard.services.errors import MutationError, ServiceError
from dashboard.services.retry import DEFAULT_ATTEMPTS, DEFAULT_BASE_DELAY, retry

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class BaseService:
    """
    Holds the dependencies every access layer needs.

    Subclasses should:
    - Read through ``self.caches`` before going upstream
    - Wrap upstream reads in ``self._read`` (retry, optional single-flight)
    - Never retry mutations
    """

    resource: str = ""

    def __init__(
        self,
        client: ApiClient,
        caches: Caches,
        retry_attempts: int = DEFAULT_ATTEMPTS,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
        deduplicator: RequestDeduplicator | None = None,
    ):
        self.client = client
        self.caches = caches
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay
        self._deduplicator = deduplicator

    @property
    def path(self) -> str:
        return f"/{self.resource}"

    def item_path(self, id: str) -> str:
        return f"/{self.resource}/{id}"

    async def _read(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run an upstream read with retry, shared per key when single-flight is on."""

        async def attempt() -> T:
            return await retry(
                fn,
                attempts=self.retry_attempts,
                base_delay=self.retry_base_delay,
            )

        if self._deduplicator is not None:
            return await self._deduplicator.dedupe(f"{self.resource}:{key}", attempt)
        return await attempt()

    async def _mutate(
        self, method: str, path: str, data: dict[str, Any] | None, message: str
    ) -> Any:
        """Send a write once; any failure becomes a MutationError."""
        try:
            return await self.client.request(method, path, json_data=data)
        except ServiceError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise MutationError(message, e.service_id) from e

    def _parse(
        self,
        model: type[M],
        payload: Any,
        error: type[ServiceError],
        message: str,
    ) -> M:
        """Validate an upstream payload; a malformed or empty body raises ``error``."""
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.warning(
                f"Malformed {model.__name__} payload from /{self.resource}: "
                f"{e.error_count()} validation errors"
            )
            raise error(message, self.client.service_id) from e
