"""
Cache stores for upstream listing and by-id lookups.

Features:
- CacheStore interface so the backing store can be swapped later
- MemoryCache: process-local dict, unbounded unless ``max_size`` is given
- Caches: the four mappings shared by the role and user services

There is no TTL. Entries live until a mutation invalidates them or the
process exits.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, TypeVar

from loguru import logger

from dashboard.models import Role, RolePage, UserPage, UserWithRole

V = TypeVar("V")


class CacheStore(ABC, Generic[V]):
    """Abstract key-value store used by the access layers."""

    @abstractmethod
    def get(self, key: str) -> V | None:
        """Return the value for ``key`` or None."""
        ...

    @abstractmethod
    def has(self, key: str) -> bool: ...

    @abstractmethod
    def set(self, key: str, value: V) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if it was present."""
        ...

    @abstractmethod
    def clear(self) -> int:
        """Remove every entry. Returns the number removed."""
        ...

    @abstractmethod
    def keys(self) -> list[str]: ...

    @abstractmethod
    def __len__(self) -> int: ...

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)


class MemoryCache(CacheStore[V]):
    """
    Dict-backed cache.

    Every operation touches a single key and never awaits, so no lock is
    needed under asyncio.

    Usage:
        cache = MemoryCache[Role](name="role_by_id")

        role = cache.get(role_id)
        if role is None:
            role = await fetch_role(role_id)
            cache.set(role_id, role)
    """

    def __init__(
        self,
        name: str = "cache",
        max_size: int | None = None,
        debug: bool = False,
    ):
        self._memory: dict[str, V] = {}
        self._name = name
        self._max_size = max_size
        self._debug = debug
        self._stats = CacheStats()

    @property
    def name(self) -> str:
        return self._name

    def get(self, key: str) -> V | None:
        if key not in self._memory:
            self._stats.misses += 1
            self._log(f"MISS: {key[:50]}")
            return None

        self._stats.hits += 1
        self._log(f"HIT: {key[:50]}")
        return self._memory[key]

    def has(self, key: str) -> bool:
        return key in self._memory

    def set(self, key: str, value: V) -> None:
        # Evict the oldest write if at capacity
        if (
            self._max_size is not None
            and key not in self._memory
            and len(self._memory) >= self._max_size
        ):
            self._evict_oldest()

        # Re-inserting moves the key to the end of the write order
        self._memory.pop(key, None)
        self._memory[key] = value
        self._log(f"SET: {key[:50]}")

    def delete(self, key: str) -> bool:
        if key in self._memory:
            del self._memory[key]
            self._log(f"DELETE: {key[:50]}")
            return True
        return False

    def clear(self) -> int:
        count = len(self._memory)
        self._memory.clear()
        if count:
            self._log(f"CLEAR: {count} entries removed")
        return count

    def keys(self) -> list[str]:
        return list(self._memory.keys())

    def __len__(self) -> int:
        return len(self._memory)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def _evict_oldest(self) -> None:
        if not self._memory:
            return

        oldest_key = next(iter(self._memory))
        del self._memory[oldest_key]
        self._stats.evictions += 1
        self._log(f"EVICT: {oldest_key[:50]}")

    def get_stats(self) -> "CacheStats":
        """Get cache statistics."""
        self._stats.size = len(self._memory)
        self._stats.max_size = self._max_size
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[{self._name}] {message}")


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0
    max_size: int | None = None

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "size": self.size,
            "max_size": self.max_size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }


@dataclass
class Caches:
    """
    The four mappings shared by the role and user services.

    Created once by the composition root and passed to both services.
    """

    user_listing: CacheStore[UserPage] = field(
        default_factory=lambda: MemoryCache(name="user_listing")
    )
    user_by_id: CacheStore[UserWithRole] = field(
        default_factory=lambda: MemoryCache(name="user_by_id")
    )
    role_listing: CacheStore[RolePage] = field(
        default_factory=lambda: MemoryCache(name="role_listing")
    )
    role_by_id: CacheStore[Role] = field(
        default_factory=lambda: MemoryCache(name="role_by_id")
    )

    @classmethod
    def in_memory(cls, max_size: int | None = None, debug: bool = False) -> "Caches":
        """Build four MemoryCache instances sharing one configuration."""
        return cls(
            user_listing=MemoryCache(name="user_listing", max_size=max_size, debug=debug),
            user_by_id=MemoryCache(name="user_by_id", max_size=max_size, debug=debug),
            role_listing=MemoryCache(name="role_listing", max_size=max_size, debug=debug),
            role_by_id=MemoryCache(name="role_by_id", max_size=max_size, debug=debug),
        )

    def _stores(self) -> dict[str, CacheStore[Any]]:
        return {
            "user_listing": self.user_listing,
            "user_by_id": self.user_by_id,
            "role_listing": self.role_listing,
            "role_by_id": self.role_by_id,
        }

    def clear_all(self) -> None:
        for store in self._stores().values():
            store.clear()

    def stats(self) -> dict[str, dict[str, Any]]:
        """Per-mapping statistics; stores without stats report their size."""
        result: dict[str, dict[str, Any]] = {}
        for name, store in self._stores().items():
            if isinstance(store, MemoryCache):
                result[name] = store.get_stats().to_dict()
            else:
                result[name] = {"size": len(store)}
        return result
