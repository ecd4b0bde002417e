"""
Response cache for file metadata, member lists, roles and annotations.

Two backends share one interface:
  - RedisCacheBackend: ``redis.asyncio`` client, JSON values, SCAN-based
    pattern deletion. Used when ``REDIS_URL`` is set.
  - MemoryCacheBackend: in-process dict with expiry, for single-process
    deployments and tests.

All cached data is reconstructible from the database, so every backend
failure is logged and treated as a miss.
"""

from __future__ import annotations

import fnmatch
import json
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional, Tuple

import redis.asyncio as aioredis

from .logging_config import get_logger

logger = get_logger(__name__)


class CacheBackend(ABC):
    """Key/value store with per-key TTL and glob pattern deletion."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]: ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int) -> None: ...

    @abstractmethod
    async def delete(self, *keys: str) -> int: ...

    @abstractmethod
    async def delete_pattern(self, pattern: str) -> int: ...

    async def close(self) -> None:
        return None


class MemoryCacheBackend(CacheBackend):
    """In-process cache; values are JSON round-tripped like the Redis backend.

    Expired entries are dropped when read and swept out every ``sweep_interval`` writes.
    """

    def __init__(self, sweep_interval: int = 100) -> None:
        self._store: Dict[str, Tuple[float, str]] = {}
        self._sweep_interval = sweep_interval
        self._writes = 0

    def _alive(self, key: str) -> Optional[str]:
        entry = self._store.get(key)
        if entry is None:
            return None
        expires_at, raw = entry
        if expires_at <= time.monotonic():
            self._store.pop(key, None)
            return None
        return raw

    def _sweep(self) -> None:
        now = time.monotonic()
        for key in [key for key, (expires_at, _) in self._store.items() if expires_at <= now]:
            del self._store[key]

    async def get(self, key: str) -> Optional[Any]:
        raw = self._alive(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        self._writes += 1
        if self._writes % self._sweep_interval == 0:
            self._sweep()
        self._store[key] = (time.monotonic() + ttl, json.dumps(value, default=str))

    async def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self._store.pop(key, None) is not None)

    async def delete_pattern(self, pattern: str) -> int:
        matched = [key for key in self._store if fnmatch.fnmatchcase(key, pattern)]
        return await self.delete(*matched)

    def keys(self) -> list[str]:
        return [key for key in list(self._store) if self._alive(key) is not None]


class RedisCacheBackend(CacheBackend):
    """Redis-backed cache."""

    def __init__(self, redis_url: str, prefix: str = "pdfshare:") -> None:
        self._client = aioredis.from_url(redis_url, decode_responses=True)
        self._prefix = prefix

    def _make_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._client.get(self._make_key(key))
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        await self._client.set(self._make_key(key), json.dumps(value, default=str), ex=ttl)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._client.delete(*(self._make_key(key) for key in keys)))

    async def delete_pattern(self, pattern: str) -> int:
        matched = [key async for key in self._client.scan_iter(match=self._make_key(pattern), count=500)]
        if not matched:
            return 0
        return int(await self._client.delete(*matched))

    async def close(self) -> None:
        await self._client.aclose()


class CacheService:
    """Typed access to the cache keys used by the file endpoints."""

    def __init__(self, backend: CacheBackend) -> None:
        self.backend = backend

    # ── Keys ──

    @staticmethod
    def file_info_key(file_id: int) -> str:
        return f"file_info:{file_id}"

    @staticmethod
    def file_users_key(file_id: int) -> str:
        return f"file_users:{file_id}"

    @staticmethod
    def file_annotations_key(file_id: int) -> str:
        return f"file_annotations:{file_id}"

    @staticmethod
    def user_file_role_key(file_id: int, email: str) -> str:
        return f"user_file_role:{file_id}:{email}"

    @staticmethod
    def user_files_key(email: str, page: int, sort: str) -> str:
        return f"user_files:{email}:{page}:{sort}"

    # ── Core operations ──

    async def get(self, key: str) -> Optional[Any]:
        """Read a cached value; returns None on miss or backend failure."""
        try:
            value = await self.backend.get(key)
        except Exception as e:
            logger.warning(f"Cache GET failed for {key}: {e}")
            return None
        if value is not None:
            logger.debug(f"Cache hit: {key}")
        return value

    async def set(self, key: str, value: Any, ttl: int) -> None:
        try:
            await self.backend.set(key, value, ttl)
        except Exception as e:
            logger.warning(f"Cache SET failed for {key}: {e}")

    async def delete(self, *keys: str) -> None:
        try:
            await self.backend.delete(*keys)
        except Exception as e:
            logger.warning(f"Cache DELETE failed for {keys}: {e}")

    async def delete_pattern(self, pattern: str) -> None:
        try:
            removed = await self.backend.delete_pattern(pattern)
            logger.debug(f"Cache invalidated {removed} keys matching {pattern}")
        except Exception as e:
            logger.warning(f"Cache pattern delete failed for {pattern}: {e}")

    # ── Invalidation ──

    async def invalidate_file_cache(self, file_id: int) -> None:
        """Drop every cached view of a file, including all per-user roles."""
        await self.delete(
            self.file_info_key(file_id),
            self.file_users_key(file_id),
            self.file_annotations_key(file_id),
        )
        await self.delete_pattern(f"user_file_role:{file_id}:*")

    async def invalidate_user_lists(self, emails: Iterable[str]) -> None:
        """Drop every cached file list page of the given users."""
        for email in {e for e in emails if e}:
            await self.delete_pattern(f"user_files:{email}:*")

    async def close(self) -> None:
        try:
            await self.backend.close()
        except Exception as e:
            logger.warning(f"Cache close failed: {e}")


def build_cache_backend(redis_url: str) -> CacheBackend:
    """Redis when a URL is configured, the in-process cache otherwise."""
    if redis_url:
        logger.info("Using Redis cache backend")
        return RedisCacheBackend(redis_url)
    logger.info("REDIS_URL not set; using in-process cache backend")
    return MemoryCacheBackend()
