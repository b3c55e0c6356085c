# shopmuse/domain/repositories/kv_store.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Protocol
from redis.asyncio import Redis
import json

"""
Note:
    - Key-value adapters standing in for browser local storage.
    - Values are JSON documents; encoding happens here so every backend behaves the same.
    - No business logic here, just get/set/delete plus an atomic list append.
    - A stored value that is not valid JSON raises ValueError on read; callers do not recover from it.
"""


def _encode(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _decode(key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Corrupted value for key={key}: {e}") from e


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[Any]: ...
    async def set(self, key: str, value: Any) -> None: ...
    async def append(self, key: str, value: Any) -> None: ...
    async def get_list(self, key: str) -> List[Any]: ...
    async def delete(self, key: str) -> None: ...
    async def ping(self) -> bool: ...
    def namespace(self, prefix: str) -> "KeyValueStore": ...


class MemoryKeyValueStore:
    """
    Process-local store. Keeps the encoded JSON text rather than the objects,
    so callers never share mutable state with the store.
    """
    def __init__(self, data: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = data if data is not None else {}

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return _decode(key, raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = _encode(value)

    async def append(self, key: str, value: Any) -> None:
        # no await between read and write, so concurrent appends cannot interleave
        items = _decode(key, self._data[key]) if key in self._data else []
        items.append(value)
        self._data[key] = _encode(items)

    async def get_list(self, key: str) -> List[Any]:
        return await self.get(key) or []

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def ping(self) -> bool:
        return True

    def namespace(self, prefix: str) -> "NamespacedStore":
        return NamespacedStore(self, prefix)

    def raw(self, key: str) -> Optional[str]:
        """Encoded value as stored (debugging and tests)."""
        return self._data.get(key)

    def put_raw(self, key: str, raw: str) -> None:
        self._data[key] = raw


class RedisKeyValueStore:
    """
    Adapter storing JSON documents in Redis under `<prefix>:<key>`.
    Values never expire: the store is the source of truth, not a cache.
    """
    def __init__(self, redis: Redis, prefix: str = "shopmuse"):
        self.redis = redis
        self.prefix = prefix

    def key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        if raw := await self.redis.get(self.key(key)):
            return _decode(key, raw)
        return None

    async def set(self, key: str, value: Any) -> None:
        await self.redis.set(self.key(key), _encode(value))

    async def append(self, key: str, value: Any) -> None:
        # native list: RPUSH is atomic on the server
        await self.redis.rpush(self.key(key), _encode(value))

    async def get_list(self, key: str) -> List[Any]:
        raw_items = await self.redis.lrange(self.key(key), 0, -1)
        return [_decode(key, raw) for raw in raw_items]

    async def delete(self, key: str) -> None:
        await self.redis.delete(self.key(key))

    async def ping(self) -> bool:
        return bool(await self.redis.ping())

    def namespace(self, prefix: str) -> "NamespacedStore":
        return NamespacedStore(self, prefix)


class NamespacedStore:
    """Prefixes every key, e.g. one namespace per shopping session."""
    def __init__(self, inner: KeyValueStore, prefix: str):
        self.inner = inner
        self.prefix = prefix

    def _k(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        return await self.inner.get(self._k(key))

    async def set(self, key: str, value: Any) -> None:
        await self.inner.set(self._k(key), value)

    async def append(self, key: str, value: Any) -> None:
        await self.inner.append(self._k(key), value)

    async def get_list(self, key: str) -> List[Any]:
        return await self.inner.get_list(self._k(key))

    async def delete(self, key: str) -> None:
        await self.inner.delete(self._k(key))

    async def ping(self) -> bool:
        return await self.inner.ping()

    def namespace(self, prefix: str) -> "NamespacedStore":
        return NamespacedStore(self.inner, self._k(prefix))
