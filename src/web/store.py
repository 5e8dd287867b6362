"""Key-value stores for users, GitHub tokens and cached analyses.

All state lives behind ``KeyValueStore`` and is injected into routes, so a
durable backend can replace ``InMemoryStore`` without touching handlers.
"""

import asyncio
from typing import Any, Generic, Optional, Protocol, TypeVar

from web.crypto import decrypt_value, encrypt_value

V = TypeVar("V")


class KeyValueStore(Protocol[V]):
    async def get(self, key: str) -> Optional[V]: ...

    async def set(self, key: str, value: V) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def contains(self, key: str) -> bool: ...


class InMemoryStore(Generic[V]):
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._data: dict[str, V] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[V]:
        async with self._lock:
            return self._data.get(key)

    async def set(self, key: str, value: V) -> None:
        async with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def contains(self, key: str) -> bool:
        async with self._lock:
            return key in self._data


class EncryptedTokenStore:
    """Stores access tokens Fernet-encrypted in an underlying store."""

    def __init__(self, backend: KeyValueStore[str], secret_key: str):
        self._backend = backend
        self._secret_key = secret_key

    async def get(self, key: str) -> Optional[str]:
        encrypted = await self._backend.get(key)
        if encrypted is None:
            return None
        return decrypt_value(self._secret_key, encrypted, key_name=f"github_token:{key}")

    async def set(self, key: str, value: str) -> None:
        await self._backend.set(key, encrypt_value(self._secret_key, value))

    async def delete(self, key: str) -> None:
        await self._backend.delete(key)

    async def contains(self, key: str) -> bool:
        return await self._backend.contains(key)


UserStore = InMemoryStore[dict[str, Any]]
AnalysisStore = InMemoryStore[dict[str, Any]]
