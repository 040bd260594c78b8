# module storefront.cart.storage
"""
Stockage clé/valeur durable côté client (équivalent localStorage).
- MemoryStorage: dict en mémoire (tests, dev).
- RedisStorage: Redis, clés préfixées par navigateur (storefront:client:<id>:<clé>).
"""
from typing import Dict, Optional, Protocol

import redis


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class RedisStorage:
    """
    Espace de noms Redis propre à un navigateur.
    - client: redis.Redis (decode_responses=True attendu, sinon les bytes sont décodés ici)
    - ttl_seconds: durée de vie glissante des clés (None = pas d'expiration)
    """

    def __init__(self, client: redis.Redis, namespace: str, ttl_seconds: Optional[int] = None):
        self.client = client
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        return f"storefront:{self.namespace}:{key}"

    def get(self, key: str) -> Optional[str]:
        value = self.client.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        self.client.set(self._key(key), value, ex=self.ttl_seconds)

    def delete(self, key: str) -> None:
        self.client.delete(self._key(key))
