from __future__ import annotations

import logging
import types
import typing as tp
from dataclasses import replace

from recache._exceptions import SerializationError, StorageError
from recache._models import CacheEntry
from recache._serializers import BaseSerializer, JSONSerializer
from recache._synchronization import ReadWriteLock
from recache._utils import BaseClock, Clock, float_seconds_to_int_milliseconds

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

try:
    import redis
except ImportError:  # pragma: no cover
    redis = None  # type: ignore

logger = logging.getLogger("recache.storages")

__all__ = (
    "BaseStorage",
    "InMemoryStorage",
    "RedisStorage",
)


class BaseStorage:
    """
    Maps cache keys to cache entries.

    Implementations must be safe to share between threads. `get` returns None
    for a missing key and raises `StorageError` only when the backend itself
    fails; `save` replaces any previous entry stored under the same key.
    """

    def get(self, key: str) -> tp.Optional[CacheEntry]:
        raise NotImplementedError()

    def save(self, key: str, entry: CacheEntry) -> None:
        raise NotImplementedError()

    def remove(self, key: str) -> None:
        raise NotImplementedError()

    def close(self) -> None:
        raise NotImplementedError()

    def __enter__(self) -> "Self":
        return self

    def __exit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        self.close()


class InMemoryStorage(BaseStorage):
    """
    A simple in-memory storage.

    Entries live in a plain dictionary guarded by a reader/writer lock and are
    never evicted; an expired entry without validators is deleted when it is
    next read, or by `purge`.

    :param clock: Source of the current time used to spot expired entries, defaults to the system clock
    :type clock: tp.Optional[BaseClock], optional
    """

    def __init__(self, clock: tp.Optional[BaseClock] = None) -> None:
        self._cache: tp.Dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()
        self._clock = clock if clock else Clock()

    def get(self, key: str) -> tp.Optional[CacheEntry]:
        """
        Retrieves the entry stored under ``key``.

        :param key: Hashed value of the request URL and headers
        :type key: str
        :return: A copy of the stored entry, or None
        :rtype: tp.Optional[CacheEntry]
        """

        with self._lock.read:
            entry = self._cache.get(key)

        if entry is None:
            return None

        if entry.is_invalidatable(self._clock.now()):
            with self._lock.write:
                # Another thread may have saved a fresh entry in the meantime.
                current = self._cache.get(key)
                if current is not None and current.is_invalidatable(self._clock.now()):
                    del self._cache[key]
                    logger.debug(f"Removed the expired entry {key}.")
            return None

        return replace(entry)

    def save(self, key: str, entry: CacheEntry) -> None:
        """
        Stores ``entry`` under ``key``, replacing the previous one.

        :param key: Hashed value of the request URL and headers
        :type key: str
        :param entry: The entry to store
        :type entry: CacheEntry
        """

        with self._lock.write:
            self._cache[key] = replace(entry)

    def remove(self, key: str) -> None:
        with self._lock.write:
            self._cache.pop(key, None)

    def purge(self) -> int:
        """
        Deletes every expired entry that has no validator.

        :return: The number of deleted entries
        :rtype: int
        """

        now = self._clock.now()
        with self._lock.write:
            keys_to_remove = [key for key, entry in self._cache.items() if entry.is_invalidatable(now)]
            for key in keys_to_remove:
                del self._cache[key]

        if keys_to_remove:
            logger.debug(f"Purged {len(keys_to_remove)} expired entries.")
        return len(keys_to_remove)

    def close(self) -> None:  # pragma: no cover
        return

    def __len__(self) -> int:
        with self._lock.read:
            return len(self._cache)

    def __contains__(self, key: object) -> bool:
        with self._lock.read:
            return key in self._cache


class RedisStorage(BaseStorage):
    """
    A simple redis storage.

    Entries are serialized and kept under ``key_prefix + key``. Connection
    failures and unreadable payloads surface as `StorageError`.

    :param serializer: Serializer capable of serializing and de-serializing cache entries, defaults to None
    :type serializer: tp.Optional[BaseSerializer], optional
    :param client: A client for redis, defaults to None
    :type client: tp.Optional["redis.Redis"], optional
    :param ttl: Specifies the maximum number of seconds that the entry can be kept, defaults to None
    :type ttl: tp.Optional[tp.Union[int, float]], optional
    :param key_prefix: Prefix added to every key, defaults to "recache:"
    :type key_prefix: str
    """

    def __init__(
        self,
        serializer: tp.Optional[BaseSerializer] = None,
        client: tp.Optional[redis.Redis] = None,  # type: ignore
        ttl: tp.Optional[tp.Union[int, float]] = None,
        key_prefix: str = "recache:",
    ) -> None:
        if redis is None:  # pragma: no cover
            raise RuntimeError(
                f"The `{type(self).__name__}` was used, but the required packages were not found. "
                "Check that you have `recache` installed with the `redis` extension as shown.\n"
                "```pip install recache[redis]```"
            )

        self._serializer = serializer or JSONSerializer()
        self._ttl = ttl
        self._key_prefix = key_prefix

        if client is None:  # pragma: no cover
            self._client = redis.Redis()  # type: ignore
        else:
            self._client = client

    def _full_key(self, key: str) -> str:
        return self._key_prefix + key

    def get(self, key: str) -> tp.Optional[CacheEntry]:
        """
        Retrieves the entry stored under ``key``.

        :param key: Hashed value of the request URL and headers
        :type key: str
        :return: The stored entry, or None
        :rtype: tp.Optional[CacheEntry]
        """

        try:
            data = self._client.get(self._full_key(key))
        except redis.RedisError as exc:
            raise StorageError(f"Could not read {key} from redis: {exc}") from exc

        if data is None:
            return None

        try:
            return self._serializer.loads(data)
        except SerializationError as exc:
            raise StorageError(f"Could not deserialize the entry {key}: {exc}") from exc

    def save(self, key: str, entry: CacheEntry) -> None:
        """
        Stores ``entry`` under ``key``, replacing the previous one.

        :param key: Hashed value of the request URL and headers
        :type key: str
        :param entry: The entry to store
        :type entry: CacheEntry
        """

        if self._ttl is not None:
            px = float_seconds_to_int_milliseconds(self._ttl)
        else:
            px = None

        try:
            self._client.set(self._full_key(key), self._serializer.dumps(entry), px=px)
        except redis.RedisError as exc:
            raise StorageError(f"Could not write {key} to redis: {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            self._client.delete(self._full_key(key))
        except redis.RedisError as exc:
            raise StorageError(f"Could not remove {key} from redis: {exc}") from exc

    def close(self) -> None:
        self._client.close()
