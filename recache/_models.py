from __future__ import annotations

import typing as tp
from dataclasses import dataclass, field

import httpx

__all__ = ("CacheEntry", "CacheResponse", "STATUS_CACHE_CONTENT")

# Not a real HTTP status; marks a response served from the storage
# without contacting the origin.
STATUS_CACHE_CONTENT = 999


@dataclass
class CacheEntry:
    """
    A cached response body together with the information needed to reuse it.

    :param body: The buffered response body
    :param etag: The ``ETag`` of the response, verbatim
    :param last_modified: The ``Last-Modified`` header of the response, verbatim
    :param expires_at: POSIX timestamp after which the body must not be served
        without revalidation
    """

    body: bytes
    etag: str = ""
    last_modified: str = ""
    expires_at: tp.Optional[float] = None

    def is_fresh(self, now: float) -> bool:
        return self.expires_at is not None and now < self.expires_at

    def has_validator(self) -> bool:
        return bool(self.etag or self.last_modified)

    def is_invalidatable(self, now: float) -> bool:
        """An expired entry with nothing to revalidate it is garbage."""
        return not self.has_validator() and self.expires_at is not None and self.expires_at <= now

    def is_storable(self) -> bool:
        return self.has_validator() or self.expires_at is not None


@dataclass
class CacheResponse:
    """
    The result of a cached fetch.

    ``status_code`` is either the status of the network response or
    `STATUS_CACHE_CONTENT` when the body came straight from the storage.
    """

    status_code: int
    content: bytes
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    from_cache: bool = False
    revalidated: bool = False
    stored: bool = False

    @property
    def is_cache_hit(self) -> bool:
        return self.status_code == STATUS_CACHE_CONTENT

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")
