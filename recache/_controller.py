import logging
import typing as tp

import httpx

from recache._exceptions import CacheControlError
from recache._headers import parse_cache_control
from recache._models import CacheEntry

from ._utils import (
    BaseClock,
    Clock,
    extract_header_values,
    generate_key,
    get_safe_url,
    parse_date,
)

logger = logging.getLogger("recache.controller")

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"]

# Expires values that mean "already expired" rather than a date.
NOT_CACHEABLE_EXPIRES = ("", "-1", "0")

__all__ = ("Controller", "get_expires_at", "get_max_age")


def get_max_age(headers: httpx.Headers) -> tp.Optional[int]:
    """
    Returns the positive ``max-age`` of the response, if there is one.

    A broken ``Cache-Control`` header counts as no header at all, and so does
    ``max-age=0``.
    """

    try:
        cache_control = parse_cache_control(extract_header_values(headers, "cache-control"))
    except CacheControlError as exc:
        logger.debug(f"Ignoring the malformed Cache-Control header: {exc}")
        return None

    if cache_control.max_age is not None and cache_control.max_age > 0:
        return cache_control.max_age
    return None


def get_expires_at(headers: httpx.Headers, now: float) -> tp.Optional[float]:
    """
    Computes the instant after which a response stops being fresh.

    ``Cache-Control: max-age`` wins over ``Expires``. The ``Expires`` values
    ``""``, ``"-1"`` and ``"0"`` and dates that cannot be parsed give no
    expiry.
    """

    max_age = get_max_age(headers)
    if max_age is not None:
        return now + max_age

    expires = extract_header_values(headers, "expires", single=True)
    if not expires or expires[0].strip() in NOT_CACHEABLE_EXPIRES:
        return None

    expires_timestamp = parse_date(expires[0])
    if expires_timestamp is None:
        logger.debug(f"Ignoring the unparsable Expires header: {expires[0]!r}")
        return None
    return float(expires_timestamp)


class Controller:
    """
    Decides what may be cached and how a cached entry is reused.

    :param cacheable_methods: Request methods whose responses are cached, defaults to ``["GET"]``
    :type cacheable_methods: tp.Optional[tp.List[str]], optional
    :param cacheable_status_codes: Response statuses that are cached, defaults to None (any status)
    :type cacheable_status_codes: tp.Optional[tp.List[int]], optional
    :param clock: Source of the current time, defaults to the system clock
    :type clock: tp.Optional[BaseClock], optional
    :param key_generator: Callable that derives the cache key of a request, defaults to `generate_key`
    :type key_generator: tp.Optional[tp.Callable[[httpx.Request], str]], optional
    """

    def __init__(
        self,
        cacheable_methods: tp.Optional[tp.List[str]] = None,
        cacheable_status_codes: tp.Optional[tp.List[int]] = None,
        clock: tp.Optional[BaseClock] = None,
        key_generator: tp.Optional[tp.Callable[[httpx.Request], str]] = None,
    ):
        self._cacheable_methods = []

        if cacheable_methods is None:
            self._cacheable_methods.append("GET")
        else:
            for method in cacheable_methods:
                if method.upper() not in HTTP_METHODS:
                    raise RuntimeError(
                        f"recache does not support the HTTP method `{method}`.\n"
                        f"Please use the methods from this list: {HTTP_METHODS}"
                    )
                self._cacheable_methods.append(method.upper())

        self._cacheable_status_codes = cacheable_status_codes
        self._clock = clock if clock else Clock()
        self._key_generator = key_generator or generate_key

    @property
    def clock(self) -> BaseClock:
        return self._clock

    def now(self) -> float:
        return self._clock.now()

    def generate_key(self, request: httpx.Request) -> str:
        return self._key_generator(request)

    def is_cachable_request(self, request: httpx.Request) -> bool:
        if request.method.upper() not in self._cacheable_methods:
            logger.debug(
                f"Bypassing the cache for {get_safe_url(request.url)} "
                f"since the request method ({request.method}) is not in the list of cacheable methods."
            )
            return False
        return True

    def is_cachable_status(self, status_code: int) -> bool:
        if self._cacheable_status_codes is None:
            return True
        return status_code in self._cacheable_status_codes

    def conditional_headers(self, entry: CacheEntry) -> tp.List[tp.Tuple[str, str]]:
        """
        Returns the validator headers for revalidating ``entry``.

        Both validators are sent when both are known.
        """

        headers = []
        if entry.etag:
            headers.append(("If-None-Match", entry.etag))
        if entry.last_modified:
            headers.append(("If-Modified-Since", entry.last_modified))
        return headers

    def build_entry(self, request: httpx.Request, response: httpx.Response) -> tp.Optional[CacheEntry]:
        """
        Builds the entry to store for a network response.

        Returns None when the response cannot be cached: its status is not
        cacheable, or it has neither a validator nor an expiry.
        The response body must already be read.
        """

        safe_url = get_safe_url(request.url)

        if not self.is_cachable_status(response.status_code):
            logger.debug(
                f"Considering the resource located at {safe_url} "
                f"as not cachable since its status code ({response.status_code})"
                " is not in the list of cacheable status codes."
            )
            return None

        etag = extract_header_values(response.headers, "etag", single=True)
        last_modified = extract_header_values(response.headers, "last-modified", single=True)

        entry = CacheEntry(
            body=response.content,
            etag=etag[0] if etag else "",
            last_modified=last_modified[0] if last_modified else "",
            expires_at=get_expires_at(response.headers, self.now()),
        )

        if not entry.is_storable():
            logger.debug(
                f"Considering the resource located at {safe_url} "
                "as not cachable since it has neither a validator nor an expiry."
            )
            return None

        return entry
