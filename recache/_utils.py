from __future__ import annotations

import calendar
import hashlib
import time
import typing as tp
from email.utils import parsedate_tz

import httpx

KEY_SEPARATOR = ";"


class BaseClock:
    def now(self) -> float:
        raise NotImplementedError()


class Clock(BaseClock):
    def now(self) -> float:
        return time.time()


def get_safe_url(url: httpx.URL) -> str:
    """Return the URL without its query string, suitable for log messages."""

    port = f":{url.port}" if url.port is not None else ""
    return f"{url.scheme}://{url.host}{port}{url.path}"


def generate_key(request: httpx.Request, sort_headers: bool = True) -> str:
    """
    Derives the cache key of a request from its URL and all of its headers.

    Every header value contributes one ``name:value`` string; the strings are
    joined with ``;`` and appended to the URL before hashing. With
    ``sort_headers`` the header strings are sorted first, so the key does not
    depend on the order in which headers were added.

    :param request: An HTTP request
    :type request: httpx.Request
    :param sort_headers: Whether header order is ignored, defaults to True
    :type sort_headers: bool
    :return: A 32 character hex digest (64 when BLAKE2b is unavailable)
    :rtype: str
    """

    headers = [f"{name}:{value}" for name, value in request.headers.multi_items()]
    if sort_headers:
        headers.sort()

    encoded_data = (str(request.url) + KEY_SEPARATOR.join(headers)).encode("utf-8")

    try:
        key = hashlib.blake2b(digest_size=16, usedforsecurity=False)
    except (AttributeError, ValueError, TypeError):
        key = hashlib.sha256(usedforsecurity=False)

    key.update(encoded_data)
    return key.hexdigest()


def extract_header_values(headers: httpx.Headers, header_key: str, single: bool = False) -> tp.List[str]:
    values = headers.get_list(header_key)

    if single:
        return values[:1]
    return values


def parse_date(date: str) -> tp.Optional[int]:
    try:
        expires = parsedate_tz(date)
    except (TypeError, ValueError, IndexError):  # pragma: no cover
        return None
    if expires is None:
        return None
    try:
        timestamp = calendar.timegm(expires[:6]) - (expires[9] or 0)
    except (ValueError, OverflowError):  # pragma: no cover
        return None
    return timestamp


def float_seconds_to_int_milliseconds(seconds: float) -> int:
    return int(seconds * 1000)
