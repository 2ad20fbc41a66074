from unittest import mock

import httpx
import pytest

from recache._utils import (
    extract_header_values,
    float_seconds_to_int_milliseconds,
    generate_key,
    get_safe_url,
    parse_date,
)


def test_generate_key_is_deterministic():
    first = httpx.Request("GET", "https://example.com", headers=[("Accept", "text/html")])
    second = httpx.Request("GET", "https://example.com", headers=[("Accept", "text/html")])

    assert generate_key(first) == generate_key(second)
    assert len(generate_key(first)) == 32


def test_generate_key_ignores_header_order():
    first = httpx.Request("GET", "https://example.com", headers=[("A", "1"), ("B", "2")])
    second = httpx.Request("GET", "https://example.com", headers=[("B", "2"), ("A", "1")])

    assert generate_key(first) == generate_key(second)


def test_generate_key_order_sensitive():
    first = httpx.Request("GET", "https://example.com", headers=[("A", "1"), ("B", "2")])
    second = httpx.Request("GET", "https://example.com", headers=[("B", "2"), ("A", "1")])

    assert generate_key(first, sort_headers=False) != generate_key(second, sort_headers=False)


def test_generate_key_depends_on_headers_and_url():
    base = httpx.Request("GET", "https://example.com/a")

    assert generate_key(base) != generate_key(httpx.Request("GET", "https://example.com/b"))
    assert generate_key(base) != generate_key(
        httpx.Request("GET", "https://example.com/a", headers=[("Accept-Language", "en")])
    )


def test_generate_key_counts_duplicate_headers():
    single = httpx.Request("GET", "https://example.com", headers=[("Accept", "a")])
    duplicated = httpx.Request("GET", "https://example.com", headers=[("Accept", "a"), ("Accept", "b")])

    assert generate_key(single) != generate_key(duplicated)


def test_fips_generate_key():
    request = httpx.Request("GET", "https://example.com")

    # Simulate FIPS mode by using sha256 instead of blake2b
    with mock.patch("hashlib.blake2b", side_effect=AttributeError("ERROR")):
        key = generate_key(request)

    assert len(key) == 64


def test_extract_header_values():
    headers = httpx.Headers(
        [
            ("Content-Type", "application/json"),
            ("Content-Type", "application/html"),
        ]
    )

    assert extract_header_values(headers, "content-type") == ["application/json", "application/html"]
    assert extract_header_values(headers, "Content-Type", single=True) == ["application/json"]
    assert extract_header_values(headers, "ETag") == []


def test_parse_date():
    date = "Mon, 25 Aug 2015 12:00:00 GMT"
    timestamp = parse_date(date)
    assert timestamp == 1440504000


def test_parse_date_with_offset():
    assert parse_date("Mon, 25 Aug 2015 14:00:00 +0200") == 1440504000


@pytest.mark.parametrize("date", ["0", "-1", "", "yesterday"])
def test_parse_invalid_date(date: str):
    assert parse_date(date) is None


def test_float_seconds_to_milliseconds():
    seconds = 1.234
    milliseconds = float_seconds_to_int_milliseconds(seconds)
    assert milliseconds == 1234


@pytest.mark.parametrize(
    "url, expected",
    [
        pytest.param(
            "https://example.com/path?query=1",
            "https://example.com/path",
            id="url_with_query_is_ignored",
        ),
        pytest.param(
            "https://example.com/path",
            "https://example.com/path",
            id="url_without_path_query",
        ),
        pytest.param("https://example.com", "https://example.com/", id="url_without_path"),
        pytest.param("http://localhost:8000/a", "http://localhost:8000/a", id="url_with_port"),
    ],
)
def test_safe_url(url: str, expected: str) -> None:
    assert get_safe_url(httpx.URL(url)) == expected
