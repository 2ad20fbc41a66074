import httpx

from recache import STATUS_CACHE_CONTENT, CacheEntry, CacheResponse

NOW = 1440504000.0


def test_entry_without_expiry_is_not_fresh():
    entry = CacheEntry(body=b"test", etag='"abc"')

    assert not entry.is_fresh(NOW)


def test_entry_freshness_boundary():
    entry = CacheEntry(body=b"test", expires_at=NOW + 10)

    assert entry.is_fresh(NOW)
    assert entry.is_fresh(NOW + 9.999)
    assert not entry.is_fresh(NOW + 10)


def test_has_validator():
    assert CacheEntry(body=b"", etag='"abc"').has_validator()
    assert CacheEntry(body=b"", last_modified="Tue, 25 Aug 2015 12:00:00 GMT").has_validator()
    assert not CacheEntry(body=b"", expires_at=NOW).has_validator()


def test_is_invalidatable():
    expired = CacheEntry(body=b"", expires_at=NOW - 1)
    expired_with_etag = CacheEntry(body=b"", etag='"abc"', expires_at=NOW - 1)
    fresh = CacheEntry(body=b"", expires_at=NOW + 1)
    validator_only = CacheEntry(body=b"", last_modified="Tue, 25 Aug 2015 12:00:00 GMT")

    assert expired.is_invalidatable(NOW)
    assert not expired_with_etag.is_invalidatable(NOW)
    assert not fresh.is_invalidatable(NOW)
    assert not validator_only.is_invalidatable(NOW)


def test_is_storable():
    assert not CacheEntry(body=b"test").is_storable()
    assert CacheEntry(body=b"test", etag='"abc"').is_storable()
    assert CacheEntry(body=b"test", expires_at=NOW).is_storable()


def test_cache_response_hit_marker():
    hit = CacheResponse(status_code=STATUS_CACHE_CONTENT, content=b"test", from_cache=True)
    network = CacheResponse(status_code=200, content=b"test", headers=httpx.Headers({"ETag": '"abc"'}))

    assert hit.is_cache_hit
    assert hit.headers == httpx.Headers()
    assert not network.is_cache_hit
    assert network.text == "test"
