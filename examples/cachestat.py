#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.9"
# dependencies = [
#     "recache",
# ]
#
# [tool.uv.sources]
# recache = { path = "../", editable = true }
# ///

import sys

import httpx

import recache


def cachestat(url: str) -> None:
    try:
        response = recache.get_with_cache(url)
    except httpx.HTTPError as exc:
        print(f"{exc}, {url}")
        return

    if response.status_code != httpx.codes.OK:
        print(f"not success HTTP request - {response.status_code} - {url}")
        return

    response = recache.get_with_cache(url)
    if response.is_cache_hit:
        print(f"Use Cache - {url}")
    else:
        print(f"{httpx.codes.get_reason_phrase(response.status_code)} - {url}")


if __name__ == "__main__":
    for url in sys.argv[1:]:
        cachestat(url)
