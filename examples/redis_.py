#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.9"
# dependencies = [
#     "recache[redis]",
# ]
#
# [tool.uv.sources]
# recache = { path = "../", editable = true }
# ///

import logging

import httpx
import redis

from recache import CacheClient, RedisStorage

logging.basicConfig(level=logging.DEBUG)

storage = RedisStorage(client=redis.Redis(host="127.0.0.1", port=6379), ttl=3600)

with CacheClient(client=httpx.Client(follow_redirects=True), storage=storage) as client:
    for _ in range(2):
        response = client.get_with_cache("https://www.python.org/")
        print(f"status={response.status_code} from_cache={response.from_cache} revalidated={response.revalidated}")
