import logging
import types
import typing as tp

import httpx

from recache._controller import Controller
from recache._exceptions import StorageError
from recache._models import STATUS_CACHE_CONTENT, CacheEntry, CacheResponse
from recache._synchronization import Lock
from recache._sync._storages import BaseStorage, InMemoryStorage
from recache._utils import get_safe_url

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

logger = logging.getLogger("recache.client")

__all__ = ("CacheClient", "fetch_with_cache", "get_default_client", "get_with_cache")

URLTypes = tp.Union[str, httpx.URL]


class CacheClient:
    """
    Sends requests through an HTTPX client, reusing cached bodies when possible.

    A stored entry that is still fresh is returned without any network
    traffic. A stale entry with an ``ETag`` or ``Last-Modified`` turns the
    request into a conditional one, and a ``304 Not Modified`` answer is
    served with the cached body. Every other response is stored when it
    carries a validator or an expiry.

    The client keeps no state of its own between requests, so one instance
    may be used from many threads as long as the storage is thread-safe.

    :param client: The `httpx.Client` that performs the network requests, defaults to None
    :type client: tp.Optional[httpx.Client], optional
    :param storage: Storage that holds the cache entries, defaults to an `InMemoryStorage` on the controller's clock
    :type storage: tp.Optional[BaseStorage], optional
    :param controller: Controller that decides what is cached and how it is reused, defaults to None
    :type controller: tp.Optional[Controller], optional
    """

    def __init__(
        self,
        client: tp.Optional[httpx.Client] = None,
        storage: tp.Optional[BaseStorage] = None,
        controller: tp.Optional[Controller] = None,
    ) -> None:
        self._client = client if client is not None else httpx.Client()
        self._controller = controller if controller is not None else Controller()
        self._storage = storage if storage is not None else InMemoryStorage(clock=self._controller.clock)

    @property
    def storage(self) -> BaseStorage:
        return self._storage

    def build_request(self, url: URLTypes) -> httpx.Request:
        request = self._client.build_request("GET", url)
        check_url(request.url)
        return request

    def get_with_cache(self, url: URLTypes) -> CacheResponse:
        """
        Sends a GET request for ``url`` through the cache.

        :param url: An absolute URL, or one relative to the wrapped client's ``base_url``
        :type url: tp.Union[str, httpx.URL]
        :return: The cached or fetched response
        :rtype: CacheResponse
        """

        return self.fetch_with_cache(self.build_request(url))

    def fetch_with_cache(self, request: tp.Union[URLTypes, httpx.Request]) -> CacheResponse:
        """
        Sends ``request`` through the cache.

        Transport errors raised by the wrapped client propagate unchanged;
        storage faults are logged and the request proceeds as a cache miss.

        :param request: A URL to GET or a prepared request
        :type request: tp.Union[str, httpx.URL, httpx.Request]
        :return: The cached or fetched response
        :rtype: CacheResponse
        """

        if not isinstance(request, httpx.Request):
            return self.get_with_cache(request)

        check_url(request.url)

        if not self._controller.is_cachable_request(request):
            response = self._client.send(request)
            return CacheResponse(
                status_code=response.status_code,
                headers=response.headers,
                content=response.content,
            )

        key = self._controller.generate_key(request)
        safe_url = get_safe_url(request.url)
        entry = self._retrieve(key)
        outgoing = request
        revalidating = False

        if entry is not None:
            if entry.is_fresh(self._controller.now()):
                logger.debug(f"Serving the resource located at {safe_url} from the cache.")
                return CacheResponse(
                    status_code=STATUS_CACHE_CONTENT,
                    content=entry.body,
                    from_cache=True,
                )

            conditional_headers = self._controller.conditional_headers(entry)
            if conditional_headers:
                logger.debug(f"Revalidating the resource located at {safe_url}.")
                outgoing = make_conditional_request(request, conditional_headers)
                revalidating = True

        response = self._client.send(outgoing)

        if response.status_code == httpx.codes.NOT_MODIFIED:
            if revalidating:
                assert entry is not None
                logger.debug(f"The resource located at {safe_url} was not modified.")
                return CacheResponse(
                    status_code=response.status_code,
                    headers=response.headers,
                    content=entry.body,
                    revalidated=True,
                )
            return CacheResponse(
                status_code=response.status_code,
                headers=response.headers,
                content=response.content,
            )

        new_entry = self._controller.build_entry(request, response)
        stored = new_entry is not None and self._save(key, new_entry)
        if stored:
            logger.debug(f"Stored the resource located at {safe_url} under {key}.")

        return CacheResponse(
            status_code=response.status_code,
            headers=response.headers,
            content=response.content,
            stored=stored,
        )

    def _retrieve(self, key: str) -> tp.Optional[CacheEntry]:
        try:
            return self._storage.get(key)
        except StorageError as exc:
            logger.warning(f"Treating {key} as a cache miss since the storage failed: {exc}")
            return None

    def _save(self, key: str, entry: CacheEntry) -> bool:
        try:
            self._storage.save(key, entry)
        except StorageError as exc:
            logger.warning(f"Could not store {key}: {exc}")
            return False
        return True

    def close(self) -> None:
        self._client.close()
        self._storage.close()

    def __enter__(self) -> "Self":
        return self

    def __exit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        self.close()


def check_url(url: httpx.URL) -> None:
    if not url.scheme or not url.host:
        raise httpx.InvalidURL(f"Expected an absolute URL, got {str(url)!r}.")


def make_conditional_request(request: httpx.Request, headers: tp.List[tp.Tuple[str, str]]) -> httpx.Request:
    """Copies ``request`` with the validator headers set, leaving the original untouched."""

    conditional_headers = request.headers.copy()
    for name, value in headers:
        conditional_headers[name] = value

    return httpx.Request(
        method=request.method,
        url=request.url,
        headers=conditional_headers,
        stream=request.stream,
        extensions=request.extensions,
    )


_default_client: tp.Optional[CacheClient] = None
_default_client_lock = Lock()


def get_default_client() -> CacheClient:
    """Returns the process-wide client, creating it on first use."""

    global _default_client

    with _default_client_lock:
        if _default_client is None:
            _default_client = CacheClient()
        return _default_client


def fetch_with_cache(request: tp.Union[URLTypes, httpx.Request]) -> CacheResponse:
    return get_default_client().fetch_with_cache(request)


def get_with_cache(url: URLTypes) -> CacheResponse:
    return get_default_client().get_with_cache(url)
