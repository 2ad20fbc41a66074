from recache._controller import Controller as Controller
from recache._exceptions import (
    CacheControlError as CacheControlError,
    ParseError as ParseError,
    SerializationError as SerializationError,
    StorageError as StorageError,
    ValidationError as ValidationError,
)
from recache._headers import CacheControl as CacheControl
from recache._models import (
    STATUS_CACHE_CONTENT as STATUS_CACHE_CONTENT,
    CacheEntry as CacheEntry,
    CacheResponse as CacheResponse,
)
from recache._serializers import (
    BaseSerializer as BaseSerializer,
    JSONSerializer as JSONSerializer,
    PickleSerializer as PickleSerializer,
    YAMLSerializer as YAMLSerializer,
)
from recache._sync._client import (
    CacheClient as CacheClient,
    fetch_with_cache as fetch_with_cache,
    get_default_client as get_default_client,
    get_with_cache as get_with_cache,
)
from recache._sync._mock import MockTransport as MockTransport
from recache._sync._storages import (
    BaseStorage as BaseStorage,
    InMemoryStorage as InMemoryStorage,
    RedisStorage as RedisStorage,
)
from recache._utils import BaseClock as BaseClock, Clock as Clock, generate_key as generate_key

__all__ = (
    # Client
    "CacheClient",
    "fetch_with_cache",
    "get_with_cache",
    "get_default_client",
    # Models
    "CacheEntry",
    "CacheResponse",
    "STATUS_CACHE_CONTENT",
    # Controller
    "Controller",
    "BaseClock",
    "Clock",
    "generate_key",
    # Headers
    "CacheControl",
    # Storages
    "BaseStorage",
    "InMemoryStorage",
    "RedisStorage",
    # Serializers
    "BaseSerializer",
    "JSONSerializer",
    "PickleSerializer",
    "YAMLSerializer",
    # Exceptions
    "CacheControlError",
    "ParseError",
    "ValidationError",
    "SerializationError",
    "StorageError",
    # Testing
    "MockTransport",
)

__version__ = "0.1.0"
