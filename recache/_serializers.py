import base64
import json
import pickle
import typing as tp

from recache._exceptions import SerializationError
from recache._models import CacheEntry

try:
    import yaml
except ImportError:  # pragma: no cover
    yaml = None  # type: ignore

__all__ = ("PickleSerializer", "JSONSerializer", "YAMLSerializer", "BaseSerializer")


def entry_to_dict(entry: CacheEntry) -> tp.Dict[str, tp.Any]:
    return {
        "body": base64.b64encode(entry.body).decode("ascii"),
        "etag": entry.etag,
        "last_modified": entry.last_modified,
        "expires_at": entry.expires_at,
    }


def entry_from_dict(entry_dict: tp.Any) -> CacheEntry:
    if not isinstance(entry_dict, dict):
        raise SerializationError(f"Expected a mapping, got {type(entry_dict).__name__}.")

    try:
        expires_at = entry_dict.get("expires_at")
        return CacheEntry(
            body=base64.b64decode(entry_dict["body"].encode("ascii"), validate=True),
            etag=entry_dict.get("etag") or "",
            last_modified=entry_dict.get("last_modified") or "",
            expires_at=float(expires_at) if expires_at is not None else None,
        )
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise SerializationError(f"Malformed cache entry: {exc!r}") from exc


class BaseSerializer:
    """
    Turns cache entries into strings or bytes and back.

    `loads` raises `SerializationError` for any data it cannot read.
    """

    def dumps(self, entry: CacheEntry) -> tp.Union[str, bytes]:
        raise NotImplementedError()

    def loads(self, data: tp.Union[str, bytes]) -> CacheEntry:
        raise NotImplementedError()


class PickleSerializer(BaseSerializer):
    """
    A simple pickle-based serializer.

    Only load data written by a trusted process.
    """

    def dumps(self, entry: CacheEntry) -> tp.Union[str, bytes]:
        return pickle.dumps(entry)

    def loads(self, data: tp.Union[str, bytes]) -> CacheEntry:
        if not isinstance(data, bytes):
            raise SerializationError(f"Pickled data must be bytes, got {type(data).__name__}.")

        try:
            entry = pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError, IndexError, TypeError, ValueError) as exc:
            raise SerializationError(f"Could not unpickle the entry: {exc!r}") from exc

        if not isinstance(entry, CacheEntry):
            raise SerializationError(f"Expected a CacheEntry, got {type(entry).__name__}.")
        return entry


class JSONSerializer(BaseSerializer):
    """A simple json-based serializer."""

    def dumps(self, entry: CacheEntry) -> tp.Union[str, bytes]:
        """
        Dumps the cache entry.

        :param entry: A cache entry
        :type entry: CacheEntry
        :return: Serialized entry
        :rtype: tp.Union[str, bytes]
        """
        return json.dumps(entry_to_dict(entry), indent=4)

    def loads(self, data: tp.Union[str, bytes]) -> CacheEntry:
        """
        Loads the cache entry from serialized data.

        :param data: Serialized data
        :type data: tp.Union[str, bytes]
        :raises SerializationError: When the data is not a valid entry
        :return: The cache entry
        :rtype: CacheEntry
        """
        try:
            entry_dict = json.loads(data)
        except ValueError as exc:
            raise SerializationError(f"Invalid JSON: {exc}") from exc
        return entry_from_dict(entry_dict)


class YAMLSerializer(BaseSerializer):
    """A simple yaml-based serializer."""

    def __init__(self) -> None:
        if yaml is None:  # pragma: no cover
            raise RuntimeError(
                f"The `{type(self).__name__}` was used, but the required packages were not found. "
                "Check that you have `recache` installed with the `yaml` extension as shown.\n"
                "```pip install recache[yaml]```"
            )

    def dumps(self, entry: CacheEntry) -> tp.Union[str, bytes]:
        return tp.cast(str, yaml.safe_dump(entry_to_dict(entry), sort_keys=False))

    def loads(self, data: tp.Union[str, bytes]) -> CacheEntry:
        try:
            entry_dict = yaml.safe_load(data)
        except yaml.YAMLError as exc:
            raise SerializationError(f"Invalid YAML: {exc}") from exc
        return entry_from_dict(entry_dict)
