__all__ = ("CacheControlError", "ParseError", "ValidationError", "SerializationError", "StorageError")


class CacheControlError(Exception): ...


class ParseError(CacheControlError): ...


class ValidationError(CacheControlError): ...


class SerializationError(Exception):
    """Raised by serializers when stored data cannot be turned back into a cache entry."""


class StorageError(Exception):
    """Raised by storage backends when the underlying store fails."""
