"""
Statemap Errors — Exception Hierarchy

Every error raised by the statemap package derives from StatemapError so
callers can catch the whole family at one seam. Errors are always raised
to the immediate caller; nothing is retried or recovered internally.
"""


class StatemapError(Exception):
    """Base class for all statemap errors."""
    pass


class InvalidTimestamp(StatemapError, ValueError):
    """Raised when calendar fields do not form a valid u64 nanosecond timestamp."""
    pass


class SerializationFailure(StatemapError):
    """Raised when a header or data record cannot be encoded as JSON."""
    pass


class MalformedInput(StatemapError, ValueError):
    """Raised when an external JSON record does not match its strict schema."""
    pass


class StoreConsumed(StatemapError, RuntimeError):
    """Raised when a timeline store is used after conversion into a cursor."""
    pass
