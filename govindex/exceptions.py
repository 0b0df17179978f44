"""
govindex Exceptions

Custom exception classes for the governance indexer.

Integrity problems in the event stream are NOT exceptions: they are reported
as faults (see govindex.engine.faults) and processing continues. The classes
below cover configuration, decoding and contract misuse.
"""


class GovIndexException(Exception):
    """Base exception for govindex."""
    pass


class ConfigurationError(GovIndexException):
    """Configuration error."""
    pass


class StoreError(GovIndexException):
    """Entity store error."""
    pass


class EntityNotFoundError(StoreError):
    """Entity requested with `require` does not exist."""
    pass


class TransactionError(StoreError):
    """Store transaction scope misused (nested or not open)."""
    pass


class EventError(GovIndexException):
    """Event-related error."""
    pass


class EventDecodeError(EventError):
    """A raw event record could not be turned into a typed event."""
    pass


class UnknownEventError(EventError):
    """Event name has no registered event type."""
    pass


class EventProcessingError(GovIndexException):
    """A transition failed and the engine is configured to halt."""
    pass


class ReentrantProcessingError(EventProcessingError):
    """An event was submitted while another event of the same shard was in progress."""
    pass
