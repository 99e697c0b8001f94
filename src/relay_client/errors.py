"""
Custom exceptions for the relay store client.

Provides structured error handling so callers can decide between
reconnect-and-retry and abandoning a record.
"""


class StoreOperationalError(Exception):
    """Base operational error for the store client."""

    pass


class RetryableError(StoreOperationalError):
    """Connection-level errors that should be retried after reconnecting."""

    pass


class FatalStoreError(StoreOperationalError):
    """Errors the store reported for this command (wrong type, rejected, ...)."""

    pass


class ConnectError(StoreOperationalError):
    """Connection could not be established."""

    pass


def map_redis_error(e: Exception) -> StoreOperationalError:
    import redis.exceptions as R

    if isinstance(e, StoreOperationalError):
        return e
    # TimeoutError and BusyLoadingError are ConnectionError in some redis-py
    # versions but not all, so list them explicitly.
    if isinstance(e, (R.ConnectionError, R.TimeoutError, R.BusyLoadingError, OSError)):
        return RetryableError(str(e))
    return FatalStoreError(str(e))
