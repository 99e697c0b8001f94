"""
Relay Store Client Library

Thin connection and command layer over Redis used by line-relay.

Usage:
    from relay_client import StoreConfig, StoreCommand, connect, get_operation

    conn = connect(StoreConfig(address="localhost:6379", connect_timeout=5))
    conn.execute(get_operation(StoreCommand.RPUSH), "lines", "hello")
"""

from .client import StoreConfig, StoreConnection, build_url, connect, validate_address
from .errors import (
    ConnectError,
    FatalStoreError,
    RetryableError,
    StoreOperationalError,
    map_redis_error,
)
from .operations import OPERATIONS, RPush, StoreCommand, StoreOperation, get_operation

__version__ = "0.1.0"
__all__ = [
    "StoreConfig",
    "StoreConnection",
    "build_url",
    "validate_address",
    "connect",
    "ConnectError",
    "FatalStoreError",
    "RetryableError",
    "StoreOperationalError",
    "map_redis_error",
    "OPERATIONS",
    "RPush",
    "StoreCommand",
    "StoreOperation",
    "get_operation",
]
