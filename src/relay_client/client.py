from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import redis
from redis.connection import parse_url

from .errors import ConnectError, map_redis_error
from .operations import StoreOperation

_URL_SCHEMES = ("redis://", "rediss://", "unix://")


def build_url(address: str) -> str:
    """Turn a bare host address (``host``, ``host:port``, ``host/db``) into a redis URL."""
    address = address.strip()
    if not address:
        raise ValueError("address must not be empty")
    if address.startswith(_URL_SCHEMES):
        return address
    return f"redis://{address}"


def validate_address(address: str) -> str:
    """Return the redis URL for ``address``, raising ValueError if it cannot be parsed."""
    url = build_url(address)
    parse_url(url)
    return url


@dataclass(frozen=True)
class StoreConfig:
    address: str
    connect_timeout: float = 5.0
    # applies to reads/writes on an established connection; None waits forever
    socket_timeout: Optional[float] = 5.0

    @property
    def url(self) -> str:
        return build_url(self.address)


class StoreConnection:
    """A single established connection to the store.

    Not thread-safe: exactly one thread may own and use a connection.
    """

    def __init__(self, client: redis.Redis, url: str):
        self._client = client
        self._url = url

    @property
    def url(self) -> str:
        return self._url

    def execute(self, operation: StoreOperation, key: str, value: str) -> None:
        """Run ``operation`` for ``value`` at ``key``.

        Raises:
            RetryableError: the connection is unusable (dropped, refused, I/O error, timeout).
            FatalStoreError: the store rejected the command.
        """
        try:
            operation.execute(self._client, key, value)
        except (redis.RedisError, OSError) as e:
            raise map_redis_error(e) from e

    def close(self) -> None:
        try:
            self._client.close()
        except (redis.RedisError, OSError):
            # the socket is usually already broken when we get here
            pass


def connect(config: StoreConfig) -> StoreConnection:
    """Open and verify a connection, bounded by ``config.connect_timeout``.

    Raises:
        ConnectError: the connection could not be established.
        ValueError: the address is not a valid redis URL; retrying cannot help.
    """
    url = validate_address(config.address)
    try:
        client = redis.Redis.from_url(
            url,
            socket_connect_timeout=config.connect_timeout,
            socket_timeout=config.socket_timeout,
            single_connection_client=True,
            decode_responses=True,
        )
    except (redis.RedisError, OSError) as e:
        raise ConnectError(f"{url}: {e}") from e

    conn = StoreConnection(client, url)
    try:
        client.ping()
    except (redis.RedisError, OSError) as e:
        conn.close()
        raise ConnectError(f"{url}: {e}") from e
    return conn
