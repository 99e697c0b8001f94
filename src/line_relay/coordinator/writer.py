from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from relay_client import ConnectError, StoreConnection, StoreOperation, StoreOperationalError

from ..metrics.registry import metrics_registry
from .policy import FailureClass, ReconnectPolicy, classify_failure

Connector = Callable[[], StoreConnection]


class WriterState(str, Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


@dataclass(frozen=True)
class WriterStats:
    stored: int
    abandoned: int
    reconnects: int


def connect_until_successful(connect: Connector, policy: ReconnectPolicy) -> StoreConnection:
    """Call ``connect`` until it succeeds, waiting ``policy.delay_sec`` after each failure."""
    attempt = 0
    while True:
        attempt += 1
        try:
            conn = connect()
        except ConnectError as e:
            metrics_registry.connect_attempts_total.labels(outcome="error").inc()
            logger.warning(f"Connect failed (attempt {attempt}): {e}, trying again...")
            policy.wait()
            continue
        metrics_registry.connect_attempts_total.labels(outcome="ok").inc()
        return conn


class StoreWriter:
    """Writes records to the store one at a time, reconnecting on connection loss.

    Owns its connection exclusively; use from a single thread only.

    Construction blocks until the first connection succeeds. ``feed`` retries a
    record for as long as failures are transient, and abandons it on the first
    fatal failure.

    Example:
        writer = StoreWriter(
            connect=partial(connect, StoreConfig(address="localhost")),
            operation=get_operation(StoreCommand.RPUSH),
            key="lines",
            reconnect_policy=ReconnectPolicy(delay_sec=5),
        )
        writer.feed("hello")
    """

    def __init__(
        self,
        connect: Connector,
        operation: StoreOperation,
        key: str,
        reconnect_policy: Optional[ReconnectPolicy] = None,
        *,
        classifier: Callable[[BaseException], FailureClass] = classify_failure,
    ):
        self._connect = connect
        self._operation = operation
        self._key = key
        self._policy = reconnect_policy or ReconnectPolicy()
        self._classify = classifier

        self._stored = 0
        self._abandoned = 0
        self._reconnects = 0

        self._state = WriterState.CONNECTING
        self._conn: Optional[StoreConnection] = connect_until_successful(connect, self._policy)
        self._state = WriterState.CONNECTED
        logger.info("Connected")

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def key(self) -> str:
        return self._key

    def stats(self) -> WriterStats:
        return WriterStats(
            stored=self._stored,
            abandoned=self._abandoned,
            reconnects=self._reconnects,
        )

    def feed(self, record: str) -> bool:
        """Store ``record``. Returns True if stored, False if it was abandoned."""
        if self._conn is None:
            raise RuntimeError("StoreWriter is closed")

        while True:
            try:
                self._conn.execute(self._operation, self._key, record)
            except StoreOperationalError as e:
                if self._classify(e) is FailureClass.TRANSIENT:
                    logger.warning(f"Connection to store failed: {e}, reconnecting")
                    self._reconnect()
                    continue
                logger.error(
                    f"{self._operation.name} into {self._key!r} failed, dropping record: {e}"
                )
                self._abandoned += 1
                metrics_registry.records_total.labels(outcome="abandoned").inc()
                return False

            self._stored += 1
            metrics_registry.records_total.labels(outcome="stored").inc()
            return True

    def _reconnect(self) -> None:
        self._state = WriterState.RECONNECTING
        if self._conn is not None:
            self._conn.close()
            self._conn = None

        self._reconnects += 1
        metrics_registry.reconnects_total.inc()

        # keeps consecutive reconnect cycles at least one delay apart
        self._policy.wait()
        self._conn = connect_until_successful(self._connect, self._policy)
        self._state = WriterState.CONNECTED
        logger.info("Reconnected")

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        self._state = WriterState.CLOSED

    def __enter__(self) -> StoreWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
