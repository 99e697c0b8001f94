from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from loguru import logger

from ..metrics.registry import metrics_registry
from .channel import RingReceiver, RingSender, ring_channel
from .types import TERMINATE, ChannelClosed, ControlMessage, DropCallback, Record, Terminate
from .writer import StoreWriter, WriterStats


@dataclass(frozen=True)
class RelayResult:
    """Outcome of one relay run."""

    sent: int
    dropped: int
    stored: int
    abandoned: int
    reconnects: int


class LineRelay:
    """
    Producer→channel→writer pipeline for a stream of text records.

    The calling thread is the producer: it pushes every record into a ring
    channel and never blocks, losing the oldest pending records when the
    writer falls behind. A dedicated writer thread builds the StoreWriter
    (so input is read while the first connection is still being made) and
    feeds records to it in order until it sees the terminate message.

    Args:
        writer_factory: Builds the StoreWriter; called on the writer thread.
        capacity: Maximum number of pending messages. Default 1024.
        on_drop: Optional callback for each message evicted from the channel.
        relay_id: Name used for the writer thread.

    Example:
        relay = LineRelay(make_writer, capacity=1024)
        result = relay.run(iter_lines(sys.stdin))
    """

    def __init__(
        self,
        writer_factory: Callable[[], StoreWriter],
        capacity: int = 1024,
        *,
        on_drop: Optional[DropCallback[ControlMessage]] = None,
        relay_id: str = "line-relay",
    ):
        if capacity <= 0:
            raise ValueError("capacity must be > 0")

        self._writer_factory = writer_factory
        self._capacity = capacity
        self._on_drop = on_drop
        self._relay_id = relay_id

        self._writer_stats = WriterStats(stored=0, abandoned=0, reconnects=0)
        self._consumer_error: Optional[BaseException] = None

    @property
    def capacity(self) -> int:
        return self._capacity

    def run(self, records: Iterable[str]) -> RelayResult:
        """Relay ``records`` to the store and wait for the writer to finish.

        Raises:
            ChannelClosed: the writer thread stopped before input was exhausted.
            Exception: whatever made the writer thread stop, if it failed.
        """
        self._writer_stats = WriterStats(stored=0, abandoned=0, reconnects=0)
        self._consumer_error = None

        sender, receiver = ring_channel(self._capacity, drop_callback=self._handle_drop)
        worker = threading.Thread(
            target=self._consume,
            args=(receiver,),
            name=f"{self._relay_id}-writer",
            daemon=True,
        )
        worker.start()

        try:
            sent = self._produce(sender, records)
        except ChannelClosed:
            worker.join()
            if self._consumer_error is not None:
                raise self._consumer_error
            raise
        finally:
            # the sender is closed by now, so the writer drains what is queued and exits
            worker.join()

        if self._consumer_error is not None:
            raise self._consumer_error

        stats = self._writer_stats
        return RelayResult(
            sent=sent,
            dropped=sender.dropped,
            stored=stats.stored,
            abandoned=stats.abandoned,
            reconnects=stats.reconnects,
        )

    def _produce(self, sender: RingSender[ControlMessage], records: Iterable[str]) -> int:
        sent = 0
        with sender:
            for text in records:
                sender.send(Record(text))
                sent += 1
                metrics_registry.queue_depth.set(sender.size)
            sender.send(TERMINATE)
        return sent

    def _consume(self, receiver: RingReceiver[ControlMessage]) -> None:
        with receiver:
            try:
                with self._writer_factory() as writer:
                    try:
                        for msg in receiver:
                            metrics_registry.queue_depth.set(receiver.size)
                            if isinstance(msg, Terminate):
                                break
                            writer.feed(msg.text)
                    finally:
                        self._writer_stats = writer.stats()
            except Exception as e:
                logger.exception(f"Writer thread failed: {e}")
                self._consumer_error = e

        logger.info("Writer thread shutting down.")

    def _handle_drop(self, msg: ControlMessage) -> None:
        metrics_registry.records_dropped_total.inc()
        if isinstance(msg, Record):
            logger.debug(f"Channel full, dropped oldest record: {msg.text!r}")
        if self._on_drop:
            self._on_drop(msg)
