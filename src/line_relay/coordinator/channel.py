from __future__ import annotations

import threading
from collections import deque
from typing import Generic, Optional

from .types import ChannelClosed, DropCallback, T


class _RingBuffer(Generic[T]):
    """Fixed-capacity buffer shared by one sender and one receiver.

    When full, ``push`` evicts the oldest entry instead of blocking.
    """

    def __init__(self, capacity: int, drop_callback: Optional[DropCallback[T]] = None):
        if capacity <= 0:
            raise ValueError("capacity must be > 0")

        self._capacity = capacity
        self._items: deque[T] = deque()
        self._drop_cb = drop_callback
        self._dropped = 0

        self._sender_open = True
        self._receiver_open = True

        self._cond = threading.Condition()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        with self._cond:
            return len(self._items)

    @property
    def dropped(self) -> int:
        with self._cond:
            return self._dropped

    def push(self, item: T) -> None:
        evicted: Optional[T] = None
        has_evicted = False
        with self._cond:
            if not self._receiver_open:
                raise ChannelClosed("receiver has been closed")
            if len(self._items) >= self._capacity:
                evicted = self._items.popleft()
                has_evicted = True
                self._dropped += 1
            self._items.append(item)
            self._cond.notify()

        # callback runs outside the lock so it may inspect the channel
        if has_evicted and self._drop_cb:
            self._drop_cb(evicted)

    def pop(self, timeout: float | None = None) -> T:
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._items or not self._sender_open, timeout=timeout
            )
            if self._items:
                return self._items.popleft()
            if not ready:
                raise TimeoutError("no message within timeout")
            raise ChannelClosed("sender has been closed")

    def close_sender(self) -> None:
        with self._cond:
            self._sender_open = False
            self._cond.notify_all()

    def close_receiver(self) -> None:
        with self._cond:
            self._receiver_open = False
            self._items.clear()


class RingSender(Generic[T]):
    """Producer end of a ring channel. ``send`` never blocks."""

    def __init__(self, buf: _RingBuffer[T]):
        self._buf = buf

    @property
    def capacity(self) -> int:
        return self._buf.capacity

    @property
    def size(self) -> int:
        return self._buf.size

    @property
    def dropped(self) -> int:
        """Number of messages evicted to make room for newer ones."""
        return self._buf.dropped

    def send(self, item: T) -> None:
        """Append ``item``, evicting the oldest pending message if the channel is full.

        Raises:
            ChannelClosed: the receiver has been closed.
        """
        self._buf.push(item)

    def close(self) -> None:
        self._buf.close_sender()

    def __enter__(self) -> RingSender[T]:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class RingReceiver(Generic[T]):
    """Consumer end of a ring channel."""

    def __init__(self, buf: _RingBuffer[T]):
        self._buf = buf

    @property
    def size(self) -> int:
        return self._buf.size

    def recv(self, timeout: float | None = None) -> T:
        """Return the oldest pending message, waiting until one arrives.

        Raises:
            ChannelClosed: the sender has been closed and nothing is left.
            TimeoutError: ``timeout`` elapsed with nothing available.
        """
        return self._buf.pop(timeout)

    def __iter__(self):
        while True:
            try:
                yield self.recv()
            except ChannelClosed:
                return

    def close(self) -> None:
        self._buf.close_receiver()

    def __enter__(self) -> RingReceiver[T]:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def ring_channel(
    capacity: int = 1024,
    *,
    drop_callback: Optional[DropCallback[T]] = None,
) -> tuple[RingSender[T], RingReceiver[T]]:
    """Create a connected sender/receiver pair holding at most ``capacity`` messages."""
    buf: _RingBuffer[T] = _RingBuffer(capacity, drop_callback)
    return RingSender(buf), RingReceiver(buf)
