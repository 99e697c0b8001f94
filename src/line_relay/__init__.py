"""
line-relay

Relays lines from a live input stream into a Redis list without ever
blocking the producer, reconnecting transparently when Redis goes away.

Usage:
    from line_relay import LineRelay, StoreWriter, ReconnectPolicy

    relay = LineRelay(make_writer, capacity=1024)
    result = relay.run(iter_lines(sys.stdin))
"""

from .coordinator import (
    ChannelClosed,
    LineRelay,
    ReconnectPolicy,
    RelayResult,
    StoreWriter,
    ring_channel,
)
from .utils import iter_lines

__version__ = "0.1.0"
__all__ = [
    "ChannelClosed",
    "LineRelay",
    "ReconnectPolicy",
    "RelayResult",
    "StoreWriter",
    "ring_channel",
    "iter_lines",
]
