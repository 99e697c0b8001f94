"""Relay coordinator

Core producer→channel→writer pipeline with:
- Ring channel (fixed capacity, evicts the oldest message instead of blocking)
- Failure classification (transient vs fatal)
- StoreWriter with a fixed-delay reconnect loop
- LineRelay orchestration & graceful shutdown
- Prometheus metrics
"""

from .types import ChannelClosed, ControlMessage, DropCallback, Record, Terminate, TERMINATE, T
from .channel import RingReceiver, RingSender, ring_channel
from .policy import FailureClass, ReconnectPolicy, classify_failure
from .writer import StoreWriter, WriterState, WriterStats, connect_until_successful
from .relay import LineRelay, RelayResult

__all__ = [
    # types
    "ChannelClosed",
    "ControlMessage",
    "DropCallback",
    "Record",
    "Terminate",
    "TERMINATE",
    "T",
    # channel
    "RingReceiver",
    "RingSender",
    "ring_channel",
    # policies
    "FailureClass",
    "ReconnectPolicy",
    "classify_failure",
    # runtime
    "StoreWriter",
    "WriterState",
    "WriterStats",
    "connect_until_successful",
    "LineRelay",
    "RelayResult",
]
