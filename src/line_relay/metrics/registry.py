"""
Relay metrics, registered in the Prometheus global REGISTRY on import.
"""

from prometheus_client import Counter, Gauge


RELAY_RECORDS_TOTAL = Counter(
    "relay_records_total",
    "Records handed to the store, by outcome",
    ["outcome"],
)

RELAY_RECORDS_DROPPED_TOTAL = Counter(
    "relay_records_dropped_total",
    "Records evicted from the hand-off channel before the writer read them",
)

RELAY_RECONNECTS_TOTAL = Counter(
    "relay_reconnects_total",
    "Reconnect cycles triggered by transient store failures",
)

RELAY_CONNECT_ATTEMPTS_TOTAL = Counter(
    "relay_connect_attempts_total",
    "Connection attempts to the store, by outcome",
    ["outcome"],
)

RELAY_QUEUE_DEPTH = Gauge(
    "relay_queue_depth",
    "Messages waiting in the hand-off channel",
)


class MetricsRegistry:
    """Centralized access to the relay metrics."""

    records_total = RELAY_RECORDS_TOTAL
    records_dropped_total = RELAY_RECORDS_DROPPED_TOTAL
    reconnects_total = RELAY_RECONNECTS_TOTAL
    connect_attempts_total = RELAY_CONNECT_ATTEMPTS_TOTAL
    queue_depth = RELAY_QUEUE_DEPTH


# Singleton instance
metrics_registry = MetricsRegistry()
