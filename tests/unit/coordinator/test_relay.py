"""
Unit tests for LineRelay orchestration & shutdown.
"""

import threading

import pytest
from prometheus_client import REGISTRY

from line_relay.coordinator import (
    LineRelay,
    Record,
    ReconnectPolicy,
    StoreWriter,
)
from relay_client import FatalStoreError, RetryableError, StoreCommand, get_operation


@pytest.fixture
def writer_factory(store, sleeper):
    def factory():
        return StoreWriter(
            store.connect,
            get_operation(StoreCommand.RPUSH),
            "lines",
            ReconnectPolicy(delay_sec=1.0, sleep=sleeper),
        )

    return factory


def test_relay_delivers_every_record_in_order(store, writer_factory):
    lines = [f"line-{i}" for i in range(200)]

    result = LineRelay(writer_factory, capacity=1024).run(lines)

    assert store.lists["lines"] == lines
    assert result.sent == 200
    assert result.stored == 200
    assert result.dropped == 0


def test_relay_with_empty_input_exits(store, writer_factory):
    result = LineRelay(writer_factory, capacity=4).run([])

    assert result.sent == 0
    assert result.stored == 0
    assert store.lists["lines"] == []
    assert store.connections[0].closed


def test_relay_reports_retries_and_abandoned_records(store, writer_factory, sleeper):
    store.failures["x"] = [RetryableError("Connection closed by server.")] * 2
    store.failures["bad"] = [FatalStoreError("WRONGTYPE Operation against a key")]

    result = LineRelay(writer_factory, capacity=16).run(["a", "x", "bad", "b"])

    assert store.lists["lines"] == ["a", "x", "b"]
    assert result.stored == 3
    assert result.abandoned == 1
    assert result.reconnects == 2
    assert sleeper.calls == [1.0, 1.0]


def test_slow_writer_loses_oldest_records(store, sleeper):
    """While the writer is still connecting, only the newest records survive."""
    gate = threading.Event()
    dropped = []

    def slow_factory():
        gate.wait(timeout=5.0)
        return StoreWriter(
            store.connect,
            get_operation(StoreCommand.RPUSH),
            "lines",
            ReconnectPolicy(delay_sec=0, sleep=sleeper),
        )

    lines = [str(i) for i in range(50)]

    def produce():
        yield from lines
        gate.set()

    dropped_before = REGISTRY.get_sample_value("relay_records_dropped_total") or 0.0
    result = LineRelay(slow_factory, capacity=4, on_drop=dropped.append).run(produce())

    stored = store.lists["lines"]
    assert result.sent == 50
    assert result.stored == len(stored)
    assert 3 <= len(stored) <= 4
    # survivors are the newest records, in their original order
    assert stored == lines[-len(stored):]
    assert result.stored + result.dropped == result.sent
    assert all(isinstance(m, Record) for m in dropped)
    assert REGISTRY.get_sample_value("relay_records_dropped_total") == dropped_before + len(
        dropped
    )


def test_writer_factory_failure_is_raised(store):
    def broken_factory():
        raise RuntimeError("cannot build writer")

    relay = LineRelay(broken_factory, capacity=2)
    with pytest.raises(RuntimeError, match="cannot build writer"):
        relay.run(str(i) for i in range(10))


def test_writer_failure_after_input_is_raised(store, writer_factory):
    store.failures["boom"] = [KeyError("unexpected")]

    with pytest.raises(KeyError):
        LineRelay(writer_factory, capacity=8).run(["a", "boom"])


def test_input_error_still_drains_and_joins_writer(store, writer_factory):
    """Records read before the input fails are stored before run() raises."""

    def broken_input():
        yield "a"
        yield "b"
        raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

    relay = LineRelay(writer_factory, capacity=8)
    with pytest.raises(UnicodeDecodeError):
        relay.run(broken_input())

    assert store.lists["lines"] == ["a", "b"]
    assert store.connections[0].closed
    assert not any(t.name == "line-relay-writer" for t in threading.enumerate())


def test_relay_can_run_twice(store, writer_factory):
    relay = LineRelay(writer_factory, capacity=8)

    first = relay.run(["a", "b"])
    second = relay.run(["c"])

    assert (first.stored, second.stored) == (2, 1)
    assert store.lists["lines"] == ["a", "b", "c"]


def test_capacity_must_be_positive(writer_factory):
    with pytest.raises(ValueError):
        LineRelay(writer_factory, capacity=0)
