"""
Pytest configuration and fixtures for line-relay.

Provides an in-memory stand-in for Redis and a recording sleep so the
reconnect loop can be exercised without a server or real delays.
"""

import sys
from collections import defaultdict

import pytest
from loguru import logger

from relay_client import ConnectError


class FakeConnection:
    """Connection to a FakeStore; honours the store's scripted failures."""

    def __init__(self, store: "FakeStore"):
        self.store = store
        self.closed = False

    def execute(self, operation, key, value):
        if self.closed:
            raise AssertionError("execute on a closed connection")
        self.store.attempts.append(value)
        scripted = self.store.failures.get(value)
        if scripted:
            raise scripted.pop(0)
        operation.execute(self.store, key, value)

    def close(self):
        self.closed = True


class FakeStore:
    """Quacks like a redis client for the commands the relay uses."""

    def __init__(self):
        self.lists = defaultdict(list)
        self.failures = {}  # value -> exceptions raised on successive attempts
        self.attempts = []
        self.connections = []
        self.connect_attempts = 0
        self.connect_failures = 0

    def rpush(self, key, value):
        self.lists[key].append(value)

    def connect(self):
        self.connect_attempts += 1
        if self.connect_failures > 0:
            self.connect_failures -= 1
            raise ConnectError("Connection refused")
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def store():
    """Empty in-memory store."""
    return FakeStore()


@pytest.fixture
def sleeper():
    """Sleep replacement that records requested delays."""
    return RecordingSleep()


@pytest.fixture
def log_records():
    """Loguru records emitted during the test, as ``(level, message)`` pairs."""
    records = []
    handler_id = logger.add(
        lambda msg: records.append((msg.record["level"].name, msg.record["message"])),
        level="DEBUG",
    )
    yield records
    logger.remove(handler_id)


@pytest.fixture
def restore_logging():
    """Put loguru back on stderr after a test reconfigures it."""
    yield
    logger.remove()
    logger.add(sys.stderr)
