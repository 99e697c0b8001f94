from __future__ import annotations

from enum import Enum
from typing import Protocol

import redis


class StoreCommand(str, Enum):
    """Store commands selectable from the command line."""

    RPUSH = "rpush"  # append to the tail of a list


class StoreOperation(Protocol):
    """A single store command applied to one record."""

    name: str

    def execute(self, client: redis.Redis, key: str, value: str) -> None: ...


class RPush:
    name = "rpush"

    def execute(self, client: redis.Redis, key: str, value: str) -> None:
        client.rpush(key, value)


OPERATIONS: dict[StoreCommand, StoreOperation] = {
    StoreCommand.RPUSH: RPush(),
}


def get_operation(command: StoreCommand | str) -> StoreOperation:
    """Resolve a command selector to its operation."""
    try:
        return OPERATIONS[StoreCommand(command)]
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported store command: {command!r}") from None
