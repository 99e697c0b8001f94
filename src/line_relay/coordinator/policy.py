from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from relay_client.errors import RetryableError, StoreOperationalError, map_redis_error


class FailureClass(str, Enum):
    TRANSIENT = "transient"  # reconnect and retry the same record
    FATAL = "fatal"  # abandon the record


def classify_failure(exc: BaseException) -> FailureClass:
    """Decide whether a failed store attempt is worth reconnecting for."""
    if not isinstance(exc, StoreOperationalError):
        if isinstance(exc, Exception):
            exc = map_redis_error(exc)
        else:
            return FailureClass.FATAL
    if isinstance(exc, RetryableError):
        return FailureClass.TRANSIENT
    return FailureClass.FATAL


@dataclass(frozen=True)
class ReconnectPolicy:
    """Fixed delay between connection attempts, no attempt cap."""

    delay_sec: float = 5.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.delay_sec < 0:
            raise ValueError("delay_sec must be >= 0")

    def wait(self) -> None:
        if self.delay_sec > 0:
            self.sleep(self.delay_sec)
