from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeVar, Union

T = TypeVar("T")

DropCallback = Callable[[T], None]


class ChannelClosed(Exception):
    """The other end of the channel has been closed."""

    pass


@dataclass(frozen=True)
class Record:
    """One line of input, without its line terminator."""

    text: str


@dataclass(frozen=True)
class Terminate:
    """End of input; the consumer stops once it sees this."""


TERMINATE = Terminate()

ControlMessage = Union[Record, Terminate]
