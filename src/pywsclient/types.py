"""Core data types and enumerations for the library."""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from typing import Any, TypeAlias

__all__: list[str] = [
    "ConnectionState",
    "Data",
    "EventData",
    "EventType",
    "Headers",
    "Protocols",
    "ReadyState",
    "Timeout",
    "Timestamp",
    "URL",
]


Data: TypeAlias = bytes | bytearray | memoryview | str
EventData: TypeAlias = Any
Headers: TypeAlias = dict[str, str]
Protocols: TypeAlias = str | Sequence[str] | None
Timeout: TypeAlias = float | None
Timestamp: TypeAlias = float
URL: TypeAlias = str


class ConnectionState(StrEnum):
    """Enumeration of client connection states."""

    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class EventType(StrEnum):
    """Enumeration of transport notification types."""

    CLOSE = "close"
    ERROR = "error"
    MESSAGE = "message"
    OPEN = "open"


class ReadyState(StrEnum):
    """Enumeration of underlying socket states."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"
