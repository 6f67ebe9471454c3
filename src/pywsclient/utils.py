"""Shared helpers for logging, timing, and argument normalization."""

from __future__ import annotations

import logging
import time
from types import TracebackType
from typing import Self
from urllib.parse import urlsplit

from pywsclient.constants import WEBSOCKET_SCHEMES
from pywsclient.types import URL, Data, Headers, Protocols, Timestamp

__all__: list[str] = [
    "Timer",
    "format_duration",
    "get_logger",
    "get_payload_size",
    "get_timestamp",
    "normalize_headers",
    "normalize_protocols",
    "validate_url",
]


def format_duration(*, seconds: float) -> str:
    """Format a duration in seconds into a compact human-readable string."""
    if seconds < 1e-6:
        return f"{seconds * 1e9:.0f}ns"
    if seconds < 1e-3:
        return f"{seconds * 1e6:.1f}µs"
    if seconds < 1:
        return f"{seconds * 1e3:.1f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m{secs:.1f}s"
    hours, minutes = divmod(minutes, 60)
    return f"{int(hours)}h{int(minutes)}m{secs:.1f}s"


def get_payload_size(*, data: Data) -> int:
    """Return the encoded size of a payload in bytes."""
    match data:
        case str():
            return len(data.encode("utf-8"))
        case memoryview():
            return data.nbytes
        case bytes() | bytearray():
            return len(data)
        case _:
            raise TypeError(f"Expected str or bytes-like payload, got {type(data).__name__}")


def get_logger(*, name: str) -> logging.Logger:
    """Get a logger instance with a specific name."""
    return logging.getLogger(name)


def get_timestamp() -> Timestamp:
    """Get a monotonic timestamp in seconds."""
    return time.perf_counter()


def normalize_headers(*, headers: Headers | None) -> Headers:
    """Return a copy of the headers with lower-cased keys."""
    if not headers:
        return {}
    return {key.lower(): value for key, value in headers.items()}


def normalize_protocols(*, protocols: Protocols) -> tuple[str, ...]:
    """Normalize a sub-protocol argument into a tuple of names."""
    if protocols is None:
        return ()
    if isinstance(protocols, str):
        return (protocols,)

    result = tuple(protocols)
    for item in result:
        if not isinstance(item, str) or not item:
            raise ValueError(f"Invalid sub-protocol name: {item!r}")
    if len(set(result)) != len(result):
        raise ValueError(f"Duplicate sub-protocol names: {result!r}")
    return result


class Timer:
    """A simple context manager for timing operations."""

    def __init__(self, *, name: str = "timer") -> None:
        """Initialize the timer."""
        self.name = name
        self.start_time: float | None = None
        self.end_time: float | None = None

    @property
    def elapsed(self) -> float:
        """Get the elapsed time, or the running time if not stopped."""
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time

    def start(self) -> None:
        """Start the timer."""
        self.start_time = time.perf_counter()
        self.end_time = None

    def stop(self) -> float:
        """Stop the timer and return the elapsed time."""
        if self.start_time is None:
            raise RuntimeError("Timer not started")
        self.end_time = time.perf_counter()
        return self.elapsed

    def __enter__(self) -> Self:
        """Start the timer upon entering the context."""
        self.start()
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        """Stop the timer and log the duration upon exiting the context."""
        elapsed = self.stop()
        get_logger(name=__name__).debug("%s took %s", self.name, format_duration(seconds=elapsed))


def validate_url(*, url: URL) -> None:
    """Ensure a URL uses a WebSocket scheme and names a host."""
    parts = urlsplit(url)
    if parts.scheme not in WEBSOCKET_SCHEMES:
        raise ValueError(f"Unsupported URL scheme '{parts.scheme}': expected one of {WEBSOCKET_SCHEMES}")
    if not parts.hostname:
        raise ValueError(f"URL has no host: '{url}'")
    if parts.fragment:
        raise ValueError(f"URL must not contain a fragment: '{url}'")
