"""Abstract socket transport that publishes its lifecycle as events."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from pywsclient.config import ClientConfig
from pywsclient.constants import BINARY_TYPE_BYTES, CloseCode
from pywsclient.events import EventEmitter
from pywsclient.types import URL, Data, EventType, ReadyState
from pywsclient.utils import get_logger

__all__: list[str] = ["CloseDescriptor", "TransportFactory", "WebSocketTransport"]

logger = get_logger(name=__name__)


@dataclass(frozen=True, kw_only=True)
class CloseDescriptor:
    """Describes how a connection ended, by close handshake or by error."""

    code: int
    reason: str = ""
    was_clean: bool = False
    error: BaseException | None = None

    @classmethod
    def from_exception(cls, exc: BaseException, *, code: int = CloseCode.ABNORMAL_CLOSURE) -> CloseDescriptor:
        """Build an unclean descriptor from a transport failure."""
        return cls(code=code, reason=str(exc) or type(exc).__name__, was_clean=False, error=exc)

    def to_dict(self) -> dict[str, Any]:
        """Convert the descriptor to a dictionary."""
        return {
            "code": self.code,
            "reason": self.reason,
            "was_clean": self.was_clean,
            "error": repr(self.error) if self.error is not None else None,
        }


class WebSocketTransport(ABC):
    """Base class for an ordered, full-duplex message socket.

    A transport emits `open` once the handshake completes, `message` for every
    inbound payload, `error` on failure and `close` exactly once when the
    socket is finished. `close` always follows `open`, and also follows an
    `error` that happens before `open`.
    """

    events: EventEmitter

    def __init__(self, *, config: ClientConfig) -> None:
        """Initialize the transport in the connecting state."""
        self._config = config
        self._ready_state = ReadyState.CONNECTING
        self._url: URL | None = None
        self._protocol: str | None = None
        self._opened = False
        self._errored = False
        self._close_emitted = False
        self.binary_type = BINARY_TYPE_BYTES
        self.events = EventEmitter(max_listeners=config.max_event_listeners)

    @property
    def config(self) -> ClientConfig:
        """Get the transport configuration."""
        return self._config

    @property
    def protocol(self) -> str | None:
        """Get the sub-protocol selected by the server."""
        return self._protocol

    @property
    def ready_state(self) -> ReadyState:
        """Get the current socket state."""
        return self._ready_state

    @property
    def url(self) -> URL | None:
        """Get the target URL."""
        return self._url

    @abstractmethod
    def close(self, *, code: int | None = None, reason: str | None = None) -> None:
        """Start the close handshake, or abort a handshake still in progress."""
        raise NotImplementedError

    @abstractmethod
    def connect(self, *, url: URL, protocols: tuple[str, ...] = ()) -> None:
        """Start connecting to the given URL."""
        raise NotImplementedError

    @abstractmethod
    def send(self, *, data: Data) -> None:
        """Queue a payload for transmission."""
        raise NotImplementedError

    async def _emit_close(self, *, descriptor: CloseDescriptor) -> None:
        """Mark the socket closed and publish the close notification once."""
        self._ready_state = ReadyState.CLOSED
        if self._close_emitted:
            return
        self._close_emitted = True
        logger.debug("Transport to %s closed: code=%d reason='%s'", self._url, descriptor.code, descriptor.reason)
        await self.events.emit(event_type=EventType.CLOSE, data=descriptor, source=self)

    async def _emit_error(self, *, descriptor: CloseDescriptor) -> None:
        """Publish the error notification once."""
        if self._errored or self._close_emitted:
            return
        self._errored = True
        logger.debug("Transport to %s failed: %s", self._url, descriptor.reason)
        await self.events.emit(event_type=EventType.ERROR, data=descriptor, source=self)

    async def _emit_message(self, *, data: Data) -> None:
        """Publish an inbound payload."""
        if self._ready_state not in (ReadyState.OPEN, ReadyState.CLOSING):
            logger.debug("Dropping message received in state %s", self._ready_state)
            return
        await self.events.emit(event_type=EventType.MESSAGE, data=data, source=self)

    async def _emit_open(self, *, protocol: str | None = None) -> None:
        """Mark the socket open and publish the open notification once."""
        if self._opened or self._ready_state != ReadyState.CONNECTING:
            return
        self._opened = True
        self._protocol = protocol
        self._ready_state = ReadyState.OPEN
        logger.debug("Transport to %s open (protocol=%s)", self._url, protocol)
        await self.events.emit(event_type=EventType.OPEN, source=self)

    def __repr__(self) -> str:
        """Provide a developer-friendly representation."""
        return f"<{self.__class__.__name__} url={self._url} state={self._ready_state}>"


@runtime_checkable
class TransportFactory(Protocol):
    """A callable that builds a fresh transport for each connection."""

    def __call__(self, *, config: ClientConfig) -> WebSocketTransport: ...
