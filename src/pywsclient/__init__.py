"""An asynchronous, queue-based WebSocket client."""

from .client import ClientDiagnostics, WebSocketClient
from .config import ClientConfig
from .constants import CloseCode
from .events import Event, EventEmitter
from .exceptions import (
    ConfigurationError,
    ConnectFailedError,
    ConnectionClosedError,
    NotConnectedError,
    TransportError,
    WebSocketClientError,
)
from .queue import AsyncQueue
from .transport import AiohttpTransport, CloseDescriptor, WebSocketTransport
from .types import URL, ConnectionState, Data, EventType, Headers, ReadyState
from .version import __version__

__all__: list[str] = [
    "AiohttpTransport",
    "AsyncQueue",
    "ClientConfig",
    "ClientDiagnostics",
    "CloseCode",
    "CloseDescriptor",
    "ConfigurationError",
    "ConnectFailedError",
    "ConnectionClosedError",
    "ConnectionState",
    "Data",
    "Event",
    "EventEmitter",
    "EventType",
    "Headers",
    "NotConnectedError",
    "ReadyState",
    "TransportError",
    "URL",
    "WebSocketClient",
    "WebSocketClientError",
    "WebSocketTransport",
    "__version__",
]
