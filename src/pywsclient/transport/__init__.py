"""Socket transports that publish open, message, error and close events."""

from ._adapter import AiohttpTransport, create_transport
from .transport import CloseDescriptor, TransportFactory, WebSocketTransport

__all__: list[str] = [
    "AiohttpTransport",
    "CloseDescriptor",
    "TransportFactory",
    "WebSocketTransport",
    "create_transport",
]
