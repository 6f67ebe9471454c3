"""The queue-based WebSocket client."""

from .client import ClientDiagnostics, WebSocketClient

__all__: list[str] = ["ClientDiagnostics", "WebSocketClient"]
