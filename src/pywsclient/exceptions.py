"""Exception hierarchy for the client and its transports."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from pywsclient.constants import CloseCode

if TYPE_CHECKING:
    from pywsclient.transport.transport import CloseDescriptor
    from pywsclient.types import ReadyState


__all__: list[str] = [
    "ConfigurationError",
    "ConnectFailedError",
    "ConnectionClosedError",
    "NotConnectedError",
    "TransportError",
    "WebSocketClientError",
]

_FATAL_CODES: frozenset[int] = frozenset(
    {
        CloseCode.INTERNAL_ERROR,
        CloseCode.MANDATORY_EXTENSION,
        CloseCode.POLICY_VIOLATION,
        CloseCode.PROTOCOL_ERROR,
        CloseCode.TLS_HANDSHAKE,
    }
)
_RETRIABLE_CODES: frozenset[int] = frozenset(
    {
        CloseCode.ABNORMAL_CLOSURE,
        CloseCode.BAD_GATEWAY,
        CloseCode.GOING_AWAY,
        CloseCode.SERVICE_RESTART,
        CloseCode.TRY_AGAIN_LATER,
    }
)
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class WebSocketClientError(Exception):
    """Base exception for all library errors."""

    default_error_code: int = CloseCode.INTERNAL_ERROR
    _extra_attributes: tuple[str, ...] = ()

    def __init__(self, message: str, *, error_code: int | None = None, details: dict[str, Any] | None = None) -> None:
        """Initialize the error."""
        super().__init__(message)
        self.message = message
        self.error_code = error_code if error_code is not None else self.default_error_code
        self.details = details or {}

    @property
    def category(self) -> str:
        """Return a snake_case category derived from the class name."""
        name = type(self).__name__
        if name.endswith("Error"):
            name = name[: -len("Error")]
        return _CAMEL_BOUNDARY.sub("_", name).lower()

    @property
    def is_fatal(self) -> bool:
        """Return True if the error code indicates an unrecoverable condition."""
        return self.error_code in _FATAL_CODES

    @property
    def is_retriable(self) -> bool:
        """Return True if reconnecting may succeed."""
        return self.error_code in _RETRIABLE_CODES

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a dictionary."""
        data: dict[str, Any] = {
            "type": type(self).__name__,
            "category": self.category,
            "message": self.message,
            "error_code": self.error_code,
            "is_fatal": self.is_fatal,
            "is_retriable": self.is_retriable,
            "details": self.details,
        }
        for attr in self._extra_attributes:
            value = getattr(self, attr, None)
            if hasattr(value, "to_dict"):
                value = value.to_dict()
            data[attr] = value
        return data

    def __repr__(self) -> str:
        """Provide a developer-friendly representation."""
        parts = [f"message={self.message!r}", f"error_code={self.error_code}"]
        for attr in self._extra_attributes:
            value = getattr(self, attr, None)
            if value is not None:
                parts.append(f"{attr}={value!r}")
        if self.details:
            parts.append(f"details={self.details!r}")
        return f"{type(self).__name__}({', '.join(parts)})"

    def __str__(self) -> str:
        """Return the error code and message."""
        return f"[{self.error_code}] {self.message}"


class ConfigurationError(WebSocketClientError):
    """Raised for invalid client configuration."""

    _extra_attributes = ("config_key",)

    def __init__(self, message: str, *, config_key: str | None = None, **kwargs: Any) -> None:
        """Initialize the configuration error."""
        super().__init__(message, **kwargs)
        self.config_key = config_key


class ConnectFailedError(WebSocketClientError):
    """Raised when the transport errors before the connection opens."""

    default_error_code = CloseCode.ABNORMAL_CLOSURE
    _extra_attributes = ("descriptor",)

    def __init__(self, message: str | None = None, *, descriptor: CloseDescriptor, **kwargs: Any) -> None:
        """Initialize the connect failure."""
        kwargs.setdefault("error_code", descriptor.code)
        super().__init__(message or f"Connection failed: {descriptor.reason or 'unknown error'}", **kwargs)
        self.descriptor = descriptor


class NotConnectedError(WebSocketClientError):
    """Raised when sending or receiving without a live connection."""

    default_error_code = CloseCode.ABNORMAL_CLOSURE
    _extra_attributes = ("descriptor",)

    def __init__(
        self, message: str = "Not connected.", *, descriptor: CloseDescriptor | None = None, **kwargs: Any
    ) -> None:
        """Initialize the not-connected error."""
        if descriptor is not None:
            kwargs.setdefault("error_code", descriptor.code)
        super().__init__(message, **kwargs)
        self.descriptor = descriptor


class ConnectionClosedError(NotConnectedError):
    """Raised when the connection has been closed or has failed."""

    def __init__(self, message: str | None = None, *, descriptor: CloseDescriptor, **kwargs: Any) -> None:
        """Initialize the connection-closed error."""
        if message is None:
            message = f"Connection closed: code={descriptor.code} reason='{descriptor.reason}'"
        super().__init__(message, descriptor=descriptor, **kwargs)


class TransportError(WebSocketClientError):
    """Raised for misuse of the underlying transport."""

    _extra_attributes = ("ready_state",)

    def __init__(self, message: str, *, ready_state: ReadyState | None = None, **kwargs: Any) -> None:
        """Initialize the transport error."""
        super().__init__(message, **kwargs)
        self.ready_state = ready_state
