"""Protocol constants and library defaults."""

from __future__ import annotations

import ssl
from enum import IntEnum
from typing import Any

from pywsclient.version import __version__

__all__: list[str] = [
    "BINARY_TYPE_BYTES",
    "CloseCode",
    "DEFAULT_CLIENT_VERIFY_MODE",
    "DEFAULT_CLOSE_TIMEOUT",
    "DEFAULT_CONNECT_TIMEOUT",
    "DEFAULT_HEARTBEAT",
    "DEFAULT_MAX_EVENT_LISTENERS",
    "DEFAULT_MAX_MESSAGE_SIZE",
    "DEFAULT_USER_AGENT",
    "MAX_CLOSE_REASON_BYTES",
    "USER_AGENT_HEADER",
    "WEBSOCKET_SCHEMES",
    "get_default_client_config",
]


class CloseCode(IntEnum):
    """WebSocket close status codes as defined by RFC 6455."""

    NORMAL_CLOSURE = 1000
    GOING_AWAY = 1001
    PROTOCOL_ERROR = 1002
    UNSUPPORTED_DATA = 1003
    NO_STATUS_RECEIVED = 1005
    ABNORMAL_CLOSURE = 1006
    INVALID_PAYLOAD = 1007
    POLICY_VIOLATION = 1008
    MESSAGE_TOO_BIG = 1009
    MANDATORY_EXTENSION = 1010
    INTERNAL_ERROR = 1011
    SERVICE_RESTART = 1012
    TRY_AGAIN_LATER = 1013
    BAD_GATEWAY = 1014
    TLS_HANDSHAKE = 1015


BINARY_TYPE_BYTES: str = "bytes"
DEFAULT_CLIENT_VERIFY_MODE: ssl.VerifyMode = ssl.CERT_REQUIRED
DEFAULT_CLOSE_TIMEOUT: float = 10.0
DEFAULT_CONNECT_TIMEOUT: float = 30.0
DEFAULT_HEARTBEAT: float | None = None
DEFAULT_MAX_EVENT_LISTENERS: int = 100
DEFAULT_MAX_MESSAGE_SIZE: int = 4 * 1024 * 1024
DEFAULT_USER_AGENT: str = f"pywsclient/{__version__}"
MAX_CLOSE_REASON_BYTES: int = 123
USER_AGENT_HEADER: str = "user-agent"
WEBSOCKET_SCHEMES: tuple[str, ...] = ("ws", "wss")


def get_default_client_config() -> dict[str, Any]:
    """Return the default client configuration as a dictionary."""
    return {
        "ca_certs": None,
        "close_timeout": DEFAULT_CLOSE_TIMEOUT,
        "connect_timeout": DEFAULT_CONNECT_TIMEOUT,
        "headers": {},
        "heartbeat": DEFAULT_HEARTBEAT,
        "max_event_listeners": DEFAULT_MAX_EVENT_LISTENERS,
        "max_message_size": DEFAULT_MAX_MESSAGE_SIZE,
        "user_agent": DEFAULT_USER_AGENT,
        "verify_mode": DEFAULT_CLIENT_VERIFY_MODE,
    }
