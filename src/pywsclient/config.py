"""Configuration for the WebSocket client."""

from __future__ import annotations

import copy
import ssl
from dataclasses import dataclass, field, fields
from typing import Any, Self

from pywsclient.constants import (
    DEFAULT_CLIENT_VERIFY_MODE,
    DEFAULT_CLOSE_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HEARTBEAT,
    DEFAULT_MAX_EVENT_LISTENERS,
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_USER_AGENT,
    USER_AGENT_HEADER,
)
from pywsclient.exceptions import ConfigurationError
from pywsclient.types import Headers, Timeout
from pywsclient.utils import normalize_headers

__all__: list[str] = ["ClientConfig"]


@dataclass(kw_only=True)
class ClientConfig:
    """Configuration for a WebSocket client and its transport."""

    ca_certs: str | None = None
    close_timeout: float = DEFAULT_CLOSE_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    headers: Headers = field(default_factory=dict)
    heartbeat: Timeout = DEFAULT_HEARTBEAT
    max_event_listeners: int = DEFAULT_MAX_EVENT_LISTENERS
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE
    user_agent: str = DEFAULT_USER_AGENT
    verify_mode: ssl.VerifyMode | None = DEFAULT_CLIENT_VERIFY_MODE

    def __post_init__(self) -> None:
        """Normalize headers and validate the configuration."""
        if isinstance(self.verify_mode, str):
            try:
                self.verify_mode = ssl.VerifyMode[self.verify_mode]
            except KeyError:
                raise ConfigurationError(
                    f"Invalid value for 'verify_mode': unknown SSL verify mode '{self.verify_mode}'",
                    config_key="verify_mode",
                ) from None

        self.headers = normalize_headers(headers=self.headers)
        self.headers.setdefault(USER_AGENT_HEADER, self.user_agent)
        self.validate()

    @classmethod
    def from_dict(cls, *, config_dict: dict[str, Any]) -> Self:
        """Create a configuration from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in config_dict.items() if key in known})

    def copy(self) -> Self:
        """Return a deep copy of the configuration."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert the configuration to a dictionary."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, ssl.VerifyMode):
                value = value.name
            elif isinstance(value, dict):
                value = dict(value)
            result[f.name] = value
        return result

    def update(self, **kwargs: Any) -> Self:
        """Return a new configuration with the given fields replaced."""
        known = {f.name for f in fields(self)}
        for key in kwargs:
            if key not in known:
                raise ConfigurationError(f"Unknown configuration key: '{key}'", config_key=key)

        new_config = self.copy()
        if "user_agent" in kwargs and new_config.headers.get(USER_AGENT_HEADER) == self.user_agent:
            del new_config.headers[USER_AGENT_HEADER]
        for key, value in kwargs.items():
            setattr(new_config, key, value)
        new_config.__post_init__()
        return new_config

    def validate(self) -> None:
        """Validate the configuration values."""
        _validate_timeout(key="close_timeout", value=self.close_timeout)
        _validate_timeout(key="connect_timeout", value=self.connect_timeout)
        if self.heartbeat is not None:
            _validate_timeout(key="heartbeat", value=self.heartbeat)

        for key in ("max_event_listeners", "max_message_size"):
            if getattr(self, key) <= 0:
                raise ConfigurationError(f"Invalid value for '{key}': must be positive", config_key=key)

        if not self.user_agent:
            raise ConfigurationError("Invalid value for 'user_agent': cannot be empty", config_key="user_agent")


def _validate_timeout(*, key: str, value: Any) -> None:
    """Validate that a timeout value is a positive number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"Invalid value for '{key}': Timeout must be a number", config_key=key)
    if value <= 0:
        raise ConfigurationError(f"Invalid value for '{key}': Timeout must be positive", config_key=key)
