"""Unit tests for the pywsclient.config module."""

import ssl
from typing import Any

import pytest

from pywsclient import ClientConfig, ConfigurationError, __version__
from pywsclient.constants import (
    DEFAULT_CLOSE_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MAX_MESSAGE_SIZE,
    get_default_client_config,
)


class TestClientConfig:

    def test_copy_is_deep(self) -> None:
        config1 = ClientConfig(headers={"X-Token": "abc"})
        config2 = config1.copy()

        config2.headers["x-token"] = "changed"

        assert config1 is not config2
        assert config1.headers["x-token"] == "abc"

    def test_default_initialization(self) -> None:
        config = ClientConfig()

        assert config.connect_timeout == DEFAULT_CONNECT_TIMEOUT
        assert config.close_timeout == DEFAULT_CLOSE_TIMEOUT
        assert config.max_message_size == DEFAULT_MAX_MESSAGE_SIZE
        assert config.heartbeat is None
        assert config.verify_mode == ssl.CERT_REQUIRED
        assert config.user_agent == f"pywsclient/{__version__}"
        assert config.headers == {"user-agent": f"pywsclient/{__version__}"}

    def test_defaults_match_constants(self) -> None:
        config = ClientConfig.from_dict(config_dict=get_default_client_config())

        assert config == ClientConfig()

    def test_explicit_user_agent_header_wins(self) -> None:
        config = ClientConfig(headers={"User-Agent": "custom/1.0"})

        assert config.headers == {"user-agent": "custom/1.0"}

    def test_from_dict_ignores_unknown_keys(self) -> None:
        config = ClientConfig.from_dict(config_dict={"connect_timeout": 5, "unknown_field": True})

        assert config.connect_timeout == 5
        assert not hasattr(config, "unknown_field")

    def test_headers_are_normalized(self) -> None:
        config = ClientConfig(headers={"X-Custom": "Value"})

        assert config.headers["x-custom"] == "Value"
        assert "X-Custom" not in config.headers

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"connect_timeout": 0}, "Timeout must be positive"),
            ({"close_timeout": -1.0}, "Timeout must be positive"),
            ({"connect_timeout": "10"}, "Timeout must be a number"),
            ({"heartbeat": True}, "Timeout must be a number"),
            ({"max_event_listeners": 0}, "must be positive"),
            ({"max_message_size": 0}, "must be positive"),
            ({"user_agent": ""}, "cannot be empty"),
            ({"verify_mode": "CERT_SOMETIMES"}, "unknown SSL verify mode"),
        ],
    )
    def test_invalid_values(self, kwargs: dict[str, Any], match: str) -> None:
        with pytest.raises(ConfigurationError, match=match) as exc_info:
            ClientConfig(**kwargs)

        assert exc_info.value.config_key == next(iter(kwargs))

    def test_to_dict(self) -> None:
        config = ClientConfig(verify_mode=ssl.CERT_NONE, heartbeat=15.0)

        result = config.to_dict()

        assert result["verify_mode"] == "CERT_NONE"
        assert result["heartbeat"] == 15.0
        assert result["headers"] == config.headers
        assert result["headers"] is not config.headers

    def test_update_returns_new_config(self) -> None:
        config = ClientConfig()

        updated = config.update(connect_timeout=3.0, heartbeat=20.0)

        assert updated.connect_timeout == 3.0
        assert updated.heartbeat == 20.0
        assert config.connect_timeout == DEFAULT_CONNECT_TIMEOUT

    def test_update_replaces_default_user_agent_header(self) -> None:
        config = ClientConfig()

        updated = config.update(user_agent="bot/2.0")

        assert updated.headers["user-agent"] == "bot/2.0"

    def test_update_rejects_unknown_key(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown configuration key") as exc_info:
            ClientConfig().update(retries=3)

        assert exc_info.value.config_key == "retries"

    def test_update_validates(self) -> None:
        with pytest.raises(ConfigurationError):
            ClientConfig().update(close_timeout=0)

    def test_verify_mode_from_string(self) -> None:
        config = ClientConfig(verify_mode="CERT_OPTIONAL")  # type: ignore[arg-type]

        assert config.verify_mode == ssl.CERT_OPTIONAL
