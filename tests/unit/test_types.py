"""Unit tests for the pywsclient.types module."""

import typing

from pywsclient import types
from pywsclient.config import ClientConfig
from pywsclient.events import Event


class TestTypes:
    def test_public_names(self) -> None:
        assert sorted(types.__all__) == [
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

    def test_aliases_annotate_library_fields(self) -> None:
        assert typing.get_type_hints(ClientConfig)["heartbeat"] == types.Timeout
        assert typing.get_type_hints(Event)["timestamp"] is float

    def test_connection_states(self) -> None:
        assert [state.value for state in types.ConnectionState] == ["idle", "connecting", "open", "closing", "closed"]

    def test_event_types(self) -> None:
        assert {event_type.value for event_type in types.EventType} == {"open", "message", "error", "close"}
