"""Queue-based asynchronous WebSocket client."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass
from types import TracebackType
from typing import Self

from pywsclient.config import ClientConfig
from pywsclient.constants import BINARY_TYPE_BYTES, CloseCode
from pywsclient.events import Event
from pywsclient.exceptions import ConnectFailedError, ConnectionClosedError, NotConnectedError
from pywsclient.queue import AsyncQueue
from pywsclient.transport import CloseDescriptor, TransportFactory, WebSocketTransport, create_transport
from pywsclient.types import URL, ConnectionState, Data, EventType, Protocols, ReadyState, Timestamp
from pywsclient.utils import get_logger, get_payload_size, get_timestamp, normalize_protocols, validate_url

__all__: list[str] = ["ClientDiagnostics", "WebSocketClient"]

logger = get_logger(name=__name__)


@dataclass(kw_only=True)
class ClientDiagnostics:
    """A snapshot of client diagnostics."""

    state: ConnectionState
    url: URL | None
    protocol: str | None
    data_available: int
    pending_receives: int
    messages_sent: int
    messages_received: int
    bytes_sent: int
    bytes_received: int
    connect_count: int
    connected_at: Timestamp | None
    closed_at: Timestamp | None
    close_code: int | None
    close_reason: str | None


class WebSocketClient:
    """An asynchronous WebSocket client with buffered, pull-based receiving.

    Sending is synchronous and receiving is awaited. Messages that arrive
    before anyone asks for them are buffered, and receivers that ask before a
    message arrives wait in line, so neither side loses data or blocks the
    other.

    Example:
        client = WebSocketClient()
        await client.connect(url="ws://www.example.com/")
        client.send(data="Hello!")
        print(await client.receive())
        if client.data_available:
            print(await client.receive())
        await client.disconnect()
    """

    def __init__(
        self, *, config: ClientConfig | None = None, transport_factory: TransportFactory | None = None
    ) -> None:
        """Initialize the client without connecting."""
        self._config = config or ClientConfig()
        self._transport_factory: TransportFactory = transport_factory or create_transport
        self._transport: WebSocketTransport | None = None
        self._inbound: AsyncQueue[Data] = AsyncQueue()
        self._terminal_state: CloseDescriptor | None = None
        self._connect_future: asyncio.Future[None] | None = None
        self._closed_future: asyncio.Future[CloseDescriptor | None] | None = None
        self._url: URL | None = None
        self._connect_count = 0
        self._connected_at: Timestamp | None = None
        self._closed_at: Timestamp | None = None
        self._messages_sent = 0
        self._messages_received = 0
        self._bytes_sent = 0
        self._bytes_received = 0

    @property
    def close_descriptor(self) -> CloseDescriptor | None:
        """Get the descriptor recorded when the last connection ended."""
        return self._terminal_state

    @property
    def config(self) -> ClientConfig:
        """Get the client configuration."""
        return self._config

    @property
    def connected(self) -> bool:
        """Return True if a connection is currently open."""
        return (
            self._transport is not None
            and self._transport.ready_state == ReadyState.OPEN
            and self._terminal_state is None
        )

    @property
    def data_available(self) -> int:
        """Get the number of buffered messages that `receive` can return immediately."""
        return len(self._inbound)

    @property
    def protocol(self) -> str | None:
        """Get the sub-protocol selected by the server."""
        return self._transport.protocol if self._transport is not None else None

    @property
    def state(self) -> ConnectionState:
        """Get the current connection state."""
        if self._transport is None:
            return ConnectionState.IDLE
        if self._terminal_state is not None:
            return ConnectionState.CLOSED

        match self._transport.ready_state:
            case ReadyState.CONNECTING:
                return ConnectionState.CONNECTING
            case ReadyState.OPEN:
                return ConnectionState.OPEN
            case ReadyState.CLOSING:
                return ConnectionState.CLOSING
            case _:
                return ConnectionState.CLOSED

    @property
    def url(self) -> URL | None:
        """Get the URL of the current or last connection."""
        return self._url

    async def __aenter__(self) -> Self:
        """Enter async context."""
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        """Exit async context, closing the connection."""
        await self.disconnect()

    async def connect(self, *, url: URL, protocols: Protocols = None) -> None:
        """Connect to a URL, replacing any existing connection.

        Resolves once the connection is open. Raises ConnectFailedError if the
        transport fails before that.
        """
        validate_url(url=url)
        normalized = normalize_protocols(protocols=protocols)

        await self.disconnect()
        self._detach_transport()
        self._reset()

        loop = asyncio.get_running_loop()
        self._connect_future = connect_future = loop.create_future()
        self._closed_future = loop.create_future()
        self._url = url

        transport = self._transport_factory(config=self._config)
        transport.binary_type = BINARY_TYPE_BYTES
        self._transport = transport
        self._setup_listeners_on_connect(transport=transport)

        logger.info("Connecting to %s", url)
        transport.connect(url=url, protocols=normalized)
        try:
            await connect_future
        except asyncio.CancelledError:
            if self._transport is transport and transport.ready_state == ReadyState.CONNECTING:
                self._abort_connect(reason="Connection attempt cancelled")
            raise

        self._connect_count += 1
        self._connected_at = get_timestamp()
        logger.info("Connected to %s (protocol=%s)", url, transport.protocol)

    async def diagnostics(self) -> ClientDiagnostics:
        """Get diagnostic information about the client."""
        terminal = self._terminal_state
        return ClientDiagnostics(
            state=self.state,
            url=self._url,
            protocol=self.protocol,
            data_available=self.data_available,
            pending_receives=self._inbound.waiting,
            messages_sent=self._messages_sent,
            messages_received=self._messages_received,
            bytes_sent=self._bytes_sent,
            bytes_received=self._bytes_received,
            connect_count=self._connect_count,
            connected_at=self._connected_at,
            closed_at=self._closed_at,
            close_code=terminal.code if terminal else None,
            close_reason=terminal.reason if terminal else None,
        )

    async def disconnect(self, *, code: int | None = None, reason: str | None = None) -> CloseDescriptor | None:
        """Close the connection and wait for the close notification.

        Never raises. Returns the descriptor of how the connection ended, or
        None if there has never been a connection.
        """
        transport = self._transport
        if transport is None:
            return self._terminal_state

        match transport.ready_state:
            case ReadyState.CONNECTING:
                self._abort_connect(reason="Connection attempt aborted by disconnect")
                return self._terminal_state
            case ReadyState.CLOSED:
                return self._terminal_state

        closed = self._closed_future
        if self._terminal_state is not None or closed is None:
            return self._terminal_state

        if transport.ready_state == ReadyState.OPEN:
            logger.info("Disconnecting from %s", self._url)
            try:
                transport.close(code=code, reason=reason)
            except ValueError as e:
                logger.warning("Invalid close arguments for %s (%s), closing normally", self._url, e)
                transport.close()

        return await asyncio.shield(closed)

    async def receive(self) -> Data:
        """Receive the next message.

        Returns a buffered message immediately if there is one. Otherwise waits
        for the next message, or raises if the connection is not open or
        closes first.
        """
        try:
            return self._inbound.get_nowait()
        except asyncio.QueueEmpty:
            pass

        if not self.connected:
            raise self._not_connected_error()
        return await self._inbound.get()

    def send(self, *, data: Data) -> None:
        """Send a message. The connection must be open."""
        transport = self._transport
        if transport is None or not self.connected:
            raise self._not_connected_error()

        size = get_payload_size(data=data)
        transport.send(data=data)
        self._messages_sent += 1
        self._bytes_sent += size

    def _abort_connect(self, *, reason: str) -> None:
        """Abandon a connection attempt that has not opened yet."""
        transport = self._transport
        descriptor = CloseDescriptor(code=CloseCode.ABNORMAL_CLOSURE, reason=reason, was_clean=False)
        logger.info("Aborting connection to %s: %s", self._url, reason)

        if self._terminal_state is None:
            self._terminal_state = descriptor
        if transport is not None:
            transport.events.remove_all_listeners()
            transport.close()
        if self._connect_future is not None and not self._connect_future.done():
            self._connect_future.set_exception(ConnectFailedError(descriptor=descriptor))
        if self._closed_future is not None and not self._closed_future.done():
            self._closed_future.set_result(self._terminal_state)

    def _detach_transport(self) -> None:
        """Release the previous transport so it can no longer affect this client."""
        transport = self._transport
        if transport is None:
            return

        transport.events.remove_all_listeners()
        if transport.ready_state in (ReadyState.CONNECTING, ReadyState.OPEN):
            transport.close()
        if self._closed_future is not None and not self._closed_future.done():
            self._closed_future.set_result(self._terminal_state)
        self._transport = None

    def _handle_close(self, event: Event) -> None:
        """Record the end of the connection and release every waiter."""
        if event.source is not self._transport:
            return

        descriptor: CloseDescriptor = event.data
        self._closed_at = get_timestamp()
        self._handle_terminal(descriptor=descriptor)
        logger.info(
            "Connection to %s closed: code=%d reason='%s'", self._url, descriptor.code, descriptor.reason
        )
        if self._closed_future is not None and not self._closed_future.done():
            self._closed_future.set_result(self._terminal_state)

    def _handle_message(self, event: Event) -> None:
        """Hand an inbound message to the oldest waiter, or buffer it."""
        if event.source is not self._transport:
            return

        data: Data = event.data
        self._messages_received += 1
        self._bytes_received += get_payload_size(data=data)
        self._inbound.put_nowait(data)

    def _handle_terminal(self, *, descriptor: CloseDescriptor) -> None:
        """Record the first terminal descriptor and fail all pending receives."""
        if self._terminal_state is None:
            self._terminal_state = descriptor

        failed = self._inbound.fail_waiters(ConnectionClosedError(descriptor=self._terminal_state))
        if failed:
            logger.debug("Failed %d pending receive(s) on %s", failed, self._url)

    def _not_connected_error(self) -> NotConnectedError:
        """Build the error for an operation that needs an open connection."""
        if self._terminal_state is not None:
            return ConnectionClosedError(descriptor=self._terminal_state)
        return NotConnectedError()

    def _reset(self) -> None:
        """Clear all per-connection state."""
        self._inbound.clear()
        self._terminal_state = None
        self._connect_future = None
        self._closed_future = None
        self._connected_at = None
        self._closed_at = None

    def _setup_listeners_on_connect(self, *, transport: WebSocketTransport) -> None:
        """Register the listeners that drive the connection lifecycle."""

        def handle_open(event: Event) -> None:
            if event.source is not self._transport:
                return
            transport.events.on(event_type=EventType.MESSAGE, handler=self._handle_message)
            transport.events.on(event_type=EventType.CLOSE, handler=self._handle_close)
            if self._connect_future is not None and not self._connect_future.done():
                self._connect_future.set_result(None)

        def handle_error(event: Event) -> None:
            if event.source is not self._transport:
                return
            descriptor: CloseDescriptor = event.data
            if self._connect_future is not None and not self._connect_future.done():
                logger.warning("Connection to %s failed: %s", self._url, descriptor.reason)
                if self._terminal_state is None:
                    self._terminal_state = descriptor
                self._connect_future.set_exception(ConnectFailedError(descriptor=descriptor))
                if self._closed_future is not None and not self._closed_future.done():
                    self._closed_future.set_result(self._terminal_state)
                return

            logger.warning("Connection to %s errored: %s", self._url, descriptor.reason)
            self._handle_terminal(descriptor=descriptor)

        transport.events.once(event_type=EventType.OPEN, handler=handle_open)
        transport.events.on(event_type=EventType.ERROR, handler=handle_error)

    def __aiter__(self) -> AsyncIterator[Data]:
        """Allow iterating over received messages."""
        return self

    async def __anext__(self) -> Data:
        """Receive the next message, stopping once the connection is closed."""
        try:
            return await self.receive()
        except NotConnectedError as e:
            logger.debug("Message iteration on %s terminated: %s", self._url, e)
            raise StopAsyncIteration from e

    def __repr__(self) -> str:
        """Provide a developer-friendly representation."""
        return f"<WebSocketClient url={self._url} state={self.state} data_available={self.data_available}>"
