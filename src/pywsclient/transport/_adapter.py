"""Transport implementation backed by aiohttp's WebSocket client."""

from __future__ import annotations

import asyncio
import ssl
import struct
from urllib.parse import urlsplit

import aiohttp

from pywsclient.config import ClientConfig
from pywsclient.constants import MAX_CLOSE_REASON_BYTES, CloseCode
from pywsclient.exceptions import TransportError
from pywsclient.transport.transport import CloseDescriptor, WebSocketTransport
from pywsclient.types import URL, Data, ReadyState
from pywsclient.utils import Timer, get_logger

__all__: list[str] = ["AiohttpTransport", "create_transport"]

logger = get_logger(name=__name__)


class AiohttpTransport(WebSocketTransport):
    """Drive one WebSocket connection with a reader task and a writer task."""

    def __init__(self, *, config: ClientConfig, session: aiohttp.ClientSession | None = None) -> None:
        """Initialize the transport, optionally sharing an existing HTTP session."""
        super().__init__(config=config)
        self._session = session
        self._owns_session = session is None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._send_queue: asyncio.Queue[Data] = asyncio.Queue()
        self._reader_task: asyncio.Task[None] | None = None
        self._writer_task: asyncio.Task[None] | None = None
        self._close_task: asyncio.Task[None] | None = None
        self._close_reason = ""
        self._close_sent = False
        self._frames_done = asyncio.Event()

    def close(self, *, code: int | None = None, reason: str | None = None) -> None:
        """Start the close handshake, or abort a handshake still in progress."""
        code = CloseCode.NORMAL_CLOSURE if code is None else code
        reason = reason or ""
        if code != CloseCode.NORMAL_CLOSURE and not 3000 <= code <= 4999:
            raise ValueError(f"Invalid close code {code}: must be 1000 or in the range 3000-4999")
        if len(reason.encode("utf-8")) > MAX_CLOSE_REASON_BYTES:
            raise ValueError(f"Close reason exceeds {MAX_CLOSE_REASON_BYTES} bytes")

        match self._ready_state:
            case ReadyState.CLOSING | ReadyState.CLOSED:
                return
            case ReadyState.CONNECTING:
                logger.debug("Aborting connection attempt to %s", self._url)
                self._ready_state = ReadyState.CLOSING
                if self._reader_task is not None and not self._reader_task.done():
                    self._reader_task.cancel()
                elif self._reader_task is None:
                    self._ready_state = ReadyState.CLOSED
            case ReadyState.OPEN:
                logger.debug("Closing connection to %s: code=%d reason='%s'", self._url, code, reason)
                self._ready_state = ReadyState.CLOSING
                self._close_reason = reason
                self._close_task = asyncio.create_task(coro=self._close_handshake(code=code, reason=reason))

    def connect(self, *, url: URL, protocols: tuple[str, ...] = ()) -> None:
        """Start the opening handshake in a background task."""
        if self._reader_task is not None:
            raise TransportError("Transport has already been started", ready_state=self._ready_state)

        self._url = url
        self._reader_task = asyncio.create_task(coro=self._run(protocols=protocols))
        self._reader_task.add_done_callback(self._on_reader_done)

    def send(self, *, data: Data) -> None:
        """Queue a payload for the writer task."""
        if self._ready_state != ReadyState.OPEN:
            raise TransportError(f"Cannot send in state {self._ready_state}", ready_state=self._ready_state)
        if not isinstance(data, (str, bytes, bytearray, memoryview)):
            raise TypeError(f"Unsupported payload type: {type(data).__name__}")

        self._send_queue.put_nowait(data)

    async def _close_handshake(self, *, code: int, reason: str) -> None:
        """Flush queued sends, send a close frame and wait for the peer's reply.

        The reader keeps consuming frames until the peer's close frame arrives,
        so messages sent by the peer in the meantime are still delivered.
        """
        ws = self._ws
        if ws is None:
            return

        try:
            async with asyncio.timeout(delay=self._config.close_timeout):
                await self._send_queue.join()
                await ws.send_frame(struct.pack("!H", code) + reason.encode("utf-8"), aiohttp.WSMsgType.CLOSE)
                self._close_sent = True
                await self._frames_done.wait()
        except TimeoutError:
            logger.warning("Close handshake with %s timed out after %ss", self._url, self._config.close_timeout)
            await self._close_socket(ws=ws, code=CloseCode.GOING_AWAY)
        except (aiohttp.ClientError, OSError) as e:
            logger.debug("Error during close handshake with %s: %s", self._url, e)
            await self._close_socket(ws=ws, code=CloseCode.GOING_AWAY)

    async def _close_socket(self, *, ws: aiohttp.ClientWebSocketResponse, code: int) -> None:
        """Close the socket without waiting longer than the close timeout."""
        try:
            async with asyncio.timeout(delay=self._config.close_timeout):
                await ws.close(code=code)
        except (TimeoutError, aiohttp.ClientError, OSError) as e:
            logger.debug("Error closing socket to %s: %s", self._url, e)

    async def _close_session(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    def _create_ssl_context(self) -> ssl.SSLContext | bool:
        """Build the TLS settings for a secure URL."""
        if urlsplit(self._url or "").scheme != "wss":
            return True

        context = ssl.create_default_context(cafile=self._config.ca_certs)
        if self._config.verify_mode == ssl.CERT_NONE:
            context.check_hostname = False
        if self._config.verify_mode is not None:
            context.verify_mode = self._config.verify_mode
        return context

    async def _fail(self, *, exc: BaseException) -> None:
        """Publish an error followed by a close for the same failure."""
        descriptor = CloseDescriptor.from_exception(exc)
        await self._emit_error(descriptor=descriptor)
        await self._shutdown()
        await self._emit_close(descriptor=descriptor)

    async def _handshake(self, *, protocols: tuple[str, ...]) -> aiohttp.ClientWebSocketResponse:
        """Open the WebSocket within the configured timeout."""
        if self._session is None:
            self._session = aiohttp.ClientSession()

        with Timer(name=f"WebSocket handshake to {self._url}"):
            async with asyncio.timeout(delay=self._config.connect_timeout):
                return await self._session.ws_connect(
                    self._url or "",
                    protocols=protocols,
                    headers=self._config.headers,
                    heartbeat=self._config.heartbeat,
                    max_msg_size=self._config.max_message_size,
                    ssl=self._create_ssl_context(),
                    autoclose=False,
                )

    def _on_reader_done(self, task: asyncio.Task[None]) -> None:
        """Settle the state of a transport whose reader never ran."""
        if task.cancelled() and not self._close_emitted:
            self._ready_state = ReadyState.CLOSED

    async def _read_loop(self, *, ws: aiohttp.ClientWebSocketResponse) -> CloseDescriptor:
        """Publish inbound frames until the peer's close frame and describe how it ended."""
        try:
            while True:
                msg = await ws.receive()
                match msg.type:
                    case aiohttp.WSMsgType.TEXT:
                        await self._emit_message(data=msg.data)
                    case aiohttp.WSMsgType.BINARY:
                        await self._emit_message(data=bytes(msg.data))
                    case aiohttp.WSMsgType.CLOSE:
                        return CloseDescriptor(
                            code=msg.data or CloseCode.NO_STATUS_RECEIVED, reason=msg.extra or "", was_clean=True
                        )
                    case aiohttp.WSMsgType.CLOSING | aiohttp.WSMsgType.CLOSED:
                        break
                    case aiohttp.WSMsgType.ERROR:
                        exc = ws.exception() or TransportError("WebSocket protocol error")
                        return CloseDescriptor.from_exception(exc)
                    case _:
                        logger.debug("Ignoring frame of type %s", msg.type)
        except (aiohttp.ClientError, OSError) as e:
            return CloseDescriptor.from_exception(e)
        finally:
            self._frames_done.set()

        # The connection ended without a close frame from the peer.
        return CloseDescriptor(code=CloseCode.ABNORMAL_CLOSURE, reason=self._close_reason, was_clean=False)

    async def _run(self, *, protocols: tuple[str, ...]) -> None:
        """Connect, publish the open notification, and pump inbound frames."""
        try:
            ws = await self._handshake(protocols=protocols)
        except asyncio.CancelledError:
            await self._fail(exc=ConnectionAbortedError("Connection attempt aborted"))
            raise
        except (aiohttp.ClientError, OSError, ValueError) as e:
            logger.info("Failed to connect to %s: %s", self._url, e)
            await self._fail(exc=e)
            return

        self._ws = ws
        self._writer_task = asyncio.create_task(coro=self._write_loop(ws=ws))
        await self._emit_open(protocol=ws.protocol)

        descriptor = await self._read_loop(ws=ws)
        if descriptor.error is not None:
            await self._emit_error(descriptor=descriptor)
        await self._shutdown(code=CloseCode.NORMAL_CLOSURE if descriptor.was_clean else CloseCode.GOING_AWAY)
        await self._emit_close(descriptor=descriptor)

    async def _shutdown(self, *, code: int = CloseCode.GOING_AWAY) -> None:
        """Stop the background tasks and release network resources."""
        for task in (self._writer_task, self._close_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        # Once our close frame is out, the peer's reply completes the handshake.
        if self._ws is not None and not self._ws.closed and not self._close_sent:
            await self._close_socket(ws=self._ws, code=code)
        await self._close_session()

    async def _write_loop(self, *, ws: aiohttp.ClientWebSocketResponse) -> None:
        """Write queued payloads in order."""
        while True:
            data = await self._send_queue.get()
            try:
                if isinstance(data, str):
                    await ws.send_str(data)
                else:
                    await ws.send_bytes(bytes(data))
            except (aiohttp.ClientError, OSError) as e:
                logger.warning("Failed to send %d-byte message to %s: %s", len(data), self._url, e)
            finally:
                self._send_queue.task_done()


def create_transport(*, config: ClientConfig) -> WebSocketTransport:
    """Create the default transport."""
    return AiohttpTransport(config=config)
