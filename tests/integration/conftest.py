"""
Configuration and fixtures for pywsclient integration tests.
"""

import asyncio
import socket
from collections.abc import AsyncGenerator
from typing import cast

import pytest
import pytest_asyncio
from aiohttp import WSMsgType, web

from pywsclient import ClientConfig, WebSocketClient

USER_AGENTS = web.AppKey("user_agents", list[str | None])


def find_free_port() -> int:
    """Find and return an available TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        return cast(int, s.getsockname()[1])


async def echo_handler(request: web.Request) -> web.WebSocketResponse:
    """Echo every text and binary message back to the sender."""
    ws = web.WebSocketResponse(protocols=("chat",))
    await ws.prepare(request)
    request.app[USER_AGENTS].append(request.headers.get("User-Agent"))

    async for msg in ws:
        if msg.type == WSMsgType.TEXT:
            await ws.send_str(msg.data)
        elif msg.type == WSMsgType.BINARY:
            await ws.send_bytes(msg.data)
    return ws


async def farewell_handler(request: web.Request) -> web.WebSocketResponse:
    """Send one message and close the connection from the server side."""
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    await ws.send_str("bye")
    await ws.close(code=4000, message=b"server done")
    return ws


async def lingering_handler(request: web.Request) -> web.WebSocketResponse:
    """Reply to each text message after a delay, finishing replies before answering a close."""
    ws = web.WebSocketResponse(autoclose=False)
    await ws.prepare(request)

    async def reply_later(data: str) -> None:
        await asyncio.sleep(delay=0.2)
        await ws.send_str(f"late:{data}")

    replies: list[asyncio.Task[None]] = []
    while True:
        msg = await ws.receive()
        if msg.type == WSMsgType.TEXT:
            replies.append(asyncio.create_task(coro=reply_later(msg.data)))
        elif msg.type == WSMsgType.CLOSE:
            await asyncio.gather(*replies)
            await ws.close(code=4001, message=b"server reason")
            break
        else:
            break
    return ws


@pytest.fixture
def unused_port() -> int:
    """Provide a port with no listening server."""
    return find_free_port()


@pytest.fixture
def client_config() -> ClientConfig:
    """Provide a ClientConfig with short timeouts."""
    return ClientConfig(connect_timeout=5.0, close_timeout=2.0)


@pytest_asyncio.fixture
async def client(client_config: ClientConfig) -> AsyncGenerator[WebSocketClient, None]:
    """Provide a WebSocketClient that is disconnected after the test."""
    ws_client = WebSocketClient(config=client_config)
    async with ws_client:
        yield ws_client


@pytest_asyncio.fixture
async def server() -> AsyncGenerator[tuple[str, int, list[str | None]], None]:
    """Start an aiohttp WebSocket server for a test."""
    host = "127.0.0.1"
    port = find_free_port()
    app = web.Application()
    app[USER_AGENTS] = []
    app.router.add_get("/echo", echo_handler)
    app.router.add_get("/farewell", farewell_handler)
    app.router.add_get("/lingering", lingering_handler)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=host, port=port)
    await site.start()
    try:
        yield host, port, app[USER_AGENTS]
    finally:
        await runner.cleanup()
