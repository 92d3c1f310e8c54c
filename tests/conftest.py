"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from contextlib import aclosing
from typing import Any

import httpx
import pytest

from jokes_mcp.protocol.content import InvocationResult
from jokes_mcp.session import SessionRegistry
from jokes_mcp.tools import ToolContext, ToolDescriptor, ToolParameter, ToolRegistry
from jokes_mcp.transport.sse import SSEStreamTransport

WEATHER_PAYLOAD = {
    "current_condition": [
        {
            "temp_C": "15",
            "temp_F": "59",
            "humidity": "70",
            "windspeedKmph": "10",
            "weatherDesc": [{"value": "Cloudy"}],
        }
    ]
}


@pytest.fixture(scope="module")
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


def parse_frame(frame: str) -> tuple[str, str]:
    """Split an SSE frame into (event name, data)."""
    event = "message"
    data_lines = []
    for line in frame.rstrip("\n").split("\n"):
        if line.startswith("event: "):
            event = line[len("event: ") :]
        elif line.startswith("data: "):
            data_lines.append(line[len("data: ") :])
    return event, "\n".join(data_lines)


@pytest.fixture
def parse_sse() -> Callable[[str], tuple[str, str]]:
    """Return the SSE frame parser."""
    return parse_frame


@pytest.fixture
def read_message() -> Callable[..., Awaitable[dict[str, Any] | None]]:
    """Return a helper reading the next JSON-RPC message off a transport.

    Keep-alive comments are skipped. Returns None if the stream ends.
    """

    async def read(transport: SSEStreamTransport, timeout: float = 2.0) -> dict[str, Any] | None:
        async def first() -> dict[str, Any] | None:
            async with aclosing(transport.frames()) as frames:
                async for frame in frames:
                    event, data = parse_frame(frame)
                    if frame.startswith(":"):
                        continue
                    if event == "message":
                        return json.loads(data)
            return None

        return await asyncio.wait_for(first(), timeout=timeout)

    return read


@pytest.fixture
def sessions() -> SessionRegistry:
    """Fresh session registry per test."""
    return SessionRegistry(keepalive_interval=0.05)


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory for an AsyncClient whose requests are answered by ``handler``."""

    def make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return make


@pytest.fixture
def weather_payload() -> dict[str, Any]:
    """wttr.in j1 payload for cloudy London."""
    return WEATHER_PAYLOAD


@pytest.fixture
def weather_http(mock_http) -> httpx.AsyncClient:
    """Client that answers wttr.in with fixed London weather."""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "wttr.in"
        return httpx.Response(200, json=WEATHER_PAYLOAD)

    return mock_http(handler)


@pytest.fixture
def echo_tool() -> tuple[ToolDescriptor, Any]:
    """A tool with one required parameter that echoes it back."""
    calls: list[dict[str, Any]] = []

    async def handler(args: dict[str, Any], context: ToolContext) -> InvocationResult:
        calls.append(args)
        return InvocationResult.text(f"echo: {args['text']}")

    handler.calls = calls  # type: ignore[attr-defined]
    descriptor = ToolDescriptor(
        name="echo",
        description="Echo text back",
        parameters=(ToolParameter("text", description="Text to echo", required=True),),
    )
    return descriptor, handler


@pytest.fixture
def stub_tools(echo_tool) -> ToolRegistry:
    """Registry holding only the echo tool."""
    registry = ToolRegistry()
    registry.register(*echo_tool)
    return registry
