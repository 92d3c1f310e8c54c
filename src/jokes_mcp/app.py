"""Jokes MCP server application.

Creates the Starlette ASGI application with all routes.

Route organization:
- /           - Static liveness message
- /health     - Health check with session/tool counts
- /sse        - Session stream (configurable)
- /jokes      - Message POST endpoint (configurable)

Shared state lives on ``app.state``: ``config``, ``sessions``, ``tools``,
``http`` and ``dispatcher``. It is built eagerly so the app works with or
without lifespan events; shutdown closes every session and the HTTP
client.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from .config import ServerConfig
from .dispatcher import Dispatcher
from .handlers import build_registry
from .routes import health_routes, mcp_routes
from .session import SessionRegistry
from .tools import ToolRegistry

logger = logging.getLogger(__name__)

USER_AGENT = "jokes-mcp/1.0"


def create_http_client(config: ServerConfig) -> httpx.AsyncClient:
    """Shared client for upstream tool calls."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.tool_timeout),
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


def create_app(
    config: ServerConfig | None = None,
    *,
    tools: ToolRegistry | None = None,
    http: httpx.AsyncClient | None = None,
) -> Starlette:
    """Create the jokes MCP application.

    Args:
        config: Server settings (defaults to ``ServerConfig.from_env()``)
        tools: Tool registry (defaults to the built-in tools)
        http: Client for upstream calls; closed on shutdown only if created here

    Returns:
        Configured Starlette application
    """
    config = config or ServerConfig.from_env()
    tools = tools if tools is not None else build_registry()
    owns_http = http is None
    http_client = http or create_http_client(config)

    sessions = SessionRegistry(keepalive_interval=config.keepalive_interval)
    dispatcher = Dispatcher(
        sessions,
        tools,
        http_client,
        tool_timeout=config.tool_timeout,
    )

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info(
            f"Serving {len(tools)} tools; stream at {config.sse_path}, "
            f"messages at {config.message_path}"
        )
        try:
            yield
        finally:
            sessions.close_all()
            await dispatcher.cancel_all()
            if owns_http:
                await http_client.aclose()

    routes: list[Route] = []
    routes.extend(health_routes)
    routes.extend(mcp_routes(config))

    # CORS for browser-based MCP clients during local development
    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        ),
    ]

    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.config = config
    app.state.sessions = sessions
    app.state.tools = tools
    app.state.http = http_client
    app.state.dispatcher = dispatcher
    return app
