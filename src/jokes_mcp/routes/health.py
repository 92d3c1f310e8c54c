"""Liveness endpoints."""

from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route

ROOT_MESSAGE = "The Jokes MCP server is running!"


async def root(request: Request) -> PlainTextResponse:
    """Static liveness probe."""
    return PlainTextResponse(ROOT_MESSAGE)


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    state = request.app.state
    return JSONResponse(
        {
            "status": "ok",
            "sessions": state.sessions.active_count,
            "tools": len(state.tools),
        }
    )


health_routes = [
    Route("/", root, methods=["GET"]),
    Route("/health", health_check, methods=["GET"]),
]
