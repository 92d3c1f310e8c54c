"""MCP over HTTP+SSE.

Two channels per client:
- GET <sse_path>: opens a session; the response is a persistent event
  stream whose first event (``endpoint``) carries the POST URL with the
  session id
- POST <message_path>?sessionId=<id>: JSON-RPC message for that session;
  answered at once with an acknowledgment, while the JSON-RPC response is
  delivered later as a ``message`` event on the stream
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from starlette.requests import Request
from starlette.responses import JSONResponse, StreamingResponse
from starlette.routing import Route

from ..config import ServerConfig
from ..dispatcher import Dispatcher
from ..errors import JokesMCPError, SessionNotFound
from ..protocol.messages import JsonRpcError, JsonRpcResponse
from ..session import SessionRegistry
from ..transport.sse import format_sse

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


async def sse_endpoint(request: Request) -> StreamingResponse:
    """Open a session and stream its events until the client disconnects."""
    sessions: SessionRegistry = request.app.state.sessions
    config: ServerConfig = request.app.state.config

    async def event_stream() -> AsyncIterator[str]:
        with sessions.connect() as (session_id, transport):
            yield format_sse("endpoint", config.endpoint_url(session_id))
            async for frame in transport.frames():
                yield frame

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


def error_response(error: JokesMCPError) -> JSONResponse:
    """JSON-RPC error response for a rejected POST."""
    response = JsonRpcResponse(id=error.request_id, error=JsonRpcError(**error.to_dict()))
    return JSONResponse(response.to_wire(), status_code=error.http_status)


async def message_endpoint(request: Request) -> JSONResponse:
    """Accept a JSON-RPC message for a session."""
    dispatcher: Dispatcher = request.app.state.dispatcher
    session_id = request.query_params.get("sessionId")
    body = await request.body()

    try:
        ack = await dispatcher.handle(body, session_id)
    except SessionNotFound as e:
        logger.warning(f"Rejected message for unknown session {session_id!r}")
        return error_response(e)
    except JokesMCPError as e:
        logger.warning(f"Rejected message for session {session_id}: {e.message}")
        return error_response(e)

    return JSONResponse(ack.to_dict())


def mcp_routes(config: ServerConfig) -> list[Route]:
    """Routes for the configured stream and message paths."""
    return [
        Route(config.sse_path, sse_endpoint, methods=["GET"]),
        Route(config.message_path, message_endpoint, methods=["POST"]),
    ]
