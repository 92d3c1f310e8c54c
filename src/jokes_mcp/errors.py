"""Error taxonomy for the jokes MCP server.

Errors fall into two groups:
- Request-level rejections (ProtocolParseError, MethodNotFound, SessionNotFound,
  UnknownTool) are raised by the dispatcher and turned into HTTP 400 responses.
- Tool-level failures (UpstreamFailure) are raised by handlers and converted
  into apologetic text results before they reach the stream.

Argument validation never raises; see ``tools.ValidationError``.
"""

from __future__ import annotations

from typing import Any


class JsonRpcErrorCode:
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server-specific error codes
    SESSION_NOT_FOUND = -32001


class JokesMCPError(Exception):
    """Base error carrying a JSON-friendly payload."""

    code: int = JsonRpcErrorCode.INTERNAL_ERROR
    http_status: int = 500

    def __init__(
        self, message: str, details: Any | None = None, code: int | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        # JSON-RPC id of the rejected request, once known
        self.request_id: str | int | None = None
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Return the error as a JSON-RPC style error object."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["data"] = self.details
        return error


class ProtocolParseError(JokesMCPError):
    """Request body is not a valid JSON-RPC 2.0 message."""

    code = JsonRpcErrorCode.PARSE_ERROR
    http_status = 400


class MethodNotFound(JokesMCPError):
    """JSON-RPC method is not served."""

    code = JsonRpcErrorCode.METHOD_NOT_FOUND
    http_status = 400


class SessionNotFound(JokesMCPError):
    """Session id is unknown or already closed."""

    code = JsonRpcErrorCode.SESSION_NOT_FOUND
    http_status = 400

    def __init__(self, session_id: str | None) -> None:
        super().__init__(
            "No transport found for sessionId",
            details={"sessionId": session_id},
        )
        self.session_id = session_id


class UnknownTool(JokesMCPError):
    """Tool name is not in the registry."""

    code = JsonRpcErrorCode.INVALID_PARAMS
    http_status = 400

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}", details={"name": name})
        self.name = name


class DuplicateTool(JokesMCPError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool '{name}' already registered", details={"name": name})
        self.name = name


class UpstreamFailure(JokesMCPError):
    """Third-party endpoint was unreachable or returned an unexpected shape."""

    code = JsonRpcErrorCode.INTERNAL_ERROR
    http_status = 502
