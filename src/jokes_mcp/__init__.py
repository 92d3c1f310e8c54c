"""Jokes MCP server: jokes (and weather!) over MCP HTTP+SSE."""

from .app import create_app
from .config import ServerConfig
from .dispatcher import Ack, Dispatcher
from .errors import (
    DuplicateTool,
    JokesMCPError,
    MethodNotFound,
    ProtocolParseError,
    SessionNotFound,
    UnknownTool,
    UpstreamFailure,
)
from .protocol import InvocationRequest, InvocationResult, TextContent
from .session import Session, SessionRegistry, SessionState
from .tools import (
    ToolContext,
    ToolDescriptor,
    ToolParameter,
    ToolRegistry,
    ValidatedArgs,
    ValidationError,
)
from .transport import SSEStreamTransport

__version__ = "1.0.0"

__all__ = [
    "Ack",
    "Dispatcher",
    "DuplicateTool",
    "InvocationRequest",
    "InvocationResult",
    "JokesMCPError",
    "MethodNotFound",
    "ProtocolParseError",
    "SSEStreamTransport",
    "ServerConfig",
    "Session",
    "SessionNotFound",
    "SessionRegistry",
    "SessionState",
    "TextContent",
    "ToolContext",
    "ToolDescriptor",
    "ToolParameter",
    "ToolRegistry",
    "UnknownTool",
    "UpstreamFailure",
    "ValidatedArgs",
    "ValidationError",
    "create_app",
]
