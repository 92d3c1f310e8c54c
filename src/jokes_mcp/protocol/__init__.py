"""Wire protocol: JSON-RPC envelopes and tool result content."""

from .content import InvocationResult, TextContent
from .messages import (
    MCP_PROTOCOL_VERSION,
    InvocationRequest,
    JsonRpcError,
    JsonRpcMessage,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    parse_message,
    to_invocation,
)

__all__ = [
    "MCP_PROTOCOL_VERSION",
    "InvocationRequest",
    "InvocationResult",
    "JsonRpcError",
    "JsonRpcMessage",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "TextContent",
    "parse_message",
    "to_invocation",
]
