"""JSON-RPC 2.0 envelopes exchanged with MCP clients.

Clients POST requests and notifications; the server answers with
responses written onto the session stream. Parsing is strict about the
envelope and lenient about ``params`` contents, which the dispatcher
interprets per method.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from ..errors import JsonRpcErrorCode, ProtocolParseError

JSONRPC_VERSION = "2.0"
MCP_PROTOCOL_VERSION = "2025-03-26"
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26")


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: str | int
    method: str
    params: dict[str, Any] | None = None


class JsonRpcNotification(BaseModel):
    """JSON-RPC 2.0 notification (no response expected)."""

    jsonrpc: Literal["2.0"] = "2.0"
    method: str
    params: dict[str, Any] | None = None


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any | None = None


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: str | int | None
    result: Any | None = None
    error: JsonRpcError | None = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize with exactly one of ``result`` or ``error``."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_none=True)
        else:
            data["result"] = self.result if self.result is not None else {}
        return data


JsonRpcMessage = JsonRpcRequest | JsonRpcNotification


@dataclass
class InvocationRequest:
    """A ``tools/call`` request correlated to a session."""

    session_id: str
    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    request_id: str | int | None = None


def parse_message(raw: bytes | str) -> JsonRpcMessage:
    """Parse a POSTed body into a request or notification.

    Raises:
        ProtocolParseError: Body is not JSON, not an object, or not a
            valid JSON-RPC 2.0 envelope. Batches are not supported.
    """
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProtocolParseError(f"Parse error: {e}") from e

    if not isinstance(payload, dict):
        raise ProtocolParseError(
            "Invalid request: expected a JSON object",
            code=JsonRpcErrorCode.INVALID_REQUEST,
        )

    model: type[BaseModel] = JsonRpcRequest if "id" in payload else JsonRpcNotification
    try:
        return model.model_validate(payload)  # type: ignore[return-value]
    except ValidationError as e:
        raise ProtocolParseError(
            "Invalid request: not a JSON-RPC 2.0 message",
            details=e.errors(include_url=False, include_context=False),
            code=JsonRpcErrorCode.INVALID_REQUEST,
        ) from e


def to_invocation(session_id: str, message: JsonRpcRequest) -> InvocationRequest:
    """Extract the tool name and arguments from a ``tools/call`` request.

    Raises:
        ProtocolParseError: ``params.name`` missing or ``params.arguments``
            is not an object.
    """
    params = message.params or {}
    name = params.get("name")
    if not isinstance(name, str) or not name:
        raise ProtocolParseError("Invalid params: tools/call requires a tool name")

    arguments = params.get("arguments") or {}
    if not isinstance(arguments, dict):
        raise ProtocolParseError("Invalid params: arguments must be an object")

    return InvocationRequest(
        session_id=session_id,
        tool_name=name,
        arguments=arguments,
        request_id=message.id,
    )
