"""Request dispatcher.

Correlates POSTed JSON-RPC messages with session streams and drives
tool execution. The POST gets an acknowledgment as soon as the request
is accepted; the tool's answer is written later, onto the session's
SSE stream, as a JSON-RPC response carrying the request's id.

Rejections (raised, mapped to HTTP 400 by the route):
- ProtocolParseError: body is not a valid envelope (no session lookup)
- SessionNotFound: id unknown or closed (no handler runs)
- UnknownTool / MethodNotFound

Everything after acceptance (missing arguments, upstream failures,
timeouts) becomes result text on the stream.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import JokesMCPError, MethodNotFound, SessionNotFound, UpstreamFailure
from .protocol.content import InvocationResult
from .protocol.messages import (
    MCP_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    InvocationRequest,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    parse_message,
    to_invocation,
)
from .session import SessionRegistry
from .tools import (
    ToolContext,
    ToolDescriptor,
    ToolHandler,
    ToolRegistry,
    ValidatedArgs,
    ValidationError,
)
from .transport.sse import SSEStreamTransport

logger = logging.getLogger(__name__)

DEFAULT_SERVER_INFO = {"name": "jokesMCP", "version": "1.0.0"}
DEFAULT_INSTRUCTIONS = "A server that provides jokes (and weather!)"


@dataclass
class Ack:
    """Immediate reply to a POSTed message.

    Says only that the message was accepted; results arrive on the stream.
    """

    request_id: str | int | None = None
    status: str = "accepted"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status}
        if self.request_id is not None:
            data["id"] = self.request_id
        return data


class Dispatcher:
    """Routes messages to tools and writes results back to sessions.

    Tool calls run as background tasks, one per request, so a slow
    upstream never delays the acknowledgment or other sessions. Results
    reach a session's stream in completion order.
    """

    def __init__(
        self,
        sessions: SessionRegistry,
        tools: ToolRegistry,
        http: httpx.AsyncClient,
        *,
        tool_timeout: float = 5.0,
        server_info: dict[str, str] | None = None,
        instructions: str | None = DEFAULT_INSTRUCTIONS,
    ) -> None:
        self._sessions = sessions
        self._tools = tools
        self._http = http
        self._tool_timeout = tool_timeout
        self._server_info = server_info or dict(DEFAULT_SERVER_INFO)
        self._instructions = instructions
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of tool calls still running."""
        return len(self._tasks)

    async def handle(self, raw_message: bytes | str, session_id: str | None) -> Ack:
        """Accept one POSTed message for a session.

        Raises:
            ProtocolParseError: Malformed envelope or tools/call params
            SessionNotFound: Unknown or closed session
            UnknownTool: tools/call names an unregistered tool
            MethodNotFound: Request method is not served
        """
        message = parse_message(raw_message)
        if isinstance(message, JsonRpcNotification):
            self._lookup(session_id)
            logger.debug(f"Notification {message.method} on session {session_id}")
            return Ack()

        try:
            invocation = None
            if message.method == "tools/call":
                invocation = to_invocation(session_id or "", message)
            transport = self._lookup(session_id)

            if invocation is not None:
                self._accept_tool_call(transport, invocation)
            else:
                result = self._answer(message)
                await transport.send(JsonRpcResponse(id=message.id, result=result))
        except JokesMCPError as e:
            e.request_id = message.id
            raise
        return Ack(request_id=message.id)

    def _lookup(self, session_id: str | None) -> SSEStreamTransport:
        if not session_id:
            raise SessionNotFound(session_id)
        return self._sessions.lookup(session_id)

    def _accept_tool_call(
        self, transport: SSEStreamTransport, request: InvocationRequest
    ) -> None:
        descriptor, handler = self._tools.resolve(request.tool_name)
        outcome = self._tools.validate(descriptor, request.arguments)

        if isinstance(outcome, ValidationError):
            logger.info(
                f"Tool {descriptor.name} called without valid '{outcome.parameter}' "
                f"on session {request.session_id}"
            )
            self._spawn(self._deliver(transport, request, outcome.to_result()))
            return

        self._spawn(self._run(transport, request, descriptor, handler, outcome))

    def _answer(self, message: JsonRpcRequest) -> dict[str, Any]:
        """Result payload for protocol methods other than tools/call."""
        if message.method == "initialize":
            params = message.params or {}
            requested = params.get("protocolVersion")
            version = (
                requested if requested in SUPPORTED_PROTOCOL_VERSIONS else MCP_PROTOCOL_VERSION
            )
            result: dict[str, Any] = {
                "protocolVersion": version,
                "capabilities": {"tools": {"listChanged": False}},
                "serverInfo": self._server_info,
            }
            if self._instructions:
                result["instructions"] = self._instructions
            return result

        if message.method == "ping":
            return {}

        if message.method == "tools/list":
            return {"tools": [d.to_catalog() for d in self._tools.list_tools()]}

        raise MethodNotFound(f"Method not found: {message.method}")

    async def invoke(
        self,
        descriptor: ToolDescriptor,
        handler: ToolHandler,
        args: ValidatedArgs,
        session_id: str,
    ) -> InvocationResult:
        """Run a handler inside the failure boundary.

        Timeouts, upstream failures and any other exception become an
        apology result; nothing propagates except cancellation.
        """
        context = ToolContext(session_id=session_id, http=self._http)
        try:
            result = await asyncio.wait_for(
                handler(dict(args.values), context), timeout=self._tool_timeout
            )
        except TimeoutError:
            logger.warning(f"Tool {descriptor.name} timed out after {self._tool_timeout}s")
        except UpstreamFailure as e:
            logger.warning(f"Tool {descriptor.name} upstream failure: {e}")
        except httpx.HTTPError as e:
            logger.warning(f"Tool {descriptor.name} HTTP error: {e!r}")
        except Exception:
            logger.exception(f"Tool {descriptor.name} raised")
        else:
            if isinstance(result, InvocationResult):
                return result
            logger.error(
                f"Tool {descriptor.name} returned {type(result).__name__}, "
                "expected InvocationResult"
            )
        return InvocationResult.text(descriptor.failure_message(args.values))

    async def _run(
        self,
        transport: SSEStreamTransport,
        request: InvocationRequest,
        descriptor: ToolDescriptor,
        handler: ToolHandler,
        args: ValidatedArgs,
    ) -> None:
        result = await self.invoke(descriptor, handler, args, request.session_id)
        await self._deliver(transport, request, result)

    async def _deliver(
        self,
        transport: SSEStreamTransport,
        request: InvocationRequest,
        result: InvocationResult,
    ) -> None:
        response = JsonRpcResponse(id=request.request_id, result=result.to_wire())
        if not await transport.send(response):
            logger.info(
                f"Session {request.session_id} closed before {request.tool_name} "
                "result was delivered"
            )

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Dispatch task failed: {exc!r}")

    async def drain(self) -> None:
        """Wait for every in-flight tool call to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        """Cancel in-flight tool calls (shutdown)."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
