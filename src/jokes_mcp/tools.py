"""Tool registry for the jokes MCP server.

Architecture:
- ToolParameter / ToolDescriptor: Immutable description of a tool and its inputs
- ToolRegistry: Name -> (descriptor, handler) mapping with argument validation
- ToolContext: Per-call context passed to handlers (session id, HTTP client)

Usage:
    registry = ToolRegistry()
    registry.register(
        ToolDescriptor(
            name="get-weather",
            description="Get current weather information for a given city",
            parameters=(ToolParameter("city", required=True),),
        ),
        get_weather,
    )
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from .errors import DuplicateTool, UnknownTool
from .protocol.content import InvocationResult

logger = logging.getLogger(__name__)

# Parameter types understood by validate(); JSON Schema names.
SUPPORTED_TYPES = {"string": str}


@dataclass
class ToolContext:
    """Context passed to tool handlers.

    Attributes:
        session_id: Session the result will be delivered to
        http: Shared client for upstream calls
    """

    session_id: str
    http: httpx.AsyncClient


ToolHandler = Callable[[dict[str, Any], ToolContext], Awaitable[InvocationResult]]


@dataclass(frozen=True)
class ToolParameter:
    """A named tool input.

    Attributes:
        name: Argument key
        type: JSON Schema primitive type (only "string" today)
        description: Human-readable description for the client
        required: Whether the argument must be supplied and non-empty
        guidance: Text returned to the caller when a required value is missing
    """

    name: str
    type: str = "string"
    description: str = ""
    required: bool = False
    guidance: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Parameter name cannot be empty")
        if self.type not in SUPPORTED_TYPES:
            raise ValueError(f"Unsupported parameter type: {self.type}")

    def missing_message(self) -> str:
        if self.guidance:
            return self.guidance
        hint = f" ({self.description})" if self.description else ""
        return f"Please provide a value for '{self.name}'{hint}."


@dataclass(frozen=True)
class ToolDescriptor:
    """Definition of a tool.

    Attributes:
        name: Unique identifier for the tool
        description: Human-readable description for the client
        parameters: Ordered input parameters
        apology: Template returned when the handler fails; formatted with
            the call arguments and ``tool``
    """

    name: str
    description: str
    parameters: tuple[ToolParameter, ...] = ()
    apology: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Tool name cannot be empty")
        if not self.description:
            raise ValueError("Tool description cannot be empty")
        names = [p.name for p in self.parameters]
        if len(names) != len(set(names)):
            raise ValueError(f"Tool '{self.name}' declares a parameter twice")

    @property
    def input_schema(self) -> dict[str, Any]:
        """JSON Schema for tool parameters (MCP ``inputSchema``)."""
        properties: dict[str, Any] = {}
        for param in self.parameters:
            prop: dict[str, Any] = {"type": param.type}
            if param.description:
                prop["description"] = param.description
            properties[param.name] = prop
        return {
            "type": "object",
            "properties": properties,
            "required": [p.name for p in self.parameters if p.required],
        }

    def to_catalog(self) -> dict[str, Any]:
        """Entry for a ``tools/list`` response."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    def failure_message(self, arguments: Mapping[str, Any]) -> str:
        """Apology for a failed call, referencing the requested input."""
        if self.apology:
            try:
                return self.apology.format(tool=self.name, **arguments)
            except (KeyError, IndexError, TypeError, ValueError):
                logger.debug(f"Apology template for {self.name} could not be formatted")
        if arguments:
            shown = ", ".join(f"{k}={v!r}" for k, v in arguments.items())
            return f"Sorry, couldn't complete {self.name} for {shown}."
        return f"Sorry, couldn't complete {self.name} right now."


@dataclass(frozen=True)
class ValidatedArgs:
    """Arguments that passed validation; unknown keys already dropped."""

    values: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationError:
    """Structured validation failure.

    Not an exception: validation failures are delivered to the caller as
    ordinary result text.
    """

    parameter: str
    message: str

    def to_result(self) -> InvocationResult:
        return InvocationResult.text(self.message)


class ToolRegistry:
    """Central registry for tools.

    Example:
        registry = ToolRegistry()
        registry.register(descriptor, handler)

        descriptor, handler = registry.resolve("get-weather")
        outcome = registry.validate(descriptor, {"city": "London"})
    """

    def __init__(self) -> None:
        self._tools: dict[str, tuple[ToolDescriptor, ToolHandler]] = {}

    def register(self, descriptor: ToolDescriptor, handler: ToolHandler) -> None:
        """Register a tool.

        Raises:
            DuplicateTool: If a tool with the same name is already registered
        """
        if not callable(handler):
            raise ValueError("Tool handler must be callable")
        if descriptor.name in self._tools:
            raise DuplicateTool(descriptor.name)
        self._tools[descriptor.name] = (descriptor, handler)
        logger.debug(f"Registered tool: {descriptor.name}")

    def resolve(self, name: str) -> tuple[ToolDescriptor, ToolHandler]:
        """Look up a tool by name.

        Raises:
            UnknownTool: If no tool has that name
        """
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownTool(name) from None

    @staticmethod
    def validate(
        descriptor: ToolDescriptor, args: Mapping[str, Any]
    ) -> ValidatedArgs | ValidationError:
        """Check arguments against a descriptor's parameters.

        Required parameters must be present with a non-empty value of the
        declared type. Optional parameters are checked only when given.
        Arguments the descriptor does not declare are ignored.
        """
        values: dict[str, Any] = {}
        for param in descriptor.parameters:
            value = args.get(param.name)
            if _is_empty(value):
                if param.required:
                    return ValidationError(param.name, param.missing_message())
                continue
            if not isinstance(value, SUPPORTED_TYPES[param.type]):
                return ValidationError(
                    param.name, f"The '{param.name}' argument must be a {param.type}."
                )
            values[param.name] = value.strip() if isinstance(value, str) else value
        return ValidatedArgs(values)

    def list_tools(self) -> list[ToolDescriptor]:
        """All descriptors in registration order."""
        return [descriptor for descriptor, _ in self._tools.values()]

    def list_names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False
