"""Unit tests for the tool registry.

Tests registration, name resolution, argument validation and the
descriptor's wire rendering.
"""

from __future__ import annotations

from typing import Any

import pytest

from jokes_mcp.errors import DuplicateTool, UnknownTool
from jokes_mcp.handlers import build_registry
from jokes_mcp.handlers.weather import WEATHER
from jokes_mcp.tools import (
    ToolDescriptor,
    ToolParameter,
    ToolRegistry,
    ValidatedArgs,
    ValidationError,
)

# =============================================================================
# Descriptor Tests
# =============================================================================


class TestToolDescriptor:
    """Tests for ToolDescriptor and ToolParameter."""

    def test_empty_name_rejected(self) -> None:
        """A descriptor needs a name."""
        with pytest.raises(ValueError, match="name cannot be empty"):
            ToolDescriptor(name="", description="x")

    def test_empty_description_rejected(self) -> None:
        with pytest.raises(ValueError, match="description cannot be empty"):
            ToolDescriptor(name="x", description="")

    def test_duplicate_parameter_rejected(self) -> None:
        with pytest.raises(ValueError, match="declares a parameter twice"):
            ToolDescriptor(
                name="x",
                description="x",
                parameters=(ToolParameter("a"), ToolParameter("a")),
            )

    def test_unsupported_parameter_type(self) -> None:
        with pytest.raises(ValueError, match="Unsupported parameter type"):
            ToolParameter("n", type="integer")

    def test_descriptor_is_immutable(self) -> None:
        """Schema cannot change after construction."""
        with pytest.raises(AttributeError):
            WEATHER.parameters = ()  # type: ignore[misc]

    def test_input_schema(self) -> None:
        """Descriptors render as JSON Schema objects."""
        assert WEATHER.input_schema == {
            "type": "object",
            "properties": {
                "city": {"type": "string", "description": "Name of the city, e.g. 'New York'"}
            },
            "required": ["city"],
        }

    def test_to_catalog(self) -> None:
        entry = WEATHER.to_catalog()
        assert entry["name"] == "get-weather"
        assert entry["description"] == "Get current weather information for a given city"
        assert entry["inputSchema"]["required"] == ["city"]

    def test_failure_message_uses_template(self) -> None:
        assert WEATHER.failure_message({"city": "Paris"}) == (
            "Sorry, couldn't fetch weather for “Paris”."
        )

    def test_failure_message_default_mentions_arguments(self) -> None:
        descriptor = ToolDescriptor(name="lookup", description="Look things up")
        message = descriptor.failure_message({"term": "otter"})
        assert message.startswith("Sorry")
        assert "otter" in message

    def test_failure_message_bad_template_falls_back(self) -> None:
        """A template naming a missing argument does not raise."""
        descriptor = ToolDescriptor(
            name="lookup", description="Look things up", apology="No luck with {missing}"
        )
        assert descriptor.failure_message({}) == "Sorry, couldn't complete lookup right now."


# =============================================================================
# Registry Tests
# =============================================================================


class TestToolRegistry:
    """Tests for register/resolve."""

    def test_register_then_resolve_round_trip(self, echo_tool: tuple[Any, Any]) -> None:
        """Resolve returns the identical descriptor and handler."""
        descriptor, handler = echo_tool
        registry = ToolRegistry()
        registry.register(descriptor, handler)

        resolved_descriptor, resolved_handler = registry.resolve("echo")

        assert resolved_descriptor is descriptor
        assert resolved_handler is handler

    def test_duplicate_name_rejected(self, echo_tool: tuple[Any, Any]) -> None:
        registry = ToolRegistry()
        registry.register(*echo_tool)

        with pytest.raises(DuplicateTool) as exc_info:
            registry.register(*echo_tool)

        assert exc_info.value.name == "echo"

    def test_resolve_unknown(self) -> None:
        with pytest.raises(UnknownTool) as exc_info:
            ToolRegistry().resolve("nope")
        assert exc_info.value.http_status == 400

    def test_non_callable_handler_rejected(self, echo_tool: tuple[Any, Any]) -> None:
        descriptor, _ = echo_tool
        with pytest.raises(ValueError, match="callable"):
            ToolRegistry().register(descriptor, "not a function")  # type: ignore[arg-type]

    def test_list_tools_in_registration_order(self) -> None:
        registry = build_registry()
        assert registry.list_names() == [
            "get-chuck-joke",
            "get-chuck-categories",
            "get-dad-joke",
            "get-yo-mama-joke",
            "get-weather",
        ]
        assert [d.name for d in registry.list_tools()] == registry.list_names()
        assert "get-weather" in registry
        assert len(registry) == 5


# =============================================================================
# Validation Tests
# =============================================================================


class TestValidate:
    """Tests for ToolRegistry.validate."""

    def test_valid_arguments(self) -> None:
        outcome = ToolRegistry.validate(WEATHER, {"city": "London"})
        assert outcome == ValidatedArgs({"city": "London"})

    def test_missing_required_argument(self) -> None:
        outcome = ToolRegistry.validate(WEATHER, {})
        assert isinstance(outcome, ValidationError)
        assert outcome.parameter == "city"
        assert outcome.message == "Please specify a city name (e.g. London)."

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_required_argument(self, value: Any) -> None:
        outcome = ToolRegistry.validate(WEATHER, {"city": value})
        assert isinstance(outcome, ValidationError)

    def test_wrong_type(self) -> None:
        outcome = ToolRegistry.validate(WEATHER, {"city": 42})
        assert isinstance(outcome, ValidationError)
        assert "must be a string" in outcome.message

    def test_unknown_arguments_ignored(self) -> None:
        """Extra arguments are dropped, not rejected."""
        outcome = ToolRegistry.validate(WEATHER, {"city": "Oslo", "units": "metric"})
        assert outcome == ValidatedArgs({"city": "Oslo"})

    def test_values_are_stripped(self) -> None:
        outcome = ToolRegistry.validate(WEATHER, {"city": "  Lima "})
        assert outcome == ValidatedArgs({"city": "Lima"})

    def test_optional_parameter_may_be_absent(self) -> None:
        descriptor = ToolDescriptor(
            name="greet",
            description="Greet someone",
            parameters=(ToolParameter("name", required=False),),
        )
        assert ToolRegistry.validate(descriptor, {}) == ValidatedArgs({})

    def test_default_guidance_mentions_parameter(self) -> None:
        descriptor = ToolDescriptor(
            name="greet",
            description="Greet someone",
            parameters=(ToolParameter("name", description="Who to greet", required=True),),
        )
        outcome = ToolRegistry.validate(descriptor, {})
        assert isinstance(outcome, ValidationError)
        assert outcome.message == "Please provide a value for 'name' (Who to greet)."

    def test_validation_does_not_mutate_input(self) -> None:
        args = {"city": " Rome ", "extra": 1}
        ToolRegistry.validate(WEATHER, args)
        assert args == {"city": " Rome ", "extra": 1}

    def test_validation_error_renders_as_result(self) -> None:
        outcome = ToolRegistry.validate(WEATHER, {})
        assert isinstance(outcome, ValidationError)
        assert outcome.to_result().texts == ["Please specify a city name (e.g. London)."]
