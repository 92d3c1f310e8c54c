"""Current weather via wttr.in."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from ..errors import UpstreamFailure
from ..protocol.content import InvocationResult
from ..tools import ToolContext, ToolDescriptor, ToolParameter
from .common import fetch_json

WTTR_URL = "https://wttr.in/{city}?format=j1"

WEATHER_TEMPLATE = (
    "Weather in {city}: {description}. Temp {temp_c} °C ({temp_f} °F), "
    "Humidity {humidity} %, Wind {wind} km/h."
)

WEATHER = ToolDescriptor(
    name="get-weather",
    description="Get current weather information for a given city",
    parameters=(
        ToolParameter(
            "city",
            description="Name of the city, e.g. 'New York'",
            required=True,
            guidance="Please specify a city name (e.g. London).",
        ),
    ),
    apology="Sorry, couldn't fetch weather for “{city}”.",
)


def format_weather(city: str, current: dict[str, Any]) -> str:
    """Render a ``current_condition`` entry from the wttr.in j1 format."""
    try:
        description = current["weatherDesc"][0]["value"]
        fields = {
            "temp_c": current["temp_C"],
            "temp_f": current["temp_F"],
            "humidity": current["humidity"],
            "wind": current["windspeedKmph"],
        }
    except (KeyError, IndexError, TypeError) as e:
        raise UpstreamFailure(f"Incomplete weather data for {city}: {e!r}") from e
    return WEATHER_TEMPLATE.format(city=city, description=description, **fields)


async def get_weather(args: dict[str, Any], context: ToolContext) -> InvocationResult:
    city = args["city"]
    url = WTTR_URL.format(city=quote(city, safe=""))
    data = await fetch_json(context.http, url)

    conditions = data.get("current_condition") if isinstance(data, dict) else None
    if not conditions or not isinstance(conditions, list):
        raise UpstreamFailure(f"No weather data for {city}", details={"url": url})
    return InvocationResult.text(format_weather(city, conditions[0]))
