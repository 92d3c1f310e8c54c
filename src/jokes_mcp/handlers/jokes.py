"""Joke tools backed by public joke APIs."""

from __future__ import annotations

from typing import Any

from ..errors import UpstreamFailure
from ..protocol.content import InvocationResult
from ..tools import ToolContext, ToolDescriptor
from .common import fetch_json, require_text

CHUCK_RANDOM_URL = "https://api.chucknorris.io/jokes/random"
CHUCK_CATEGORIES_URL = "https://api.chucknorris.io/jokes/categories"
DAD_JOKE_URL = "https://icanhazdadjoke.com/"
YO_MAMA_URL = "https://www.yomama-jokes.com/api/v1/jokes/random"

CHUCK_JOKE = ToolDescriptor(
    name="get-chuck-joke",
    description="Get a random Chuck Norris joke",
    apology="Sorry, couldn't fetch a Chuck Norris joke right now.",
)
CHUCK_CATEGORIES = ToolDescriptor(
    name="get-chuck-categories",
    description="Get all available categories for Chuck Norris jokes",
    apology="Sorry, couldn't fetch the Chuck Norris joke categories right now.",
)
DAD_JOKE = ToolDescriptor(
    name="get-dad-joke",
    description="Get a random dad joke",
    apology="Sorry, couldn't fetch a dad joke right now.",
)
YO_MAMA_JOKE = ToolDescriptor(
    name="get-yo-mama-joke",
    description="Get a random Yo Mama joke",
    apology="Sorry, couldn't fetch a Yo Mama joke right now.",
)


async def get_chuck_joke(args: dict[str, Any], context: ToolContext) -> InvocationResult:
    data = await fetch_json(context.http, CHUCK_RANDOM_URL)
    return InvocationResult.text(require_text(data, "value", CHUCK_RANDOM_URL))


async def get_chuck_categories(
    args: dict[str, Any], context: ToolContext
) -> InvocationResult:
    data = await fetch_json(context.http, CHUCK_CATEGORIES_URL)
    if not isinstance(data, list) or not all(isinstance(c, str) for c in data):
        raise UpstreamFailure(
            f"{CHUCK_CATEGORIES_URL} did not return a list of categories",
            details={"url": CHUCK_CATEGORIES_URL},
        )
    return InvocationResult.text(", ".join(data))


async def get_dad_joke(args: dict[str, Any], context: ToolContext) -> InvocationResult:
    data = await fetch_json(context.http, DAD_JOKE_URL)
    return InvocationResult.text(require_text(data, "joke", DAD_JOKE_URL))


async def get_yo_mama_joke(args: dict[str, Any], context: ToolContext) -> InvocationResult:
    data = await fetch_json(context.http, YO_MAMA_URL)
    return InvocationResult.text(require_text(data, "joke", YO_MAMA_URL))
