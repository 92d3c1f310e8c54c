"""Tool result content blocks.

Results are an ordered list of content blocks. Only text blocks are
produced today; the ``type`` discriminator leaves room for more.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class TextContent(BaseModel):
    """A block of plain text."""

    type: Literal["text"] = "text"
    text: str


class InvocationResult(BaseModel):
    """Outcome of a tool call, delivered on the session stream.

    Failures (missing arguments, upstream errors) are ordinary results
    whose text explains the problem.
    """

    content: list[TextContent] = Field(default_factory=list)

    @classmethod
    def text(cls, text: str) -> InvocationResult:
        """Build a result with a single text block."""
        return cls(content=[TextContent(text=text)])

    @property
    def texts(self) -> list[str]:
        """Text payloads in block order."""
        return [block.text for block in self.content]

    def to_wire(self) -> dict[str, Any]:
        """Serialize for a JSON-RPC ``result`` field."""
        return self.model_dump()
