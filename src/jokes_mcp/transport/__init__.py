"""Outbound stream transports."""

from .sse import KEEPALIVE_FRAME, SSEStreamTransport, format_sse, serialize

__all__ = [
    "KEEPALIVE_FRAME",
    "SSEStreamTransport",
    "format_sse",
    "serialize",
]
