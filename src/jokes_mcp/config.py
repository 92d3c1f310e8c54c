"""Server configuration.

Values come from environment variables and can be overridden by CLI
flags. Environment variables:

    HOST                      Interface to bind (default 0.0.0.0)
    PORT                      Port to bind (default 3001)
    JOKES_MCP_SSE_PATH        Stream-open path (default /sse)
    JOKES_MCP_MESSAGE_PATH    Message POST path (default /jokes)
    JOKES_MCP_PUBLIC_URL      Absolute base URL advertised in the endpoint
                              event, for deployments behind a proxy
    JOKES_MCP_TOOL_TIMEOUT    Seconds a tool call may take (default 5)
    JOKES_MCP_KEEPALIVE       Seconds between stream keep-alives (default 15)
    JOKES_MCP_LOG_LEVEL       Logging level (default INFO)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

DEFAULT_PORT = 3001
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServerConfig:
    """Runtime settings for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    sse_path: str = "/sse"
    message_path: str = "/jokes"
    public_url: str | None = None
    tool_timeout: float = 5.0
    keepalive_interval: float = 15.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError(f"Port out of range: {self.port}")
        if self.tool_timeout <= 0:
            raise ValueError("Tool timeout must be positive")
        if self.keepalive_interval <= 0:
            raise ValueError("Keep-alive interval must be positive")
        for path in (self.sse_path, self.message_path):
            if not path.startswith("/"):
                raise ValueError(f"Path must start with '/': {path}")
        if self.sse_path == self.message_path:
            raise ValueError("SSE and message paths must differ")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerConfig:
        """Build a config from environment variables.

        Raises:
            ValueError: A numeric variable does not parse
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=env.get("HOST", defaults.host),
            port=_parse(env, "PORT", int, defaults.port),
            sse_path=env.get("JOKES_MCP_SSE_PATH", defaults.sse_path),
            message_path=env.get("JOKES_MCP_MESSAGE_PATH", defaults.message_path),
            public_url=env.get("JOKES_MCP_PUBLIC_URL") or None,
            tool_timeout=_parse(env, "JOKES_MCP_TOOL_TIMEOUT", float, defaults.tool_timeout),
            keepalive_interval=_parse(
                env, "JOKES_MCP_KEEPALIVE", float, defaults.keepalive_interval
            ),
            log_level=env.get("JOKES_MCP_LOG_LEVEL", defaults.log_level).upper(),
        )

    def with_overrides(self, **overrides: Any) -> ServerConfig:
        """Copy with the given fields replaced; ``None`` values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def endpoint_url(self, session_id: str) -> str:
        """URL a client POSTs messages to for ``session_id``."""
        base = self.public_url.rstrip("/") if self.public_url else ""
        return f"{base}{self.message_path}?sessionId={session_id}"


def _parse(env: Mapping[str, str], name: str, kind: type, default: Any) -> Any:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None
