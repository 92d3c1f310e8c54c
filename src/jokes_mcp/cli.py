"""Jokes MCP server CLI.

Usage:
    jokes-mcp                         # Serve on 0.0.0.0:3001 (or $PORT)
    jokes-mcp --port 8080             # Custom port
    jokes-mcp --public-url https://jokes.example.com
    jokes-mcp --health                # Check a running server and exit
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click
import httpx

from .config import ServerConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
HEALTH_TIMEOUT = 5.0


@click.command()
@click.option("--host", default=None, help="Host to bind to [env: HOST]")
@click.option("--port", type=int, default=None, help="Port to bind to [env: PORT]")
@click.option(
    "--public-url",
    default=None,
    help="Base URL advertised to clients for POSTing messages [env: JOKES_MCP_PUBLIC_URL]",
)
@click.option(
    "--tool-timeout",
    type=float,
    default=None,
    help="Seconds a tool call may take [env: JOKES_MCP_TOOL_TIMEOUT]",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level [env: JOKES_MCP_LOG_LEVEL]",
)
@click.option("--health", "health_check", is_flag=True, help="Check server health and exit")
@click.option("--health-url", default=None, help="Server URL for health check")
def main(
    host: str | None,
    port: int | None,
    public_url: str | None,
    tool_timeout: float | None,
    log_level: str | None,
    health_check: bool,
    health_url: str | None,
) -> None:
    """Jokes MCP server - jokes (and weather!) over MCP HTTP+SSE."""
    try:
        config = ServerConfig.from_env().with_overrides(
            host=host,
            port=port,
            public_url=public_url,
            tool_timeout=tool_timeout,
            log_level=log_level.upper() if log_level else None,
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    if health_check:
        _do_health_check(health_url or f"http://localhost:{config.port}")
        return

    _run_http_server(config)


async def _fetch_health(url: str) -> dict:
    async with httpx.AsyncClient(timeout=HEALTH_TIMEOUT) as client:
        response = await client.get(f"{url.rstrip('/')}/health")
        response.raise_for_status()
        return response.json()


def _do_health_check(url: str) -> None:
    """Probe a running server's /health endpoint; exit 1 if it is not healthy."""
    try:
        data = asyncio.run(_fetch_health(url))
    except httpx.ConnectError:
        problem = f"Cannot connect to server at {url}"
    except httpx.TimeoutException:
        problem = f"Server at {url} did not answer within {HEALTH_TIMEOUT:g}s"
    except httpx.HTTPStatusError as e:
        problem = f"Server returned {e.response.status_code}"
    except ValueError:
        problem = f"Server at {url} returned a non-JSON health payload"
    else:
        click.echo(
            f"Server is healthy: {data.get('sessions', 0)} sessions, "
            f"{data.get('tools', 0)} tools"
        )
        return

    click.echo(problem, err=True)
    sys.exit(1)


def _run_http_server(config: ServerConfig) -> None:
    """Configure logging and serve the app until interrupted."""
    import uvicorn

    from .app import create_app

    logging.basicConfig(level=config.log_level, format=LOG_FORMAT, stream=sys.stderr)

    click.echo(f"Server is running at http://localhost:{config.port}", err=True)
    click.echo("Press Ctrl+C to stop", err=True)

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
