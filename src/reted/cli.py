"""CLI interface for ReTed.

Runs the caching proxy server and drives the front end from the terminal.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click
import httpx

from reted.config import Config


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
def cli() -> None:
    """ReTed - talks, cached and served."""


@click.group()
def cache() -> None:
    """Talk cache commands."""


cli.add_command(cache)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover reted.toml)",
)
@click.option(
    "--cache-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Cache directory (overrides config)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--upstream-url",
    default=None,
    help="Talks API base URL (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging)",
)
@click.option(
    "--cache/--no-cache",
    "cache_enabled",
    default=None,
    help="Enable/disable caching (overrides config, default: enabled)",
)
def serve(
    config_path: Path | None,
    cache_dir: Path | None,
    host: str | None,
    port: int | None,
    upstream_url: str | None,
    verbose: bool,
    cache_enabled: bool | None,
) -> None:
    """Start the ReTed server."""
    from reted.server import run_server

    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(
        host=host,
        port=port,
        cache_dir=cache_dir,
        cache_enabled=cache_enabled,
        upstream_url=upstream_url,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Upstream: {config.upstream.base_url}")
    if not config.upstream.api_key:
        click.echo(
            click.style("Warning: no upstream API key configured", fg="yellow"),
        )
    if config.cache.enabled:
        click.echo(f"Cache directory: {config.cache.dir} (ttl {config.cache.ttl}s)")
    else:
        click.echo("Cache: disabled")

    run_server(config)


@cli.command()
@click.argument("locations", nargs=-1)
@click.option(
    "--server",
    "-s",
    "server_url",
    default=None,
    help="ReTed server URL (default: from config host and port)",
)
@click.option(
    "--random",
    "random_talk",
    is_flag=True,
    help="Finish with a random talk request",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover reted.toml)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging)",
)
def browse(
    locations: tuple[str, ...],
    server_url: str | None,
    random_talk: bool,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Visit LOCATIONS in order and print the resulting page.

    Locations are front-end URLs such as "/", "/talks/<slug>" or
    "/search?q=<text>".
    """
    if verbose:
        _configure_logging(verbose)

    if server_url is None:
        config = _load_config(config_path)
        server_url = f"http://{config.server.host}:{config.server.port}"

    title, screen, location = asyncio.run(
        _browse(server_url, list(locations) or ["/"], random_talk=random_talk)
    )

    click.echo(click.style(title, bold=True))
    click.echo(click.style(location, dim=True))
    click.echo()
    click.echo(screen)


async def _browse(
    server_url: str,
    locations: list[str],
    *,
    random_talk: bool,
) -> tuple[str, str, str]:
    from reted.client.messages import RandomTalk
    from reted.client.program import Program

    async with httpx.AsyncClient(base_url=server_url, timeout=30.0) as client:
        program = Program(client, locations[0])
        try:
            await program.run_until_idle()
            for location in locations[1:]:
                program.visit(location)
                await program.run_until_idle()
            if random_talk:
                program.dispatch(RandomTalk())
                await program.run_until_idle()
        finally:
            await program.close()

    return program.title, program.render(), program.location


@cache.command("clear")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover reted.toml)",
)
@click.option(
    "--cache-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Cache directory (overrides config)",
)
def clear_cache(config_path: Path | None, cache_dir: Path | None) -> None:
    """Remove every cached talk, listing and search result."""
    from reted.core.cache import TalkCache

    config = _load_config(config_path).with_overrides(cache_dir=cache_dir)
    TalkCache(config.cache.dir).clear()
    click.echo(f"Cleared cache in {config.cache.dir}")


if __name__ == "__main__":
    cli()
