from __future__ import annotations

import asyncio
import json
import logging
import typing as t

import click

from .container import Services
from .errors import UpstreamError
from .scheduler import TBAProcessor
from .utils.config import AppConfig

logger = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def _with_services(config: AppConfig, fn: t.Callable[[Services], t.Awaitable[t.Any]]) -> t.Any:
    services = Services.build(config)
    await services.start()
    try:
        return await fn(services)
    finally:
        await services.close()


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
)
@click.pass_context
def main(ctx: click.Context, log_level: str) -> None:
    """Cached TMDB proxy and episode scheduler."""
    _configure_logging(log_level)
    ctx.obj = AppConfig.from_env()


@main.command()
@click.option("--host", default=None, help="Interface to bind (default from config)")
@click.option("--port", default=None, type=int, help="Port to listen on for HTTP (default $PORT or 3001)")
@click.option("--tba/--no-tba", "run_tba", default=None, help="Run the periodic TBA re-check job")
@click.pass_obj
def serve(config: AppConfig, host: t.Optional[str], port: t.Optional[int], run_tba: t.Optional[bool]) -> None:
    """Serve the HTTP API."""
    import uvicorn

    from .web import create_app

    if host:
        config.server.host = host
    if port:
        config.server.port = port
    if run_tba is not None:
        config.scheduler.run_tba_processor = run_tba
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)


@main.command("schedule")
@click.pass_obj
def show_schedule(config: AppConfig) -> None:
    """Print scheduled, due and TBA shows as JSON."""
    snapshot = asyncio.run(_with_services(config, lambda s: s.scheduler.snapshot()))
    click.echo(json.dumps(snapshot, indent=2))


@main.command("refresh-tba")
@click.pass_obj
def refresh_tba(config: AppConfig) -> None:
    """Re-check every TBA show once and move dated ones onto the schedule."""
    counts = asyncio.run(_with_services(config, lambda s: TBAProcessor(s.scheduler, s.tracker).process()))
    for state, count in sorted(counts.items(), key=lambda item: item[0].value):
        click.echo(f"{state.value}: {count}")


@main.command()
@click.argument("show_id")
@click.pass_obj
def track(config: AppConfig, show_id: str) -> None:
    """Fetch a TV show from TMDB and file it on the schedule or in TBA."""
    try:
        state = asyncio.run(_with_services(config, lambda s: s.tracker.track(show_id)))
    except UpstreamError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{show_id}: {state.value}")


if __name__ == "__main__":
    main()
