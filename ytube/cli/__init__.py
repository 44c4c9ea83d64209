"""Command-line interface."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

import click

from ..api.client import YtubeClient
from ..config.settings import YtubeConfig, load_config, resolve_api_key
from ..core.models import APIResponse


def _configure_logging(settings: YtubeConfig, verbose: bool) -> None:
    if verbose:
        settings.log_level = "DEBUG"

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        filename=settings.log_file,
    )


def _error_text(error) -> str:
    """Flatten string and ``{"error": {"message": ...}}`` style errors."""
    if isinstance(error, dict):
        inner = error.get("error", error)
        if isinstance(inner, dict) and "message" in inner:
            return str(inner["message"])
        return json.dumps(error)
    return str(error)


def _run(ctx: click.Context, operation: Callable[[YtubeClient], Awaitable[APIResponse]]) -> None:
    """Run one client operation and print its result."""
    settings: YtubeConfig = ctx.obj["settings"]

    async def call() -> APIResponse:
        async with YtubeClient(settings) as client:
            if ctx.obj["key"]:
                client.set_key(ctx.obj["key"])
            if ctx.obj["page_token"]:
                client.set_next_page_token(ctx.obj["page_token"])
            return await operation(client)

    result = asyncio.run(call())

    if not result.success:
        click.echo(f"Error: {_error_text(result.error)}", err=True)
        ctx.exit(1)

    click.echo(json.dumps(result.data, indent=2, ensure_ascii=False))


def _parse_params(values: tuple[str, ...]) -> dict[str, str]:
    params = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got '{item}'", param_hint="--param")
        params[key] = value
    return params


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Custom configuration file",
)
@click.option("--key", "-k", help="API key (defaults to config or YOUTUBE_API_KEY)")
@click.option("--page-token", help="Page token returned by a previous request")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx: click.Context, config: Path | None, key: str | None,
         page_token: str | None, verbose: bool):
    """Query the YouTube Data API and print the JSON response."""
    settings = load_config(config)
    _configure_logging(settings, verbose)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["key"] = resolve_api_key(settings, key)
    ctx.obj["page_token"] = page_token


@main.command()
@click.argument("video_id")
@click.pass_context
def video(ctx: click.Context, video_id: str):
    """Show a video by ID."""
    _run(ctx, lambda client: client.get_by_id(video_id))


@main.command()
@click.argument("channel_id")
@click.pass_context
def channel(ctx: click.Context, channel_id: str):
    """Show a channel by ID."""
    _run(ctx, lambda client: client.get_channel_by_id(channel_id))


@main.command()
@click.argument("playlist_id")
@click.pass_context
def playlist(ctx: click.Context, playlist_id: str):
    """Show a playlist by ID."""
    _run(ctx, lambda client: client.get_playlists_by_id(playlist_id))


@main.command("playlist-items")
@click.argument("playlist_id")
@click.option("--max-results", "-n", type=click.IntRange(0, 50), help="Items per page")
@click.pass_context
def playlist_items(ctx: click.Context, playlist_id: str, max_results: int | None):
    """List the items of a playlist."""
    _run(ctx, lambda client: client.get_playlist_items_by_id(playlist_id, max_results))


@main.command()
@click.argument("query")
@click.option("--max-results", "-n", type=click.IntRange(0, 50), default=5, show_default=True)
@click.option("--param", "-p", "extra", multiple=True, metavar="KEY=VALUE",
              help="Extra search parameter, e.g. order=date (repeatable)")
@click.pass_context
def search(ctx: click.Context, query: str, max_results: int, extra: tuple[str, ...]):
    """Search for videos, channels and playlists."""
    params = _parse_params(extra)
    _run(ctx, lambda client: client.search(query, max_results, params))


@main.command()
@click.argument("video_id")
@click.option("--max-results", "-n", type=click.IntRange(0, 50), default=5, show_default=True)
@click.pass_context
def related(ctx: click.Context, video_id: str, max_results: int):
    """List videos related to a video."""
    _run(ctx, lambda client: client.related(video_id, max_results))


@main.command()
@click.option("--max-results", "-n", type=click.IntRange(1, 50), default=5, show_default=True)
@click.option("--category", help="Video category ID")
@click.option("--region", help="ISO 3166-1 alpha-2 region code (needs --category)")
@click.pass_context
def popular(ctx: click.Context, max_results: int, category: str | None, region: str | None):
    """List the most popular videos."""
    if region and not category:
        raise click.UsageError("--region requires --category")

    if category and region:
        _run(ctx, lambda client: client.get_most_popular_by_category_and_region(max_results, category, region))
    elif category:
        _run(ctx, lambda client: client.get_most_popular_by_category(max_results, category))
    else:
        _run(ctx, lambda client: client.get_most_popular(max_results))


if __name__ == "__main__":
    main()
