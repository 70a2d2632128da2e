"""Click CLI for serving the webhook and inspecting the quick-reply catalog."""

from __future__ import annotations

import json
import os

import click

from responder.catalog.quick_replies import QuickReplyCatalog, resolve_images
from responder.errors import CatalogError, CatalogMissError


@click.group()
def cli() -> None:
    """Messenger responder."""


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind.")
@click.option("--port", default=None, type=int, help="Port to listen on (default: PORT or 5000).")
@click.option("--config", "config_path", default=None, help="Path to a JSON config file.")
def serve(host: str, port: int | None, config_path: str | None) -> None:
    """Run the webhook server."""
    import uvicorn

    if config_path:
        os.environ["RESPONDER_CONFIG"] = config_path
    port = port or int(os.environ.get("PORT", "5000"))
    click.echo(f"Responder listening on port {port}", err=True)
    uvicorn.run("responder.app:create_app_from_env", factory=True, host=host, port=port)


@cli.group("catalog")
@click.option(
    "--path",
    default=lambda: os.environ.get("QUICK_REPLIES_PATH", "data/quick_replies.json"),
    help="Quick-reply store to read.",
)
@click.pass_context
def catalog_group(ctx: click.Context, path: str) -> None:
    """Inspect the quick-reply catalog."""
    ctx.ensure_object(dict)
    try:
        ctx.obj["catalog"] = QuickReplyCatalog.from_file(path)
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc


@catalog_group.command("list")
@click.pass_context
def catalog_list(ctx: click.Context) -> None:
    """List use-case keys."""
    catalog: QuickReplyCatalog = ctx.obj["catalog"]
    for key in sorted(catalog.keys()):
        click.echo(key)


@catalog_group.command("show")
@click.argument("use_case")
@click.option("--base-url", default=None, help="Resolve relative image URLs against this base.")
@click.pass_context
def catalog_show(ctx: click.Context, use_case: str, base_url: str | None) -> None:
    """Print one definition as JSON."""
    catalog: QuickReplyCatalog = ctx.obj["catalog"]
    try:
        definition = catalog.require(use_case)
    except CatalogMissError as exc:
        raise click.ClickException(str(exc)) from exc
    if base_url:
        definition = resolve_images(definition, base_url)
    click.echo(json.dumps(definition.to_message(), indent=2))


@catalog_group.command("check")
@click.pass_context
def catalog_check(ctx: click.Context) -> None:
    """Validate the store and report how many definitions it holds."""
    catalog: QuickReplyCatalog = ctx.obj["catalog"]
    click.echo(f"{len(catalog)} quick-reply definitions OK")
