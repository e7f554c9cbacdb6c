"""Click CLI for managing settings and running the webhook server."""

from __future__ import annotations

import json
from pathlib import Path

import click

from eventbrite_fluentcrm.audit.logger import read_events
from eventbrite_fluentcrm.config import (
    SETTING_KEYS,
    JsonFileConfigStore,
    load_settings,
    parse_flag,
    parse_list,
)
from eventbrite_fluentcrm.server.app import WEBHOOK_PATH
from eventbrite_fluentcrm.webhook.verifier import compute_signature

_LIST_KEYS = {"default_tags", "default_lists"}
_FLAG_KEYS = {"debug_mode", "require_signature"}


@click.group()
@click.option(
    "--settings", "settings_path", default="data/settings.json",
    envvar="EVENTBRITE_FLUENTCRM_SETTINGS_PATH", help="Settings JSON file.",
)
@click.pass_context
def cli(ctx: click.Context, settings_path: str) -> None:
    """Eventbrite to FluentCRM webhook sync."""
    ctx.ensure_object(dict)
    ctx.obj["store"] = JsonFileConfigStore(settings_path)


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Write default settings for any key not yet set."""
    store: JsonFileConfigStore = ctx.obj["store"]
    written = store.initialize_defaults()
    if written:
        click.echo(f"Initialized: {', '.join(written)}")
    else:
        click.echo("Settings already initialized")


@cli.group("settings")
def settings_group() -> None:
    """Show or change stored settings."""


@settings_group.command("show")
@click.pass_context
def settings_show(ctx: click.Context) -> None:
    """Print current settings with credentials masked."""
    store: JsonFileConfigStore = ctx.obj["store"]
    click.echo(json.dumps(load_settings(store).masked(), indent=2))


@settings_group.command("set")
@click.argument("key", type=click.Choice(SETTING_KEYS))
@click.argument("value")
@click.pass_context
def settings_set(ctx: click.Context, key: str, value: str) -> None:
    """Persist one setting. Tags and lists take comma-separated values."""
    store: JsonFileConfigStore = ctx.obj["store"]
    stored: object = value
    if key in _LIST_KEYS:
        stored = parse_list(value)
    elif key in _FLAG_KEYS:
        stored = "1" if parse_flag(value) else "0"
    elif key == "request_timeout":
        try:
            stored = float(value)
        except ValueError as exc:
            raise click.BadParameter("must be a number of seconds", param_hint="VALUE") from exc
        if stored <= 0:
            raise click.BadParameter("must be positive", param_hint="VALUE")
    store.set(key, stored)
    click.echo(f"Saved {key}")


@cli.command("webhook-url")
@click.argument("base_url")
def webhook_url(base_url: str) -> None:
    """Print the URL to register as the Eventbrite webhook endpoint."""
    click.echo(f"{base_url.rstrip('/')}{WEBHOOK_PATH}")


@cli.command()
@click.argument("body_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def sign(ctx: click.Context, body_file: Path) -> None:
    """Print the x-eventbrite-signature value for a request body."""
    settings = load_settings(ctx.obj["store"])
    if not settings.webhook_secret:
        raise click.ClickException("No webhook secret configured")
    click.echo(compute_signature(body_file.read_bytes(), settings.webhook_secret))


@cli.group("audit")
def audit_group() -> None:
    """Inspect the webhook audit log."""


@audit_group.command("tail")
@click.option("--log", "log_path", default="data/audit.jsonl", envvar="AUDIT_LOG_PATH")
@click.option("--limit", default=20, show_default=True, type=click.IntRange(min=1))
def audit_tail(log_path: str, limit: int) -> None:
    """Print the most recent audit events."""
    for event in read_events(Path(log_path), limit=limit):
        click.echo(event.model_dump_json())


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--dry-run", is_flag=True, help="Keep contacts in memory instead of FluentCRM.")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, dry_run: bool) -> None:
    """Run the webhook server."""
    import uvicorn

    from eventbrite_fluentcrm.server.app import create_app_from_env

    store: JsonFileConfigStore = ctx.obj["store"]
    app = create_app_from_env(settings_path=str(store.path), dry_run=dry_run)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    cli()
