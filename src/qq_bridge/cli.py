"""CLI entry point for qq-bridge developer tooling."""

import logging
from pathlib import Path
from typing import Annotated

import typer

from qq_bridge import __version__
from qq_bridge.config import AppConfig, load_config
from qq_bridge.formatting import TemplateFields, message_kind, render, select_template, style_mode
from qq_bridge.models import BridgeMessage, ClientName, MessageExtra
from qq_bridge.monitoring.logging import setup_logging

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"qq-bridge {__version__}")
        raise typer.Exit()


app = typer.Typer(name="qq-bridge", help="qq-bridge: QQ processor for a multi-platform chat relay")


@app.callback()
def main(
    version: Annotated[
        bool, typer.Option("--version", "-V", help="Show version and exit", callback=_version_callback, is_eager=True)
    ] = False,
) -> None:
    """qq-bridge: QQ processor for a multi-platform chat relay."""


DEFAULT_CONFIG = Path("config.yaml")

ConfigOption = Annotated[Path, typer.Option("--config", "-c", help="Path to config.yaml")]


def _load_config(config_path: Path) -> AppConfig:
    """Load config from file, warning if the file does not exist."""
    if config_path.exists():
        return load_config(config_path)
    logger.warning("Config file %s not found, using defaults", config_path)
    return AppConfig()


def _setup_logging(cfg: AppConfig) -> None:
    log_file = Path(cfg.monitoring.log_file) if cfg.monitoring.log_file else None
    setup_logging(structured=cfg.monitoring.structured_logging, log_file=log_file)


@app.command("check-config")
def check_config(config: ConfigOption = DEFAULT_CONFIG) -> None:
    """Validate a config file and show the QQ notification settings."""
    try:
        cfg = _load_config(config)
    except ValueError as exc:
        # pydantic.ValidationError is a ValueError
        typer.echo(f"Invalid config: {exc}")
        raise typer.Exit(code=1)

    notify = cfg.qq.notify
    cache = cfg.qq.cache
    typer.echo("Notifications:")
    for name, enabled in notify.model_dump().items():
        typer.echo(f"  {name:<10} {'on' if enabled else 'off'}")
    typer.echo(f"Red packet dedup: {cache.cash_dedup_size} entries, {cache.cash_dedup_ttl:g}s")
    typer.echo(f"Member info cache: {cache.member_info_size} entries, {cache.member_info_ttl:g}s")


@app.command()
def preview(
    config: ConfigOption = DEFAULT_CONFIG,
    nick: Annotated[str, typer.Option("--nick", help="Sender nickname")] = "alice",
    text: Annotated[str, typer.Option("--text", help="Message text")] = "hello",
    client: Annotated[str, typer.Option("--client", help="Short name of the source platform")] = "",
    client_full: Annotated[str, typer.Option("--client-full", help="Full name of the source platform")] = "",
    clients: Annotated[int, typer.Option("--clients", help="Number of bridged platforms")] = 2,
    notice: Annotated[bool, typer.Option("--notice", help="Render as a notice")] = False,
    action: Annotated[bool, typer.Option("--action", help="Render as a /me action")] = False,
) -> None:
    """Render a sample relayed message with the configured message style."""
    cfg = _load_config(config)
    _setup_logging(cfg)

    message = BridgeMessage(
        from_="preview",
        to="preview",
        nick=nick,
        text=text,
        is_notice=notice,
        extra=MessageExtra(
            clients=clients,
            client_name=ClientName(shortname=client, fullname=client_full or client),
            is_action=action,
        ),
    )
    template = select_template(cfg.message_style, message)
    typer.echo(f"[{style_mode(message)}/{message_kind(message)}] {template}")
    typer.echo(render(template, TemplateFields.from_message(message)))
