"""CLI commands for awaybot."""

import asyncio
import sys
from datetime import tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import typer
from loguru import logger

from awaybot import __logo__, __version__
from awaybot.config.loader import (
    get_policy_path,
    get_settings_path,
    load_policy,
    load_settings,
    save_settings,
)
from awaybot.config.schema import Settings

app = typer.Typer(
    name="awaybot",
    help=f"{__logo__} awaybot - WhatsApp auto-responder",
    no_args_is_help=True,
)

DataDirOption = typer.Option(
    None,
    "--data-dir",
    "-d",
    envvar="AWAYBOT_DATA_DIR",
    help="Directory holding settings and state files.",
)


def version_callback(value: bool):
    if value:
        typer.echo(f"{__logo__} awaybot v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
):
    """awaybot - WhatsApp auto-responder."""


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def _resolve_timezone(name: str | None) -> tzinfo | None:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, using server local time")
        return None


# ============================================================================
# Onboard / Setup
# ============================================================================


@app.command()
def onboard(data_dir: Optional[Path] = DataDirOption):
    """Initialize awaybot settings and policy files."""
    settings_path = get_settings_path(data_dir)
    data_path = settings_path.parent

    if settings_path.exists():
        typer.echo(f"Config already exists at {settings_path}")
        if typer.confirm("Overwrite with defaults?"):
            save_settings(Settings(data_dir=str(data_path)), settings_path)
            typer.echo(f"✓ Config reset to defaults at {settings_path}")
        else:
            settings = load_settings(settings_path)
            save_settings(settings, settings_path)
            typer.echo(f"✓ Config refreshed at {settings_path} (existing values preserved)")
    else:
        save_settings(Settings(data_dir=str(data_path)), settings_path)
        typer.echo(f"✓ Created config at {settings_path}")

    policy_path = get_policy_path(data_path)
    existed = policy_path.exists()
    load_policy(policy_path)
    if not existed:
        typer.echo(f"✓ Created policy at {policy_path}")

    typer.echo(f"\n{__logo__} awaybot is ready!")
    typer.echo("\nNext steps:")
    typer.echo(f"  1. Start the WhatsApp bridge and set its URL in {settings_path}")
    typer.echo(f"  2. Add your admin number to adminIdentifiers in {policy_path}")
    typer.echo("  3. Run: awaybot run")


# ============================================================================
# Run
# ============================================================================


async def _serve(settings: Settings) -> None:
    from awaybot.bus.queue import MessageBus
    from awaybot.channels.manager import ChannelManager
    from awaybot.engine.context import EngineContext
    from awaybot.engine.loop import ReplyLoop
    from awaybot.health import HealthServer
    from awaybot.utils.helpers import ensure_dir

    data_path = ensure_dir(settings.data_path)
    ctx = EngineContext.from_data_dir(data_path, tz=_resolve_timezone(settings.timezone))
    bus = MessageBus()
    channels = ChannelManager(settings, bus)
    reply_loop = ReplyLoop(bus, ctx, channels.send, command_prefix=settings.command_prefix)

    health = None
    if settings.health.enabled:
        health = HealthServer(
            ctx,
            is_connected=lambda: channels.is_connected,
            host=settings.health.host,
            port=settings.health.port,
        )
        await health.start()

    loop_task = asyncio.create_task(reply_loop.run())
    try:
        await channels.start_all()
    finally:
        reply_loop.stop()
        await channels.stop_all()
        if health:
            await health.stop()
        await loop_task


@app.command()
def run(data_dir: Optional[Path] = DataDirOption):
    """Connect to WhatsApp and start auto-replying."""
    from awaybot.errors import LoggedOutError

    settings = load_settings(get_settings_path(data_dir))
    _configure_logging(settings.log_level)
    logger.info(f"Using data directory: {settings.data_path}")

    try:
        asyncio.run(_serve(settings))
    except LoggedOutError as e:
        logger.error(str(e))
        typer.echo(f"Logged out: {e}", err=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        typer.echo("\nGoodbye!")


# ============================================================================
# Status
# ============================================================================


@app.command()
def status(data_dir: Optional[Path] = DataDirOption):
    """Show awaybot status."""
    from awaybot.engine.context import ASSIST_FILE, LEDGER_FILE
    from awaybot.store.assist import AssistStore
    from awaybot.store.ledger import ReplyLedger

    settings_path = get_settings_path(data_dir)
    settings = load_settings(settings_path)
    data_path = settings.data_path
    policy_path = get_policy_path(data_path)

    typer.echo(f"{__logo__} awaybot Status\n")
    typer.echo(f"Config: {settings_path} {'✓' if settings_path.exists() else '✗'}")
    typer.echo(f"Policy: {policy_path} {'✓' if policy_path.exists() else '✗'}")
    typer.echo(f"Bridge: {settings.bridge.url} ({'enabled' if settings.bridge.enabled else 'disabled'})")

    if not policy_path.exists():
        return

    policy = load_policy(policy_path)
    typer.echo(f"Mode: {policy.mode}")
    typer.echo(f"Owner: {policy.owner_display_name}")
    typer.echo(f"Auto-reply: {'on' if policy.auto_reply_enabled else 'off'}")
    typer.echo(f"Admins: {len(policy.admin_identifiers)}")
    typer.echo(f"Replied messages: {len(ReplyLedger(data_path / LEDGER_FILE))}")
    typer.echo(f"Assist records: {len(AssistStore(data_path / ASSIST_FILE))}")


if __name__ == "__main__":
    app()
