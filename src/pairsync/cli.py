"""CLI entry point for pairsync."""

from pathlib import Path

import click

from pairsync import __version__
from pairsync.config import load_config
from pairsync.logging import setup_logging


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to config file.",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None) -> None:
    """pairsync - Pair a second device by scanning a rotating code."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config)
    ctx.obj["logger"] = setup_logging(ctx.obj["config"])


@main.command()
@click.option(
    "--auth-key",
    envvar="PAIRSYNC_AUTH_KEY",
    default="",
    help="Authentication key (or PAIRSYNC_AUTH_KEY).",
)
@click.option(
    "--auth-id",
    envvar="PAIRSYNC_AUTH_ID",
    default="",
    help="Account id bound to the session (or PAIRSYNC_AUTH_ID).",
)
@click.option(
    "--endpoint",
    "-e",
    default=None,
    help="Session endpoint URL (overrides config).",
)
@click.option(
    "--timeout",
    "-t",
    type=float,
    default=None,
    help="Cancel the session after this many seconds.",
)
@click.option(
    "--no-qr",
    is_flag=True,
    help="Print pairing codes as text instead of QR codes.",
)
@click.pass_context
def sync(
    ctx: click.Context,
    auth_key: str,
    auth_id: str,
    endpoint: str | None,
    timeout: float | None,
    no_qr: bool,
) -> None:
    """Start a sync session and wait for the other device."""
    import asyncio

    from pairsync.display import TerminalDisplay
    from pairsync.errors import RequestError
    from pairsync.pairing import (
        PairingChannel,
        SessionRequester,
        SyncController,
        SyncSession,
    )
    from pairsync.protocols import ProtocolState

    config = ctx.obj["config"]
    display = TerminalDisplay(
        show_qr=config.display.qr and not no_qr,
        invert=config.display.invert,
    )

    async def _sync() -> ProtocolState:
        async with SessionRequester(
            endpoint=endpoint or config.session_endpoint,
            url_field=config.url_field,
            timeout=config.request_timeout,
        ) as requester:
            controller = SyncController(
                requester,
                on_state_change=display,
                channel_factory=lambda: PairingChannel(strict=config.strict_frames),
                session_timeout=timeout if timeout is not None else config.session_timeout,
            )
            try:
                await controller.start(SyncSession(auth_key=auth_key, auth_id=auth_id))
                return await controller.wait_finished()
            except RequestError:
                # Already reported through the display
                return controller.state
            finally:
                await controller.cancel()

    try:
        final_state = asyncio.run(_sync())
    except KeyboardInterrupt:
        click.echo("\nCancelled")
        raise SystemExit(1)

    if final_state != ProtocolState.COMPLETE:
        raise SystemExit(1)


@main.command()
def version() -> None:
    """Show version."""
    click.echo(f"pairsync version {__version__}")
