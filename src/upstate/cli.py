"""Typer CLI for upstate."""

from __future__ import annotations

import asyncio
import json
import platform

import typer

from upstate.config import load_settings
from upstate.core.app import build_context
from upstate.core.state import Connected
from upstate.logging import configure_logging
from upstate.network import UnknownEnvironmentError
from upstate.providers import EmulatorWalletProvider
from upstate.wallet import describe

app = typer.Typer(no_args_is_help=True)


@app.command()
def doctor() -> None:
    """Print environment diagnostics."""

    settings = load_settings()
    configure_logging(settings)
    info = {
        "python": platform.python_version(),
        "platform": platform.platform(),
        "dev": settings.is_dev,
        "experimental": settings.is_experimental,
        "paths": {
            "home": str(settings.paths.base_dir),
            "logs": str(settings.paths.logs_dir),
        },
    }
    typer.echo(json.dumps(info, indent=2))


@app.command()
def settings(key: str | None = typer.Argument(None)) -> None:
    """Display current settings or a specific section."""

    data = load_settings().model_dump()
    if key:
        data = data.get(key, {})
    typer.echo(json.dumps(data, indent=2, default=str))


@app.command()
def connect(
    environment: str | None = typer.Option(None, help="Environment to select before connecting."),
    reject: bool = typer.Option(False, help="Make the emulated wallet reject the request."),
    latency: float | None = typer.Option(None, min=0.0, help="Emulated wallet latency in seconds."),
) -> None:
    """Run one connection attempt against the emulated wallet, printing each state."""

    settings = load_settings()
    configure_logging(settings)

    emulator = EmulatorWalletProvider.from_settings(settings.wallet.emulator, reject=reject)
    if latency is not None:
        emulator.latency = latency
    ctx = build_context(settings, provider=emulator)

    if environment:
        try:
            ctx.network.select(environment)
        except UnknownEnvironmentError as exc:
            raise typer.BadParameter(str(exc), param_hint="--environment") from exc

    unsubscribe = ctx.wallet.store.subscribe(lambda state: typer.echo(json.dumps(describe(state))))
    try:
        asyncio.run(ctx.wallet.connect())
    finally:
        unsubscribe()

    if not isinstance(ctx.wallet.store.get(), Connected):
        raise typer.Exit(code=1)
