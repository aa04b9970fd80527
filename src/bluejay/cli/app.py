"""
Root Typer application for the ``bluejay`` CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from bluejay.core.logging import configure_logging

app = Typer(
    name="bluejay",
    help="bluejay — bring the Bluejay monitoring infrastructure up, configure it, load data, tear it down.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("bluejay-infra")
        except PackageNotFoundError:
            from bluejay import __version__ as v
        typer.echo(f"bluejay-infra {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR."),
    json_logs: bool | None = typer.Option(
        None, "--json-logs/--console-logs", help="Log format (default: JSON when stderr is not a TTY).",
    ),
) -> None:
    """bluejay CLI — infrastructure lifecycle for the Bluejay monitoring stack."""
    if log_level.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise typer.BadParameter(f"unknown log level {log_level!r}", param_hint="--log-level")
    configure_logging(level=log_level, json_format=json_logs)


# ── Sub-command registration ─────────────────────────────────────────────

from bluejay.cli.infra import app as infra_app  # noqa: E402

app.add_typer(infra_app, name="infra", help="Deploy, configure, load data and tear down.")
