"""
CLI: ``bluejay infra`` — infrastructure lifecycle commands.

Usage::

    bluejay infra deploy --env-file bluejay.env        # clone + compose up
    bluejay infra configure agreements/acme_v2.json    # Prometheus target
    bluejay infra load-data                            # restore dumps + state
    bluejay infra down                                 # compose down + rm state
    bluejay infra config                               # show resolved config

Every command accepts ``--config PATH`` (JSON), ``--json`` to print the
operation result as JSON and ``--strict`` to exit 1 when any external
command exited non-zero.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import typer
from rich.console import Console
from rich.table import Table

from bluejay.core.errors import BluejayError
from bluejay.deploy.config import InfrastructureConfig
from bluejay.deploy.results import OperationResult, OverallStatus
from bluejay.deploy.workflow import InfrastructureSequencer

app = typer.Typer(no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)

ConfigOption = typer.Option(None, "--config", "-c", help="JSON configuration file.")
JsonOption = typer.Option(False, "--json", help="Output the result as JSON.")
StrictOption = typer.Option(False, "--strict", help="Exit 1 if any external command failed.")


def _load_config(config_path: Path | None) -> InfrastructureConfig:
    try:
        return InfrastructureConfig.load(config_path)
    except BluejayError as exc:
        err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {exc.message}")
        raise typer.Exit(code=1) from exc


def _execute(
    operation: Callable[[], OperationResult],
    *,
    json_out: bool,
    strict: bool,
) -> None:
    try:
        result = operation()
    except BluejayError as exc:
        err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {exc.message}")
        raise typer.Exit(code=1) from exc

    if json_out:
        typer.echo(result.model_dump_json(indent=2))
    else:
        _print_result(result)

    if strict and result.overall_status != OverallStatus.PASSED:
        raise typer.Exit(code=1)


# ── Lifecycle commands ───────────────────────────────────────────────────


@app.command("deploy")
def deploy(
    env_file: Path = typer.Option(
        ..., "--env-file", "-e", exists=True, dir_okay=False, help="Environment file copied to <directory>/.env.",
    ),
    url: str | None = typer.Option(None, "--url", "-u", help="Infrastructure repository to clone."),
    compose_file: str | None = typer.Option(
        None, "--file", "-f", help="Compose file relative to the infrastructure directory.",
    ),
    config_path: Path | None = ConfigOption,
    json_out: bool = JsonOption,
    strict: bool = StrictOption,
) -> None:
    """Clone the infrastructure repository (if missing) and start the stack."""
    config = _load_config(config_path)
    sequencer = InfrastructureSequencer(config)

    if not json_out:
        console.print(f"[bold green]▲ deploy[/] — {config.directory}")
    _execute(
        lambda: sequencer.deploy(url or config.repository_url, env_file, compose_file),
        json_out=json_out,
        strict=strict,
    )


@app.command("configure")
def configure(
    agreement: Path = typer.Argument(..., exists=True, dir_okay=False, help="Agreement JSON file."),
    config_path: Path | None = ConfigOption,
    json_out: bool = JsonOption,
) -> None:
    """Write the Prometheus target file for an agreement."""
    config = _load_config(config_path)
    sequencer = InfrastructureSequencer(config)
    _execute(lambda: sequencer.configure(agreement), json_out=json_out, strict=False)


@app.command("load-data")
def load_data(
    config_path: Path | None = ConfigOption,
    json_out: bool = JsonOption,
    strict: bool = StrictOption,
) -> None:
    """Restore the Mongo and Influx dumps and start the state container."""
    config = _load_config(config_path)
    sequencer = InfrastructureSequencer(config)

    if not json_out:
        console.print("[bold cyan]⇣ load-data[/]")
    _execute(sequencer.load_data, json_out=json_out, strict=strict)


@app.command("down")
def down(
    compose_file: str | None = typer.Option(
        None, "--file", "-f", help="Compose file relative to the infrastructure directory.",
    ),
    config_path: Path | None = ConfigOption,
    json_out: bool = JsonOption,
    strict: bool = StrictOption,
) -> None:
    """Stop the stack (removing images and volumes) and the state container."""
    config = _load_config(config_path)
    sequencer = InfrastructureSequencer(config)

    if not json_out:
        console.print("[bold red]▼ down[/]")
    _execute(lambda: sequencer.down(compose_file), json_out=json_out, strict=strict)


@app.command("config")
def show_config(config_path: Path | None = ConfigOption) -> None:
    """Print the resolved configuration as JSON."""
    config = _load_config(config_path)
    typer.echo(config.model_dump_json(indent=2))


# ── Output formatters ────────────────────────────────────────────────────


def _print_result(result: OperationResult) -> None:
    if result.steps:
        table = Table(title=f"{result.operation} ({result.run_id})")
        table.add_column("Step", style="bold")
        table.add_column("Command")
        table.add_column("Exit")

        for step in result.steps:
            style = "green" if step.ok else "red"
            table.add_row(step.name, step.command, f"[{style}]{step.returncode}[/{style}]")

        console.print(table)

    for key, value in result.details.items():
        console.print(f"  {key}: {value}")

    if result.overall_status == OverallStatus.PASSED:
        console.print(f"[green]✓ {result.summary}[/]")
    else:
        console.print(f"[yellow]⚠ {result.summary}[/]")
