"""stone-prover CLI - run the Stone prover on a Cairo execution."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from stone_prover import __version__
from stone_prover.config import ProverSettings, SettingsError, load_settings
from stone_prover.errors import ProverCommandError, ProverError, ProverSpawnError
from stone_prover.jsonio import load_model, write_json
from stone_prover.models import ProverConfig, ProverParameters, PublicInput
from stone_prover.prover import run_prover, run_prover_async

EXIT_SPAWN_FAILED = 127

cli = typer.Typer(
    name="stone-prover",
    help="Run the Stone STARK prover on Cairo program executions.",
    no_args_is_help=True,
)
console = Console()


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show stone-prover version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    _ = version


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_inputs(
    public_input_path: Path,
    prover_config_path: Path,
    parameters_path: Path,
) -> tuple[PublicInput, ProverConfig, ProverParameters]:
    loaded = []
    for path, model in (
        (public_input_path, PublicInput),
        (prover_config_path, ProverConfig),
        (parameters_path, ProverParameters),
    ):
        try:
            loaded.append(load_model(path, model))
        except (OSError, json.JSONDecodeError, ValueError) as exc:
            typer.echo(f"invalid input file {path}: {exc}", err=True)
            raise typer.Exit(1) from exc
    public_input, prover_config, parameters = loaded
    return public_input, prover_config, parameters


def _resolve_settings(settings_path: Path | None, prover_command: str | None) -> ProverSettings:
    try:
        settings = load_settings(settings_path)
    except SettingsError as exc:
        typer.echo(f"{exc.reason_code}: {exc}", err=True)
        raise typer.Exit(1) from exc
    if prover_command:
        settings = ProverSettings(prover_command=prover_command, tmp_root=settings.tmp_root)
    return settings


@cli.command()
def prove(
    public_input: Path = typer.Argument(..., exists=True, dir_okay=False, help="Public input JSON."),
    memory: Path = typer.Argument(..., exists=True, dir_okay=False, help="Binary memory file."),
    trace: Path = typer.Argument(..., exists=True, dir_okay=False, help="Binary trace file."),
    prover_config: Path = typer.Option(..., "--prover-config", exists=True, dir_okay=False, help="Prover config JSON."),
    parameters: Path = typer.Option(..., "--parameters", exists=True, dir_okay=False, help="Prover parameters JSON."),
    out: Path = typer.Option(Path("proof.json"), "--out", "-o", help="Where to write the proof JSON."),
    settings_path: Path | None = typer.Option(None, "--settings", help="Settings YAML file."),
    prover_command: str | None = typer.Option(None, "--prover-command", help="Prover executable override."),
    use_async: bool = typer.Option(False, "--async", help="Await the prover from an asyncio event loop."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log working directory and command details."),
) -> None:
    """Generate a proof and write it as JSON."""
    _configure_logging(verbose)
    settings = _resolve_settings(settings_path, prover_command)
    public, config, params = _load_inputs(public_input, prover_config, parameters)
    memory_bytes = memory.read_bytes()
    trace_bytes = trace.read_bytes()

    try:
        if use_async:
            proof = asyncio.run(
                run_prover_async(public, memory_bytes, trace_bytes, config, params, settings=settings)
            )
        else:
            proof = run_prover(public, memory_bytes, trace_bytes, config, params, settings=settings)
    except ProverSpawnError as exc:
        typer.echo(f"{exc.reason_code}: {exc}", err=True)
        raise typer.Exit(EXIT_SPAWN_FAILED) from exc
    except ProverCommandError as exc:
        typer.echo(f"{exc.reason_code}: prover exited with status {exc.returncode}", err=True)
        if exc.stderr:
            typer.echo(exc.stderr.rstrip(), err=True)
        raise typer.Exit(1) from exc
    except ProverError as exc:
        typer.echo(f"{exc.reason_code}: {exc}", err=True)
        raise typer.Exit(1) from exc

    out.parent.mkdir(parents=True, exist_ok=True)
    write_json(out, proof.to_dict())
    console.print("[bold green]Proof generated[/bold green]")
    typer.echo(f"layout={public.layout.value}")
    typer.echo(f"n_steps={public.n_steps}")
    typer.echo(f"proof_hex_chars={len(proof.proof_hex)}")
    typer.echo(f"out={out}")


@cli.command()
def version() -> None:
    """Show stone-prover version."""
    typer.echo(__version__)


if __name__ == "__main__":

    cli()
