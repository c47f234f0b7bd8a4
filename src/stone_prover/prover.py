"""Run the Stone prover on a Cairo program execution.

The prover is invoked as a subprocess (``cpu_air_prover``) against files
staged in a temporary working directory. ``run_prover`` blocks;
``run_prover_async`` awaits the child without blocking the event loop.
Both stage the same files, pass the same flags and raise the same errors.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from stone_prover.config import ProverSettings, load_settings
from stone_prover.errors import ProverDecodeError
from stone_prover.exec import run_command, run_command_async
from stone_prover.jsonio import load_model
from stone_prover.models import Proof
from stone_prover.workdir import ProverWorkingDirectory, prepare_prover_files

if TYPE_CHECKING:
    from stone_prover.models import ProverConfig, ProverParameters, PublicInput

logger = logging.getLogger(__name__)


def build_prover_argv(
    command: str,
    *,
    public_input_file: Path,
    private_input_file: Path,
    prover_config_file: Path,
    parameter_file: Path,
    output_file: Path,
) -> list[str]:
    """Return the ``cpu_air_prover`` command line for the given files."""
    return [
        command,
        "--out-file",
        str(output_file),
        "--public-input-file",
        str(public_input_file),
        "--private-input-file",
        str(private_input_file),
        "--prover-config-file",
        str(prover_config_file),
        "--parameter-file",
        str(parameter_file),
    ]


def run_prover_from_command_line(
    public_input_file: Path,
    private_input_file: Path,
    prover_config_file: Path,
    parameter_file: Path,
    output_file: Path,
    *,
    command: str | None = None,
) -> None:
    """Call the prover on files prepared by the caller.

    Args:
        public_input_file: Public input JSON.
        private_input_file: Private input JSON; points to the memory and trace files.
        prover_config_file: Application-agnostic prover configuration.
        parameter_file: Program-specific parameters (ex: FRI steps).
        output_file: Where the prover writes the proof JSON.
        command: Prover executable; defaults to ``load_settings().prover_command``.

    Raises:
        ProverSpawnError: The executable could not be started.
        ProverCommandError: The prover exited with a non-zero status.
        SettingsError: ``command`` is unset and the settings file is invalid.
    """
    argv = build_prover_argv(
        command or load_settings().prover_command,
        public_input_file=public_input_file,
        private_input_file=private_input_file,
        prover_config_file=prover_config_file,
        parameter_file=parameter_file,
        output_file=output_file,
    )
    run_command(argv)


async def run_prover_from_command_line_async(
    public_input_file: Path,
    private_input_file: Path,
    prover_config_file: Path,
    parameter_file: Path,
    output_file: Path,
    *,
    command: str | None = None,
) -> None:
    """Async counterpart of ``run_prover_from_command_line``."""
    argv = build_prover_argv(
        command or load_settings().prover_command,
        public_input_file=public_input_file,
        private_input_file=private_input_file,
        prover_config_file=prover_config_file,
        parameter_file=parameter_file,
        output_file=output_file,
    )
    await run_command_async(argv)


def read_proof(proof_file: Path) -> Proof:
    """Load the proof written by the prover.

    A missing, unreadable or malformed file raises ``ProverDecodeError``.
    """
    try:
        return load_model(proof_file, Proof)
    except OSError as exc:
        raise ProverDecodeError(f"unable to read proof file {proof_file}: {exc}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
        raise ProverDecodeError(f"invalid proof file {proof_file}: {exc}") from exc


def _argv_for(workdir: ProverWorkingDirectory, settings: ProverSettings) -> list[str]:
    return build_prover_argv(
        settings.prover_command,
        public_input_file=workdir.public_input_file,
        private_input_file=workdir.private_input_file,
        prover_config_file=workdir.prover_config_file,
        parameter_file=workdir.prover_parameter_file,
        output_file=workdir.proof_file,
    )


def run_prover(
    public_input: PublicInput,
    memory: bytes,
    trace: bytes,
    prover_config: ProverConfig,
    parameters: ProverParameters,
    *,
    settings: ProverSettings | None = None,
) -> Proof:
    """Run the prover on the specified program execution.

    Args:
        public_input: Public prover input generated by the Cairo program.
        memory: Memory output of the Cairo program.
        trace: Execution trace of the Cairo program.
        prover_config: Prover configuration.
        parameters: Prover parameters for the Cairo program.
        settings: Prover command and temporary directory root; read with
            ``load_settings()`` (settings file and environment) when omitted.

    Returns:
        The decoded proof.

    Raises:
        ProverError: One of its subclasses, classified by the failing stage.
        SettingsError: ``settings`` is omitted and the settings file is invalid.
    """
    settings = settings or load_settings()
    with prepare_prover_files(
        public_input, memory, trace, prover_config, parameters, tmp_root=settings.tmp_root
    ) as workdir:
        run_command(_argv_for(workdir, settings))
        proof = read_proof(workdir.proof_file)
    logger.debug("proof generated (%d hex chars)", len(proof.proof_hex))
    return proof


async def run_prover_async(
    public_input: PublicInput,
    memory: bytes,
    trace: bytes,
    prover_config: ProverConfig,
    parameters: ProverParameters,
    *,
    settings: ProverSettings | None = None,
) -> Proof:
    """Run the prover on the specified program execution, asynchronously.

    Same contract as ``run_prover``; only waiting for the child process
    yields to the event loop.
    """
    settings = settings or load_settings()
    with prepare_prover_files(
        public_input, memory, trace, prover_config, parameters, tmp_root=settings.tmp_root
    ) as workdir:
        await run_command_async(_argv_for(workdir, settings))
        proof = read_proof(workdir.proof_file)
    logger.debug("proof generated (%d hex chars)", len(proof.proof_hex))
    return proof
