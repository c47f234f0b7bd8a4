"""Command runners for the prover subprocess.

Two flavours share one result envelope: ``run_command`` blocks the calling
thread, ``run_command_async`` suspends the calling coroutine. Neither looks
at the captured output; ``check_result`` decides success from the exit code.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from dataclasses import dataclass, field

from stone_prover.errors import ProverCommandError, ProverSpawnError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for subprocess execution.

    ``stdout``/``stderr`` are UTF-8 decoded with replacement characters;
    the exact bytes the child wrote are kept in ``stdout_bytes``/``stderr_bytes``.
    """

    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    stdout_bytes: bytes = field(default=b"", repr=False)
    stderr_bytes: bytes = field(default=b"", repr=False)

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _build_result(argv: list[str], returncode: int, stdout: bytes, stderr: bytes) -> ExecResult:
    return ExecResult(
        argv=tuple(argv),
        returncode=returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
        stdout_bytes=stdout,
        stderr_bytes=stderr,
    )


def check_result(result: ExecResult) -> ExecResult:
    """Raise ``ProverCommandError`` unless the command exited successfully."""
    if not result.ok:
        logger.warning("%s exited with status %d", result.argv[0], result.returncode)
        raise ProverCommandError(result)
    return result


def run_command(argv: list[str], *, check: bool = True) -> ExecResult:
    """Run command to completion, blocking the current thread."""
    logger.debug("running %s", " ".join(argv))
    try:
        completed = subprocess.run(argv, capture_output=True, check=False)
    except OSError as exc:
        raise ProverSpawnError(tuple(argv), str(exc)) from exc
    result = _build_result(argv, completed.returncode, completed.stdout, completed.stderr)
    return check_result(result) if check else result


async def run_command_async(argv: list[str], *, check: bool = True) -> ExecResult:
    """Run command to completion without blocking the event loop.

    If the awaiting task is cancelled, the child is killed and reaped before
    the cancellation propagates.
    """
    logger.debug("running %s (async)", " ".join(argv))
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ProverSpawnError(tuple(argv), str(exc)) from exc

    try:
        stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise

    returncode = process.returncode if process.returncode is not None else -1
    result = _build_result(argv, returncode, stdout, stderr)
    return check_result(result) if check else result
