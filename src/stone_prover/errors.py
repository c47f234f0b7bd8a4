"""Classified failures raised while driving the prover."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stone_prover.exec import ExecResult

REASON_IO_ERROR = "IO_ERROR"
REASON_SPAWN_FAILED = "SPAWN_FAILED"
REASON_COMMAND_FAILED = "COMMAND_FAILED"
REASON_DECODE_FAILED = "DECODE_FAILED"


class ProverError(RuntimeError):
    """Base class for every failure surfaced by a prover invocation."""

    reason_code: str = "PROVER_ERROR"


class ProverIoError(ProverError):
    """Filesystem failure while preparing the working directory."""

    reason_code = REASON_IO_ERROR


class ProverSpawnError(ProverError):
    """The prover executable could not be started."""

    reason_code = REASON_SPAWN_FAILED

    def __init__(self, argv: tuple[str, ...], detail: str):
        super().__init__(f"unable to start {argv[0]}: {detail}")
        self.argv = argv


class ProverCommandError(ProverError):
    """The prover ran and exited with a non-zero status."""

    reason_code = REASON_COMMAND_FAILED

    def __init__(self, result: ExecResult):
        rendered = " ".join(result.argv)
        detail = (result.stderr or result.stdout).strip()
        super().__init__(f"command failed ({result.returncode}): {rendered}\n{detail}")
        self.result = result

    @property
    def returncode(self) -> int:
        return self.result.returncode

    @property
    def stdout(self) -> str:
        return self.result.stdout

    @property
    def stderr(self) -> str:
        return self.result.stderr


class ProverDecodeError(ProverError):
    """The proof file is missing or does not match the proof schema."""

    reason_code = REASON_DECODE_FAILED
