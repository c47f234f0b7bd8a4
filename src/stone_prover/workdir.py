"""Per-invocation working directory for the prover."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from stone_prover.errors import ProverIoError
from stone_prover.jsonio import write_json
from stone_prover.models import PrivateInput

if TYPE_CHECKING:
    from types import TracebackType

    from stone_prover.models import ProverConfig, ProverParameters, PublicInput

logger = logging.getLogger(__name__)

PUBLIC_INPUT_FILENAME = "public_input.json"
PRIVATE_INPUT_FILENAME = "private_input.json"
PROVER_CONFIG_FILENAME = "prover_config_file.json"
PARAMETERS_FILENAME = "parameters.json"
MEMORY_FILENAME = "memory.bin"
TRACE_FILENAME = "trace.bin"
PROOF_FILENAME = "proof.json"


class ProverWorkingDirectory:
    """Temporary directory holding every file of one prover run.

    The instance is the only owner of the directory: it is removed on
    ``cleanup()`` or when the ``with`` block exits, whichever comes first.
    """

    def __init__(self, tmp_root: Path | None = None):
        self._tmp = tempfile.TemporaryDirectory(prefix="stone-prover-", dir=tmp_root)
        self.path = Path(self._tmp.name).resolve()
        self.public_input_file = self.path / PUBLIC_INPUT_FILENAME
        self.private_input_file = self.path / PRIVATE_INPUT_FILENAME
        self.prover_config_file = self.path / PROVER_CONFIG_FILENAME
        self.prover_parameter_file = self.path / PARAMETERS_FILENAME
        self.memory_file = self.path / MEMORY_FILENAME
        self.trace_file = self.path / TRACE_FILENAME
        self.proof_file = self.path / PROOF_FILENAME
        logger.debug("created prover working directory %s", self.path)

    def cleanup(self) -> None:
        if self._tmp is None:
            return
        self._tmp.cleanup()
        self._tmp = None
        logger.debug("removed prover working directory %s", self.path)

    @property
    def closed(self) -> bool:
        return self._tmp is None

    def __enter__(self) -> ProverWorkingDirectory:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    def __copy__(self) -> ProverWorkingDirectory:
        raise TypeError("ProverWorkingDirectory owns its directory and cannot be copied")

    def __deepcopy__(self, memo: dict) -> ProverWorkingDirectory:
        raise TypeError("ProverWorkingDirectory owns its directory and cannot be copied")

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"ProverWorkingDirectory({str(self.path)!r}, {state})"


def prepare_prover_files(
    public_input: PublicInput,
    memory: bytes,
    trace: bytes,
    prover_config: ProverConfig,
    parameters: ProverParameters,
    *,
    tmp_root: Path | None = None,
) -> ProverWorkingDirectory:
    """Stage all prover inputs in a fresh working directory.

    The private input is derived here from the memory and trace file paths.
    Raises ``ProverIoError`` on any filesystem failure; the partially written
    directory is removed before the error propagates.
    """
    try:
        workdir = ProverWorkingDirectory(tmp_root)
    except OSError as exc:
        raise ProverIoError(f"unable to create prover working directory: {exc}") from exc

    try:
        write_json(workdir.public_input_file, public_input.to_dict())
        write_json(workdir.prover_config_file, prover_config.to_dict())
        write_json(workdir.prover_parameter_file, parameters.to_dict())

        workdir.memory_file.write_bytes(memory)
        workdir.trace_file.write_bytes(trace)

        private_input = PrivateInput(
            memory_path=workdir.memory_file,
            trace_path=workdir.trace_file,
        )
        write_json(workdir.private_input_file, private_input.to_dict())
    except OSError as exc:
        workdir.cleanup()
        raise ProverIoError(f"unable to write prover input files in {workdir.path}: {exc}") from exc
    except BaseException:
        workdir.cleanup()
        raise

    return workdir
