"""Stone prover invocation wrapper."""

from stone_prover.errors import (
    ProverCommandError,
    ProverDecodeError,
    ProverError,
    ProverIoError,
    ProverSpawnError,
)
from stone_prover.models import (
    CachedLdeConfig,
    FriParameters,
    Layout,
    MemorySegment,
    MemorySegments,
    MemorySlot,
    PrivateInput,
    Proof,
    ProverConfig,
    ProverParameters,
    PublicInput,
    StarkParameters,
)
from stone_prover.prover import (
    run_prover,
    run_prover_async,
    run_prover_from_command_line,
    run_prover_from_command_line_async,
)

__version__ = "0.1.0"

__all__ = [
    "CachedLdeConfig",
    "FriParameters",
    "Layout",
    "MemorySegment",
    "MemorySegments",
    "MemorySlot",
    "PrivateInput",
    "Proof",
    "ProverCommandError",
    "ProverConfig",
    "ProverDecodeError",
    "ProverError",
    "ProverIoError",
    "ProverParameters",
    "ProverSpawnError",
    "PublicInput",
    "StarkParameters",
    "run_prover",
    "run_prover_async",
    "run_prover_from_command_line",
    "run_prover_from_command_line_async",
    "__version__",
]
