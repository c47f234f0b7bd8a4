"""Typed records for the JSON documents exchanged with the Stone prover.

Each record mirrors one file of the ``cpu_air_prover`` command-line contract.
``from_dict`` ignores keys it does not know so that richer prover output
still loads; missing keys or wrong JSON types raise ``ValueError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any


def _require(data: dict[str, Any], key: str, owner: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{owner}: expected JSON object, got {type(data).__name__}")
    if key not in data:
        raise ValueError(f"{owner}: missing required field `{key}`")
    return data[key]


def _int(data: dict[str, Any], key: str, owner: str) -> int:
    value = _require(data, key, owner)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{owner}.{key}: expected integer, got {value!r}")
    return value


def _bool(data: dict[str, Any], key: str, owner: str) -> bool:
    value = _require(data, key, owner)
    if not isinstance(value, bool):
        raise ValueError(f"{owner}.{key}: expected boolean, got {value!r}")
    return value


def _str(data: dict[str, Any], key: str, owner: str) -> str:
    value = _require(data, key, owner)
    if not isinstance(value, str):
        raise ValueError(f"{owner}.{key}: expected string, got {value!r}")
    return value


def _int_list(data: dict[str, Any], key: str, owner: str) -> tuple[int, ...]:
    value = _require(data, key, owner)
    if not isinstance(value, list):
        raise ValueError(f"{owner}.{key}: expected list, got {value!r}")
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int):
            raise ValueError(f"{owner}.{key}: expected integers, got {item!r}")
    return tuple(value)


@dataclass(frozen=True)
class CachedLdeConfig:
    """Low-degree-extension caching knobs."""

    store_full_lde: bool
    use_fft_for_eval: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "store_full_lde": self.store_full_lde,
            "use_fft_for_eval": self.use_fft_for_eval,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CachedLdeConfig:
        return cls(
            store_full_lde=_bool(data, "store_full_lde", "cached_lde_config"),
            use_fft_for_eval=_bool(data, "use_fft_for_eval", "cached_lde_config"),
        )


@dataclass(frozen=True)
class ProverConfig:
    """Application-agnostic prover tuning (``--prover-config-file``)."""

    cached_lde_config: CachedLdeConfig
    constraint_polynomial_task_size: int
    n_out_of_memory_merkle_layers: int
    table_prover_n_tasks_per_segment: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "cached_lde_config": self.cached_lde_config.to_dict(),
            "constraint_polynomial_task_size": self.constraint_polynomial_task_size,
            "n_out_of_memory_merkle_layers": self.n_out_of_memory_merkle_layers,
            "table_prover_n_tasks_per_segment": self.table_prover_n_tasks_per_segment,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProverConfig:
        owner = "prover_config"
        return cls(
            cached_lde_config=CachedLdeConfig.from_dict(_require(data, "cached_lde_config", owner)),
            constraint_polynomial_task_size=_int(data, "constraint_polynomial_task_size", owner),
            n_out_of_memory_merkle_layers=_int(data, "n_out_of_memory_merkle_layers", owner),
            table_prover_n_tasks_per_segment=_int(data, "table_prover_n_tasks_per_segment", owner),
        )


@dataclass(frozen=True)
class FriParameters:
    fri_step_list: tuple[int, ...]
    last_layer_degree_bound: int
    n_queries: int
    proof_of_work_bits: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "fri_step_list", tuple(self.fri_step_list))

    def to_dict(self) -> dict[str, Any]:
        return {
            "fri_step_list": list(self.fri_step_list),
            "last_layer_degree_bound": self.last_layer_degree_bound,
            "n_queries": self.n_queries,
            "proof_of_work_bits": self.proof_of_work_bits,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FriParameters:
        owner = "fri"
        return cls(
            fri_step_list=_int_list(data, "fri_step_list", owner),
            last_layer_degree_bound=_int(data, "last_layer_degree_bound", owner),
            n_queries=_int(data, "n_queries", owner),
            proof_of_work_bits=_int(data, "proof_of_work_bits", owner),
        )


@dataclass(frozen=True)
class StarkParameters:
    fri: FriParameters
    log_n_cosets: int

    def to_dict(self) -> dict[str, Any]:
        return {"fri": self.fri.to_dict(), "log_n_cosets": self.log_n_cosets}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StarkParameters:
        return cls(
            fri=FriParameters.from_dict(_require(data, "fri", "stark")),
            log_n_cosets=_int(data, "log_n_cosets", "stark"),
        )


@dataclass(frozen=True)
class ProverParameters:
    """Program-specific prover parameters (``--parameter-file``)."""

    field: str
    stark: StarkParameters
    use_extension_field: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "stark": self.stark.to_dict(),
            "use_extension_field": self.use_extension_field,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProverParameters:
        owner = "parameters"
        return cls(
            field=_str(data, "field", owner),
            stark=StarkParameters.from_dict(_require(data, "stark", owner)),
            use_extension_field=_bool(data, "use_extension_field", owner),
        )


class Layout(str, Enum):
    """Cairo layouts understood by the prover; values are the wire tags."""

    PLAIN = "plain"
    SMALL = "small"
    DEX = "dex"
    RECURSIVE = "recursive"
    STARKNET = "starknet"
    RECURSIVE_LARGE_OUTPUT = "recursive_large_output"
    ALL_SOLIDITY = "all_solidity"
    STARKNET_WITH_KECCAK = "starknet_with_keccak"

    @classmethod
    def parse(cls, value: Any) -> Layout:
        if not isinstance(value, str):
            raise ValueError(f"public_input.layout: expected string, got {value!r}")
        try:
            return cls(value)
        except ValueError as exc:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(f"public_input.layout: unknown layout {value!r} (expected one of: {allowed})") from exc


@dataclass(frozen=True)
class MemorySegment:
    begin_addr: int
    stop_ptr: int

    def to_dict(self) -> dict[str, Any]:
        return {"begin_addr": self.begin_addr, "stop_ptr": self.stop_ptr}

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str = "segment") -> MemorySegment:
        return cls(
            begin_addr=_int(data, "begin_addr", name),
            stop_ptr=_int(data, "stop_ptr", name),
        )


SEGMENT_NAMES: tuple[str, ...] = ("program", "execution", "output", "pedersen", "range_check", "ecdsa")


@dataclass(frozen=True)
class MemorySegments:
    program: MemorySegment
    execution: MemorySegment
    output: MemorySegment
    pedersen: MemorySegment
    range_check: MemorySegment
    ecdsa: MemorySegment

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name).to_dict() for name in SEGMENT_NAMES}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemorySegments:
        segments = {
            name: MemorySegment.from_dict(_require(data, name, "memory_segments"), f"memory_segments.{name}")
            for name in SEGMENT_NAMES
        }
        return cls(**segments)


@dataclass(frozen=True)
class MemorySlot:
    """One public memory cell; ``value`` is a hex string."""

    address: int
    value: str
    page: int

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address, "value": self.value, "page": self.page}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemorySlot:
        owner = "public_memory"
        return cls(
            address=_int(data, "address", owner),
            value=_str(data, "value", owner),
            page=_int(data, "page", owner),
        )


@dataclass(frozen=True)
class PublicInput:
    """Public prover input produced by the Cairo runner."""

    layout: Layout
    rc_min: int
    rc_max: int
    n_steps: int
    memory_segments: MemorySegments
    public_memory: tuple[MemorySlot, ...]
    dynamic_params: Mapping[str, int] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "public_memory", tuple(self.public_memory))
        if self.dynamic_params is not None:
            object.__setattr__(self, "dynamic_params", MappingProxyType(dict(self.dynamic_params)))

    def __hash__(self) -> int:
        params = None if self.dynamic_params is None else tuple(sorted(self.dynamic_params.items()))
        return hash(
            (
                self.layout,
                self.rc_min,
                self.rc_max,
                self.n_steps,
                self.memory_segments,
                self.public_memory,
                params,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "layout": self.layout.value,
            "rc_min": self.rc_min,
            "rc_max": self.rc_max,
            "n_steps": self.n_steps,
            "memory_segments": self.memory_segments.to_dict(),
            "public_memory": [slot.to_dict() for slot in self.public_memory],
            "dynamic_params": None if self.dynamic_params is None else dict(self.dynamic_params),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PublicInput:
        owner = "public_input"
        public_memory = _require(data, "public_memory", owner)
        if not isinstance(public_memory, list):
            raise ValueError(f"{owner}.public_memory: expected list, got {public_memory!r}")

        dynamic_params: dict[str, int] | None = None
        raw_params = data.get("dynamic_params")
        if raw_params is not None:
            if not isinstance(raw_params, dict):
                raise ValueError(f"{owner}.dynamic_params: expected object, got {raw_params!r}")
            dynamic_params = {}
            for name in raw_params:
                dynamic_params[str(name)] = _int(raw_params, name, f"{owner}.dynamic_params")

        return cls(
            layout=Layout.parse(_require(data, "layout", owner)),
            rc_min=_int(data, "rc_min", owner),
            rc_max=_int(data, "rc_max", owner),
            n_steps=_int(data, "n_steps", owner),
            memory_segments=MemorySegments.from_dict(_require(data, "memory_segments", owner)),
            public_memory=tuple(MemorySlot.from_dict(item) for item in public_memory),
            dynamic_params=dynamic_params,
        )


@dataclass(frozen=True)
class PrivateInput:
    """Private input descriptor pointing at the memory and trace files.

    The builtin sequences are always empty in practice; the prover owns
    their meaning.
    """

    memory_path: Path
    trace_path: Path
    pedersen: tuple[int, ...] = ()
    range_check: tuple[int, ...] = ()
    ecdsa: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "memory_path", Path(self.memory_path))
        object.__setattr__(self, "trace_path", Path(self.trace_path))
        for name in ("pedersen", "range_check", "ecdsa"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "memory_path": str(self.memory_path),
            "trace_path": str(self.trace_path),
            "pedersen": list(self.pedersen),
            "range_check": list(self.range_check),
            "ecdsa": list(self.ecdsa),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PrivateInput:
        owner = "private_input"
        return cls(
            memory_path=Path(_str(data, "memory_path", owner)),
            trace_path=Path(_str(data, "trace_path", owner)),
            pedersen=_int_list(data, "pedersen", owner),
            range_check=_int_list(data, "range_check", owner),
            ecdsa=_int_list(data, "ecdsa", owner),
        )


@dataclass(frozen=True)
class Proof:
    # Only the serialized proof is mapped; annotations and the rest are dropped.
    proof_hex: str

    def to_dict(self) -> dict[str, Any]:
        return {"proof_hex": self.proof_hex}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Proof:
        return cls(proof_hex=_str(data, "proof_hex", "proof"))
