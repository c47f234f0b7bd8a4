"""Pytest configuration and fixtures for stone-prover tests."""

from __future__ import annotations

import os
import stat
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest

from stone_prover.jsonio import load_model
from stone_prover.models import ProverConfig, ProverParameters, PublicInput

FIXTURES_DIR = Path(__file__).parent / "fixtures"
FIBONACCI_DIR = FIXTURES_DIR / "fibonacci"

PROVER_NAME = "cpu_air_prover"

# Stub prover bodies. Each runs with ARGS parsed from the real flag set and
# CALLS pointing at a JSON log the test can inspect.
_PRELUDE = """
import argparse
import json
import os
import pathlib
import sys

parser = argparse.ArgumentParser()
parser.add_argument("--out-file", required=True)
parser.add_argument("--public-input-file", required=True)
parser.add_argument("--private-input-file", required=True)
parser.add_argument("--prover-config-file", required=True)
parser.add_argument("--parameter-file", required=True)
ARGS = parser.parse_args()

private = json.loads(pathlib.Path(ARGS.private_input_file).read_text())
record = {
    "argv": sys.argv[1:],
    "pid": os.getpid(),
    "private_input": private,
    "memory": pathlib.Path(private["memory_path"]).read_bytes().hex(),
    "trace": pathlib.Path(private["trace_path"]).read_bytes().hex(),
    "public_input": json.loads(pathlib.Path(ARGS.public_input_file).read_text()),
    "prover_config": json.loads(pathlib.Path(ARGS.prover_config_file).read_text()),
    "parameters": json.loads(pathlib.Path(ARGS.parameter_file).read_text()),
}
pathlib.Path(CALLS).write_text(json.dumps(record))
"""

_BODIES = {
    "ok": "pathlib.Path(ARGS.out_file).write_text(pathlib.Path(EXPECTED).read_text())\n",
    "fail": "sys.stdout.write('checking input\\n')\nsys.stderr.write('bad input\\n')\nsys.exit(1)\n",
    "malformed": "pathlib.Path(ARGS.out_file).write_text('{not json')\n",
    "no-output": "",
    "hang": "import time\ntime.sleep(60)\n",
}


@dataclass(frozen=True)
class FibonacciInputs:
    public_input: PublicInput
    prover_config: ProverConfig
    parameters: ProverParameters
    memory: bytes
    trace: bytes


@dataclass(frozen=True)
class FakeProver:
    bin_dir: Path
    calls_path: Path

    @property
    def executable(self) -> Path:
        return self.bin_dir / PROVER_NAME


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("STONE_PROVER_SETTINGS", "STONE_PROVER_COMMAND", "STONE_PROVER_TMP_ROOT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fibonacci() -> FibonacciInputs:
    return FibonacciInputs(
        public_input=load_model(FIBONACCI_DIR / "fibonacci_public_input.json", PublicInput),
        prover_config=load_model(FIBONACCI_DIR / "cpu_air_prover_config.json", ProverConfig),
        parameters=load_model(FIBONACCI_DIR / "cpu_air_params.json", ProverParameters),
        memory=bytes(range(64)),
        trace=b"\x00\x01\xff" * 16,
    )


@pytest.fixture
def work_root(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def fake_prover(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[[str], FakeProver]:
    """Install a stub ``cpu_air_prover`` at the front of PATH."""

    def _install(mode: str) -> FakeProver:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        calls_path = tmp_path / "calls.json"
        script = (
            f"#!{sys.executable}\n"
            f"CALLS = {str(calls_path)!r}\n"
            f"EXPECTED = {str(FIBONACCI_DIR / 'fibonacci_proof.json')!r}\n"
            f"{_PRELUDE}\n"
            f"{_BODIES[mode]}"
        )
        executable = bin_dir / PROVER_NAME
        executable.write_text(script, encoding="utf-8")
        executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
        return FakeProver(bin_dir=bin_dir, calls_path=calls_path)

    return _install


@pytest.fixture
def empty_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """PATH containing only an empty directory, so no prover can be found."""
    empty = tmp_path / "empty-bin"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    return empty
