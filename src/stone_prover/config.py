"""Prover settings loader.

Settings come from an optional YAML file (explicit path or
``$STONE_PROVER_SETTINGS``), then environment overrides:

    prover_command: cpu_air_prover
    tmp_root: /var/tmp/stone
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

import yaml

DEFAULT_PROVER_COMMAND = "cpu_air_prover"

SETTINGS_PATH_ENV = "STONE_PROVER_SETTINGS"
PROVER_COMMAND_ENV = "STONE_PROVER_COMMAND"
TMP_ROOT_ENV = "STONE_PROVER_TMP_ROOT"

SETTINGS_REASON_MISSING = "SETTINGS_MISSING"
SETTINGS_REASON_PARSE_ERROR = "SETTINGS_PARSE_ERROR"
SETTINGS_REASON_SCHEMA_INVALID = "SETTINGS_SCHEMA_INVALID"


class SettingsError(ValueError):
    """Settings file validation error."""

    reason_code: str

    def __init__(self, message: str, reason_code: str = SETTINGS_REASON_SCHEMA_INVALID) -> None:
        super().__init__(message)
        self.reason_code = reason_code


@dataclass(frozen=True)
class ProverSettings:
    """Where to find the prover and where to stage its files."""

    prover_command: str = DEFAULT_PROVER_COMMAND
    tmp_root: Path | None = None


def _from_mapping(raw: object, path: Path) -> ProverSettings:
    if raw is None:
        return ProverSettings()
    if not isinstance(raw, dict):
        raise SettingsError(f"{path}: expected mapping at top level", SETTINGS_REASON_PARSE_ERROR)

    unknown = sorted(set(raw) - {"prover_command", "tmp_root"})
    if unknown:
        raise SettingsError(f"{path}: unknown settings: {', '.join(map(str, unknown))}")

    command = raw.get("prover_command", DEFAULT_PROVER_COMMAND)
    if not isinstance(command, str) or not command.strip():
        raise SettingsError(f"{path}: `prover_command` must be a non-empty string")

    tmp_root = raw.get("tmp_root")
    if tmp_root is not None and not isinstance(tmp_root, str):
        raise SettingsError(f"{path}: `tmp_root` must be a string path")

    return ProverSettings(
        prover_command=command.strip(),
        tmp_root=Path(tmp_root).expanduser() if tmp_root else None,
    )


def load_settings(path: Path | None = None) -> ProverSettings:
    """Load settings from YAML and apply environment overrides."""
    if path is None:
        env_path = os.getenv(SETTINGS_PATH_ENV, "").strip()
        path = Path(env_path).expanduser() if env_path else None

    settings = ProverSettings()
    if path is not None:
        if not path.exists():
            raise SettingsError(f"Missing settings file at {path}", SETTINGS_REASON_MISSING)
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise SettingsError(f"{path}: parse error: {exc}", SETTINGS_REASON_PARSE_ERROR) from exc
        settings = _from_mapping(raw, path)

    command = os.getenv(PROVER_COMMAND_ENV, "").strip()
    if command:
        settings = replace(settings, prover_command=command)
    tmp_root = os.getenv(TMP_ROOT_ENV, "").strip()
    if tmp_root:
        settings = replace(settings, tmp_root=Path(tmp_root).expanduser())
    return settings
