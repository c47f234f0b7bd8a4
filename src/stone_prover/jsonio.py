"""JSON file helpers for prover input and output documents."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

if TYPE_CHECKING:
    from pathlib import Path

_M = TypeVar("_M", covariant=True)


class JsonModel(Protocol[_M]):
    def from_dict(self, data: dict[str, Any]) -> _M: ...


def dumps(obj: Any) -> str:
    """Serialize a JSON-compatible object with stable formatting."""
    return f"{json.dumps(obj, indent=2, sort_keys=True)}\n"


def write_json(path: Path, obj: Any) -> None:
    """Write JSON as UTF-8."""
    path.write_text(dumps(obj), encoding="utf-8")


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def load_model(path: Path, model: JsonModel[_M]) -> _M:
    """Read ``path`` and decode it with ``model.from_dict``."""
    return model.from_dict(read_json(path))
