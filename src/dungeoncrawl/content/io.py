from __future__ import annotations

import json
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from dungeoncrawl.content.schema import validate_config_payload, validate_snapshot_payload
from dungeoncrawl.sim.core import GameConfig, RunTime
from dungeoncrawl.sim.hash import snapshot_hash

SCHEMA_VERSION = 1
CANONICAL_JSON_INDENT = 2
CANONICAL_JSON_SEPARATORS = (",", ": ")
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "content" / "examples" / "default_config.json"


def _canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(
        payload,
        indent=CANONICAL_JSON_INDENT,
        separators=CANONICAL_JSON_SEPARATORS,
        sort_keys=True,
    )


def _write_atomic_json(path: str | Path, payload: dict[str, Any]) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    serialized = _canonical_json(payload)

    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_file.write(serialized)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_path = Path(temp_file.name)
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def _build_snapshot_payload(runtime: RunTime) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "snapshot": runtime.snapshot(),
    }
    payload["snapshot_hash"] = snapshot_hash(payload)
    return payload


def load_game_config_json(path: str | Path) -> GameConfig:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return GameConfig.from_dict(payload)


def save_game_config_json(path: str | Path, config: GameConfig) -> None:
    payload = config.to_dict()
    validate_config_payload(payload)
    _write_atomic_json(path, payload)


def save_snapshot_json(path: str | Path, runtime: RunTime) -> None:
    payload = _build_snapshot_payload(runtime)
    validate_snapshot_payload(payload)
    _write_atomic_json(path, payload)


def load_snapshot_json(path: str | Path) -> dict[str, Any]:
    """Read a snapshot written by ``save_snapshot_json`` and verify its hash."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    validate_snapshot_payload(payload)
    expected_hash = payload["snapshot_hash"]
    actual_hash = snapshot_hash(payload)
    if expected_hash != actual_hash:
        raise ValueError(
            f"snapshot_hash mismatch while loading snapshot (stored={expected_hash}, recomputed={actual_hash})"
        )
    return payload["snapshot"]
