from __future__ import annotations

import hashlib
import json
from typing import Any

from dungeoncrawl.sim.core import RunTime


def _digest(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def runtime_hash(runtime: RunTime) -> str:
    return _digest(runtime.snapshot())


def snapshot_hash(payload: dict[str, Any]) -> str:
    hash_payload = {
        "schema_version": payload["schema_version"],
        "snapshot": payload["snapshot"],
    }
    return _digest(hash_payload)
