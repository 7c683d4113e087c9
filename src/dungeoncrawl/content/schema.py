from __future__ import annotations

from typing import Any

SUPPORTED_SCHEMA_VERSIONS = {1}
CONFIG_INT_FIELDS = ("width", "height")
DUNGEON_INT_FIELDS = ("room_num_x", "room_num_y", "max_level", "secret_door_inv")
GOLD_INT_FIELDS = ("rate_inv", "base", "level_rate", "minimum")
CONFIG_FIELDS = {"width", "height", "seed", "dungeon_style", "item", "keymap", *DUNGEON_INT_FIELDS}
REQUIRED_SNAPSHOT_FIELDS = {"game_info", "config", "items", "dungeon", "ui_state", "pending_input", "rng_state"}


def _is_json_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


def _validate_json_value(value: Any, *, field_name: str) -> None:
    if _is_json_primitive(value):
        return
    if isinstance(value, list):
        for item in value:
            _validate_json_value(item, field_name=field_name)
        return
    if isinstance(value, dict):
        for key, nested_value in value.items():
            if not isinstance(key, str):
                raise ValueError(f"{field_name} keys must be strings")
            _validate_json_value(nested_value, field_name=field_name)
        return
    raise ValueError(f"{field_name} must contain only canonical JSON primitives")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_keymap(keymap: Any) -> None:
    if not isinstance(keymap, dict):
        raise ValueError("keymap must be an object")
    for key, code in keymap.items():
        if not isinstance(key, str) or not key:
            raise ValueError("keymap keys must be non-empty strings")
        if not isinstance(code, dict):
            raise ValueError(f"keymap[{key!r}] must be an object")
        if not isinstance(code.get("action"), str):
            raise ValueError(f"keymap[{key!r}].action must be a string")
        direction = code.get("direction")
        if direction is not None and not isinstance(direction, str):
            raise ValueError(f"keymap[{key!r}].direction must be a string when present")


def validate_config_payload(payload: dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise ValueError("game config must be an object")

    unknown = set(payload.keys()) - CONFIG_FIELDS
    if unknown:
        raise ValueError(f"game config has unknown fields: {sorted(unknown)}")

    for field_name in CONFIG_INT_FIELDS:
        if not _is_int(payload.get(field_name)):
            raise ValueError(f"{field_name} must be an integer")

    seed = payload.get("seed")
    if seed is not None and not _is_int(seed):
        raise ValueError("seed must be an integer or null")

    style = payload.get("dungeon_style", "rogue")
    if not isinstance(style, str):
        raise ValueError("dungeon_style must be a string")
    for field_name in DUNGEON_INT_FIELDS:
        if field_name in payload and not _is_int(payload[field_name]):
            raise ValueError(f"{field_name} must be an integer")

    item = payload.get("item", {})
    if not isinstance(item, dict):
        raise ValueError("item must be an object")
    unknown_items = set(item.keys()) - {"gold"}
    if unknown_items:
        raise ValueError(f"item has unknown fields: {sorted(unknown_items)}")
    gold = item.get("gold", {})
    if not isinstance(gold, dict):
        raise ValueError("item.gold must be an object")
    for field_name in GOLD_INT_FIELDS:
        if field_name in gold and not _is_int(gold[field_name]):
            raise ValueError(f"item.gold.{field_name} must be an integer")

    if "keymap" in payload and payload["keymap"] is not None:
        _validate_keymap(payload["keymap"])


def validate_snapshot_payload(payload: dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise ValueError("snapshot payload must be an object")

    schema_version = payload.get("schema_version")
    if not _is_int(schema_version):
        raise ValueError("snapshot payload must contain integer field: schema_version")
    if schema_version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"unsupported schema_version: {schema_version}")

    digest = payload.get("snapshot_hash")
    if not isinstance(digest, str) or not digest:
        raise ValueError("snapshot payload must contain string field: snapshot_hash")

    snapshot = payload.get("snapshot")
    if not isinstance(snapshot, dict):
        raise ValueError("snapshot payload must contain object field: snapshot")
    missing = REQUIRED_SNAPSHOT_FIELDS - set(snapshot.keys())
    if missing:
        raise ValueError(f"snapshot missing fields: {sorted(missing)}")

    _validate_json_value(snapshot, field_name="snapshot")
