from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dungeoncrawl.sim.coord import Direction
from dungeoncrawl.sim.errors import ErrorId

logger = logging.getLogger(__name__)

Key = str
KEY_ESCAPE: Key = "\x1b"

VI_MOVE_KEYS: dict[Key, Direction] = {
    "h": Direction.LEFT,
    "j": Direction.DOWN,
    "k": Direction.UP,
    "l": Direction.RIGHT,
    "y": Direction.LEFT_UP,
    "u": Direction.RIGHT_UP,
    "b": Direction.LEFT_DOWN,
    "n": Direction.RIGHT_DOWN,
    ".": Direction.STAY,
}


class Action(Enum):
    MOVE = "move"
    RUN = "run"
    # waits for a movement key, then becomes RUN
    RUN_PREFIX = "run_prefix"
    SEARCH = "search"
    DOWN_STAIR = "down_stair"
    QUIT = "quit"


DIRECTED_ACTIONS = frozenset({Action.MOVE, Action.RUN})


@dataclass(frozen=True)
class InputCode:
    action: Action
    direction: Direction | None = None

    def __post_init__(self) -> None:
        if self.action in DIRECTED_ACTIONS and self.direction is None:
            raise ValueError(f"{self.action.value} input requires a direction")
        if self.action not in DIRECTED_ACTIONS and self.direction is not None:
            raise ValueError(f"{self.action.value} input takes no direction")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"action": self.action.value}
        if self.direction is not None:
            payload["direction"] = self.direction.value
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InputCode":
        direction = data.get("direction")
        return cls(
            action=Action(data["action"]),
            direction=Direction(direction) if direction is not None else None,
        )


@dataclass
class KeyMap:
    bindings: dict[Key, InputCode] = field(default_factory=dict)

    def get(self, key: Key) -> InputCode:
        code = self.bindings.get(key)
        if code is None:
            raise ErrorId.INPUT.into_with(repr(key))
        return code

    def copy(self) -> "KeyMap":
        return KeyMap(bindings=dict(self.bindings))

    @classmethod
    def ai(cls) -> "KeyMap":
        bindings = {key: InputCode(Action.MOVE, direction) for key, direction in VI_MOVE_KEYS.items()}
        bindings["f"] = InputCode(Action.RUN_PREFIX)
        bindings["s"] = InputCode(Action.SEARCH)
        bindings[">"] = InputCode(Action.DOWN_STAIR)
        return cls(bindings=bindings)

    @classmethod
    def default(cls) -> "KeyMap":
        keymap = cls.ai()
        keymap.bindings["Q"] = InputCode(Action.QUIT)
        return keymap

    def to_dict(self) -> dict[str, Any]:
        return {key: code.to_dict() for key, code in sorted(self.bindings.items())}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KeyMap":
        if not isinstance(data, dict):
            raise ValueError("keymap must be an object")
        bindings: dict[Key, InputCode] = {}
        for key, code in data.items():
            if not isinstance(key, str) or not key:
                raise ValueError("keymap keys must be non-empty strings")
            if not isinstance(code, dict):
                raise ValueError(f"keymap[{key!r}] must be an object")
            bindings[key] = InputCode.from_dict(code)
        return cls(bindings=bindings)


class InputDecoder:
    """Turns raw keys into input codes; holds the state of a composed command."""

    def __init__(self) -> None:
        self.pending: Action | None = None

    def decode(self, keymap: KeyMap, key: Key) -> InputCode | None:
        """Return the decoded input, or ``None`` while a composed command is incomplete."""
        if self.pending is not None:
            self.pending = None
            if key == KEY_ESCAPE:
                raise ErrorId.INCOMPLETE_INPUT.into_with("run command abandoned")
            code = keymap.get(key)
            if code.action is not Action.MOVE:
                raise ErrorId.INPUT.into_with(repr(key))
            return InputCode(Action.RUN, code.direction)

        code = keymap.get(key)
        if code.action is Action.RUN_PREFIX:
            self.pending = code.action
            logger.debug("waiting for direction after %r", key)
            return None
        return code

    def reset(self) -> None:
        self.pending = None
