from __future__ import annotations

import json
import logging
import weakref
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from dungeoncrawl.content.schema import validate_config_payload
from dungeoncrawl.sim.coord import X, Y
from dungeoncrawl.sim.dungeon import Dungeon, DungeonStyle
from dungeoncrawl.sim.errors import ErrorId, chain_err
from dungeoncrawl.sim.input import KEY_ESCAPE, Action, InputCode, InputDecoder, Key, KeyMap
from dungeoncrawl.sim.items import ItemConfig, ItemHandler
from dungeoncrawl.sim.player import PlayerStatus
from dungeoncrawl.sim.reactions import GameMsg, MsgKind, Notify, Reaction, UiState, UiTransition
from dungeoncrawl.sim.rng import SEED_BITS, gen_seed
from dungeoncrawl.sim.tile import Positioned

logger = logging.getLogger(__name__)

MIN_WIDTH = 80
MAX_WIDTH = 160
MIN_HEIGHT = 24
MAX_HEIGHT = 48
MAX_SEED = 2**SEED_BITS - 1

CONFIRM_YES: Key = "y"
CONFIRM_NO: Key = "n"

T = TypeVar("T")


def _json_list(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_json_list(item) for item in value]
    return value


@dataclass(frozen=True)
class ConfigInner:
    """Resolved numeric configuration; always within bounds once built by ``GameConfig.to_inner``."""

    width: X
    height: Y
    seed: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "width", X(self.width))
        object.__setattr__(self, "height", Y(self.height))

    def to_dict(self) -> dict[str, int]:
        return {"width": int(self.width), "height": int(self.height), "seed": self.seed}


@dataclass
class GameInfo:
    is_cleared: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"is_cleared": self.is_cleared}


@dataclass
class GameConfig:
    """User-facing game configuration.

    ``seed=None`` draws a fresh seed at build time. ``keymap=None`` means the
    default key map and is left out of the serialized document.
    """

    width: int = MIN_WIDTH
    height: int = MIN_HEIGHT
    seed: int | None = None
    dungeon: DungeonStyle = field(default_factory=DungeonStyle.rogue)
    item: ItemConfig = field(default_factory=ItemConfig)
    keymap: KeyMap | None = None

    def to_inner(self) -> ConfigInner:
        if self.width < MIN_WIDTH:
            raise ErrorId.INVALID_SETTING.into_with("screen width is too narrow")
        if self.width > MAX_WIDTH:
            raise ErrorId.INVALID_SETTING.into_with("screen width is too wide")
        if self.height < MIN_HEIGHT:
            raise ErrorId.INVALID_SETTING.into_with("screen height is too short")
        if self.height > MAX_HEIGHT:
            raise ErrorId.INVALID_SETTING.into_with("screen height is too tall")
        seed = gen_seed() if self.seed is None else self.seed
        if isinstance(seed, bool) or not isinstance(seed, int) or not 0 <= seed <= MAX_SEED:
            raise ErrorId.INVALID_SETTING.into_with(f"seed must be an integer in [0, {MAX_SEED}]")
        return ConfigInner(width=X(self.width), height=Y(self.height), seed=seed)

    def build(self) -> "RunTime":
        with chain_err("in GameConfig.build"):
            config = self.to_inner()
            self.item.validate(self.dungeon.max_level)
            game_info = GameInfo()
            items = ItemHandler(self.item, config.seed)
            dungeon = self.dungeon.build(config, items, game_info, config.seed)
        keymap = self.keymap.copy() if self.keymap is not None else KeyMap.default()
        logger.info(
            "built runtime seed=%d screen=%dx%d style=%s",
            config.seed,
            int(config.width),
            int(config.height),
            self.dungeon.style,
        )
        return RunTime(game_info=game_info, config=config, items=items, dungeon=dungeon, keymap=keymap)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "width": self.width,
            "height": self.height,
            "seed": self.seed,
            **self.dungeon.to_dict(),
            "item": self.item.to_dict(),
        }
        if self.keymap is not None:
            payload["keymap"] = self.keymap.to_dict()
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameConfig":
        validate_config_payload(data)
        keymap = data.get("keymap")
        return cls(
            width=int(data["width"]),
            height=int(data["height"]),
            seed=data.get("seed"),
            dungeon=DungeonStyle.from_dict(data),
            item=ItemConfig.from_dict(data.get("item", {})),
            keymap=KeyMap.from_dict(keymap) if keymap is not None else None,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, indent=2)

    @classmethod
    def from_json(cls, text: str) -> "GameConfig":
        payload = json.loads(text)
        if not isinstance(payload, dict):
            raise ValueError("game config must be a JSON object")
        return cls.from_dict(payload)


class RunTime:
    """Live game session.

    Owns the dungeon and observes the shared game info, resolved config and
    item handler through weak references; the dungeon keeps them alive.
    """

    def __init__(
        self,
        *,
        game_info: GameInfo,
        config: ConfigInner,
        items: ItemHandler,
        dungeon: Dungeon,
        keymap: KeyMap,
    ) -> None:
        self._game_info = weakref.ref(game_info)
        self._config = weakref.ref(config)
        self._items = weakref.ref(items)
        self.dungeon = dungeon
        self.keymap = keymap
        self.ui_state = UiState.DUNGEON
        self.decoder = InputDecoder()

    @staticmethod
    def _resolve(ref: Callable[[], T | None], name: str) -> T:
        target = ref()
        if target is None:
            raise ErrorId.LOGIC_ERROR.into_with(f"{name} was dropped while the runtime is alive")
        return target

    @property
    def game_info(self) -> GameInfo:
        return self._resolve(self._game_info, "game info")

    @property
    def config(self) -> ConfigInner:
        return self._resolve(self._config, "config")

    @property
    def items(self) -> ItemHandler:
        return self._resolve(self._items, "item handler")

    def react_to_key(self, key: Key) -> list[Reaction]:
        if self.ui_state is UiState.QUIT_CONFIRM:
            return self._confirm_quit(key)
        with chain_err("in RunTime.react_to_key"):
            code = self.decoder.decode(self.keymap, key)
        if code is None:
            return []
        return self.react_to_input(code)

    def react_to_input(self, code: InputCode) -> list[Reaction]:
        if self.ui_state.is_modal:
            raise ErrorId.INPUT.into_with(f"{code.action.value} is not accepted in {self.ui_state.value}")
        with chain_err("in RunTime.react_to_input"):
            if code.action is Action.MOVE:
                return self.dungeon.move_player(code.direction)
            if code.action is Action.RUN:
                return self.dungeon.run_player(code.direction)
            if code.action is Action.SEARCH:
                return self.dungeon.search()
            if code.action is Action.DOWN_STAIR:
                return self.dungeon.down_stair()
            if code.action is Action.QUIT:
                self.ui_state = UiState.QUIT_CONFIRM
                return [UiTransition(UiState.QUIT_CONFIRM)]
            raise ErrorId.INCOMPLETE_INPUT.into_with(f"{code.action.value} needs a following key")

    def _confirm_quit(self, key: Key) -> list[Reaction]:
        if key == CONFIRM_YES:
            return [Notify(GameMsg.of(MsgKind.QUIT))]
        if key in (CONFIRM_NO, KEY_ESCAPE):
            self.ui_state = UiState.DUNGEON
            return [UiTransition(UiState.DUNGEON)]
        raise ErrorId.INPUT.into_with(repr(key))

    def draw_screen(self, draw: Callable[[Positioned], None]) -> None:
        with chain_err("in RunTime.draw_screen"):
            self.dungeon.draw(draw)

    def player_status(self) -> PlayerStatus:
        return self.dungeon.player_status()

    def screen_size(self) -> tuple[X, Y]:
        config = self.config
        return config.width, config.height

    @property
    def is_cleared(self) -> bool:
        return self.game_info.is_cleared

    def rng_state_payload(self) -> dict[str, Any]:
        return {
            "rng_items_state": _json_list(self.items.rng.getstate()),
            "rng_dungeon_state": _json_list(self.dungeon.rng.getstate()),
        }

    def snapshot(self) -> dict[str, Any]:
        pending = self.decoder.pending
        return {
            "game_info": self.game_info.to_dict(),
            "config": self.config.to_dict(),
            "items": self.items.to_dict(),
            "dungeon": self.dungeon.to_dict(),
            "ui_state": self.ui_state.value,
            "pending_input": pending.value if pending is not None else None,
            "rng_state": self.rng_state_payload(),
        }
