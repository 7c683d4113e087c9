"""Array-oriented game handle for agents and scripts.

Every call returns ``(rows, status, symbols)``: the map rows as bytes, the player
status as a dict, and a one-hot ``float32`` image of shape
``(len(TILE_SYMBOLS), map_height, width)``.
"""

from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np

from dungeoncrawl.sim.core import GameConfig, RunTime
from dungeoncrawl.sim.errors import ErrorId
from dungeoncrawl.sim.input import KeyMap
from dungeoncrawl.sim.player import PlayerStatus
from dungeoncrawl.sim.reactions import Reaction, Redraw, StatusUpdated
from dungeoncrawl.sim.tile import TILE_SYMBOLS, Positioned, tile_to_sym

logger = logging.getLogger(__name__)

ActionResult = tuple[list[bytes], dict[str, int], np.ndarray]


class PlayerState:
    def __init__(self, width: int, map_height: int) -> None:
        self.map = np.full((map_height, width), ord(" "), dtype=np.uint8)
        self.status = PlayerStatus()

    def update(self, runtime: RunTime) -> None:
        self.status = runtime.player_status()
        self.draw_map(runtime)

    def draw_map(self, runtime: RunTime) -> None:
        def draw(positioned: Positioned) -> None:
            x, y = positioned.coord.to_tuple()
            # screen row 0 is the message line
            self.map[y - 1, x] = positioned.tile.to_byte()

        runtime.draw_screen(draw)

    def symbol_ids(self) -> np.ndarray:
        ids = np.zeros(self.map.shape, dtype=np.uint8)
        for (y, x), byte in np.ndenumerate(self.map):
            sym = tile_to_sym(int(byte))
            if sym is None:
                raise ErrorId.LOGIC_ERROR.into_with(f"no symbol for tile {chr(int(byte))!r}")
            ids[y, x] = sym
        return ids

    def symbol_image(self) -> np.ndarray:
        one_hot = np.eye(len(TILE_SYMBOLS), dtype=np.float32)[self.symbol_ids()]
        return np.ascontiguousarray(one_hot.transpose(2, 0, 1))

    def result(self) -> ActionResult:
        rows = [row.tobytes() for row in self.map]
        return rows, self.status.to_dict(), self.symbol_image()


class GameState:
    """Game driven one key at a time with the AI key map (no quit key)."""

    def __init__(self, config: GameConfig | None = None, seed: int | None = None) -> None:
        if config is None:
            self.config = GameConfig()
        else:
            keymap = config.keymap.copy() if config.keymap is not None else None
            self.config = replace(config, keymap=keymap)
        if seed is not None:
            self.config.seed = seed
        self.runtime = self._build_runtime()
        self.prev_reactions: list[Reaction] = [Redraw()]

    def _build_runtime(self) -> RunTime:
        runtime = self.config.build()
        runtime.keymap = KeyMap.ai()
        width, height = runtime.screen_size()
        self.state = PlayerState(int(width), int(height) - 2)
        self.state.update(runtime)
        return runtime

    def set_seed(self, seed: int) -> None:
        """Seed used by the next ``reset``."""
        self.config.seed = seed

    def reset(self) -> ActionResult:
        logger.debug("resetting game seed=%s", self.config.seed)
        self.runtime = self._build_runtime()
        self.prev_reactions = [Redraw()]
        return self.state.result()

    def prev(self) -> ActionResult:
        return self.state.result()

    def react(self, key: str | int) -> ActionResult:
        if isinstance(key, int):
            key = chr(key)
        reactions = self.runtime.react_to_key(key)
        for reaction in reactions:
            if isinstance(reaction, Redraw):
                self.state.draw_map(self.runtime)
            elif isinstance(reaction, StatusUpdated):
                self.state.status = self.runtime.player_status()
        self.prev_reactions = reactions
        return self.state.result()

    def symbol_ids(self) -> np.ndarray:
        return self.state.symbol_ids()
