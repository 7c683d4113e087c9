import numpy as np
import pytest

from dungeoncrawl.automation.game_state import GameState
from dungeoncrawl.sim.core import GameConfig
from dungeoncrawl.sim.errors import ErrorId, GameError
from dungeoncrawl.sim.input import KeyMap
from dungeoncrawl.sim.tile import TILE_SYMBOLS


def test_game_state_result_shapes() -> None:
    game = GameState(seed=3)

    rows, status, symbols = game.prev()

    assert len(rows) == 22
    assert all(isinstance(row, bytes) and len(row) == 80 for row in rows)
    assert status["Level"] == 1
    assert status["Gold"] == 0
    assert symbols.shape == (len(TILE_SYMBOLS), 22, 80)
    assert symbols.dtype == np.float32
    assert np.all(symbols.sum(axis=0) == 1.0)


def test_player_channel_marks_exactly_one_cell() -> None:
    rows, _, symbols = GameState(seed=3).prev()

    assert sum(row.count(b"@") for row in rows) == 1
    assert symbols[1].sum() == 1.0


def test_symbol_ids_match_rows() -> None:
    game = GameState(seed=3)
    rows, _, _ = game.prev()

    ids = game.symbol_ids()

    assert ids.shape == (22, 80)
    for y, row in enumerate(rows):
        for x, byte in enumerate(row):
            assert TILE_SYMBOLS[ids[y, x]] == bytes([byte])


def test_ai_keymap_rejects_quit() -> None:
    game = GameState(seed=3)

    with pytest.raises(GameError) as excinfo:
        game.react("Q")

    assert excinfo.value.kind is ErrorId.INPUT


def test_react_accepts_key_codes() -> None:
    game = GameState(seed=3)

    rows, status, _ = game.react(ord("s"))

    assert len(rows) == 22
    assert status["Level"] == 1


def test_reset_rebuilds_the_same_game_for_a_fixed_seed() -> None:
    game = GameState(seed=4)
    initial_rows, _, _ = game.prev()
    for key in "hhjjllkk":
        game.react(key)

    rows, _, _ = game.reset()

    assert rows == initial_rows


def test_set_seed_applies_on_reset() -> None:
    config = GameConfig(seed=4)
    game = GameState(config)

    game.set_seed(9)
    game.reset()

    assert game.runtime.config.seed == 9
    assert config.seed == 4


def test_game_state_does_not_share_the_caller_keymap() -> None:
    keymap = KeyMap.default()
    config = GameConfig(seed=4, keymap=keymap)

    game = GameState(config)
    game.config.keymap.bindings.pop("Q")

    assert "Q" in keymap.bindings
    assert config.keymap is keymap
