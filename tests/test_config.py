from pathlib import Path

import pytest

from dungeoncrawl.content.io import DEFAULT_CONFIG_PATH, load_game_config_json, save_game_config_json
from dungeoncrawl.sim import core
from dungeoncrawl.sim.core import GameConfig
from dungeoncrawl.sim.dungeon import DungeonStyle
from dungeoncrawl.sim.errors import ErrorId, GameError
from dungeoncrawl.sim.input import KeyMap
from dungeoncrawl.sim.items import GoldConfig, ItemConfig


def _build_error(config: GameConfig) -> GameError:
    with pytest.raises(GameError) as excinfo:
        config.build()
    return excinfo.value


def test_config_round_trips_without_keymap() -> None:
    config = GameConfig(seed=5)
    payload = config.to_dict()

    assert "keymap" not in payload
    assert GameConfig.from_dict(payload) == config
    assert GameConfig.from_json(config.to_json()) == config


def test_config_round_trips_with_keymap() -> None:
    config = GameConfig(width=100, height=30, seed=9, keymap=KeyMap.ai())

    restored = GameConfig.from_json(config.to_json())

    assert restored == config
    assert restored.keymap is not None
    assert "Q" not in restored.keymap.bindings


def test_dungeon_fields_are_flattened_into_the_document() -> None:
    payload = GameConfig(dungeon=DungeonStyle(room_num_x=2, max_level=3)).to_dict()

    assert payload["dungeon_style"] == "rogue"
    assert payload["room_num_x"] == 2
    assert payload["max_level"] == 3
    assert "dungeon" not in payload


def test_too_narrow_width_fails_before_anything_is_built(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(*args: object, **kwargs: object) -> None:
        raise AssertionError("item handler must not be built")

    monkeypatch.setattr(core, "ItemHandler", _fail)

    error = _build_error(GameConfig(width=40, seed=1))

    assert error.kind is ErrorId.INVALID_SETTING
    assert error.headline() == "Invalid setting: screen width is too narrow"
    assert error.contexts == ["in GameConfig.build"]


@pytest.mark.parametrize(
    ("width", "height", "reason"),
    [
        (161, 24, "screen width is too wide"),
        (80, 23, "screen height is too short"),
        (80, 49, "screen height is too tall"),
        (79, 49, "screen width is too narrow"),
    ],
)
def test_screen_bounds_are_checked_in_order(width: int, height: int, reason: str) -> None:
    error = _build_error(GameConfig(width=width, height=height, seed=1))

    assert error.kind is ErrorId.INVALID_SETTING
    assert reason in error.headline()


@pytest.mark.parametrize(("width", "height"), [(80, 24), (160, 48), (120, 30)])
def test_screen_sizes_within_bounds_build(width: int, height: int) -> None:
    runtime = GameConfig(width=width, height=height, seed=3).build()

    assert runtime.screen_size() == (width, height)


def test_negative_seed_is_rejected() -> None:
    error = _build_error(GameConfig(seed=-1))

    assert error.kind is ErrorId.INVALID_SETTING
    assert "seed" in error.headline()


def test_missing_seed_is_drawn_from_entropy() -> None:
    runtime = GameConfig().build()

    assert 0 <= runtime.config.seed < 2**64


def test_invalid_item_config_is_chained() -> None:
    error = _build_error(GameConfig(seed=1, item=ItemConfig(gold=GoldConfig(rate_inv=0))))

    assert error.kind is ErrorId.INVALID_SETTING
    assert error.contexts == ["in ItemConfig.validate", "in GameConfig.build"]


def test_oversized_gold_amount_is_rejected_before_generation() -> None:
    error = _build_error(GameConfig(seed=1, item=ItemConfig(gold=GoldConfig(rate_inv=1, base=2**40))))

    assert error.kind is ErrorId.INVALID_SETTING
    assert "gold amount can exceed" in error.headline()
    assert error.contexts == ["in ItemConfig.validate", "in GameConfig.build"]


def test_gold_bound_accounts_for_the_deepest_level() -> None:
    gold = GoldConfig(base=10, level_rate=2**28, minimum=0)
    config = GameConfig(seed=1, item=ItemConfig(gold=gold), dungeon=DungeonStyle(max_level=16))

    assert GameConfig(seed=1, item=ItemConfig(gold=gold), dungeon=DungeonStyle(max_level=15)).build()
    assert _build_error(config).kind is ErrorId.INVALID_SETTING


def test_rooms_that_do_not_fit_are_rejected() -> None:
    error = _build_error(GameConfig(seed=1, dungeon=DungeonStyle(room_num_y=4)))

    assert error.kind is ErrorId.INVALID_SETTING
    assert "room_num_y" in error.headline()
    assert error.contexts == ["in DungeonStyle.build", "in GameConfig.build"]


def test_unknown_dungeon_style_is_rejected() -> None:
    error = _build_error(GameConfig(seed=1, dungeon=DungeonStyle(style="cave")))

    assert "unknown dungeon style: cave" in error.headline()


def test_from_dict_rejects_malformed_documents() -> None:
    payload = GameConfig(seed=1).to_dict()

    with pytest.raises(ValueError, match="unknown fields"):
        GameConfig.from_dict({**payload, "colour": "red"})
    with pytest.raises(ValueError, match="width must be an integer"):
        GameConfig.from_dict({**payload, "width": "80"})
    with pytest.raises(ValueError, match="seed must be an integer or null"):
        GameConfig.from_dict({**payload, "seed": 1.5})
    with pytest.raises(ValueError, match="keymap must be an object"):
        GameConfig.from_dict({**payload, "keymap": []})


def test_default_config_file_matches_defaults() -> None:
    assert load_game_config_json(DEFAULT_CONFIG_PATH) == GameConfig()


def test_config_save_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "configs" / "game.json"
    config = GameConfig(width=90, seed=11, dungeon=DungeonStyle(secret_door_inv=0), keymap=KeyMap.default())

    save_game_config_json(path, config)

    assert load_game_config_json(path) == config
    assert not list(path.parent.glob("*.tmp"))


def test_every_build_creates_a_fresh_graph() -> None:
    config = GameConfig(seed=4)

    first = config.build()
    second = config.build()

    assert first.items is not second.items
    assert first.dungeon is not second.dungeon
    assert first.snapshot() == second.snapshot()


def test_runtime_keymap_is_not_shared_with_config() -> None:
    config = GameConfig(seed=3, keymap=KeyMap.default())
    document = config.to_dict()

    first = config.build()
    first.keymap.bindings["x"] = first.keymap.get("s")
    second = config.build()

    assert first.keymap is not config.keymap
    assert "x" not in config.keymap.bindings
    assert "x" not in second.keymap.bindings
    assert config.to_dict() == document


def test_default_config_path_does_not_depend_on_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert load_game_config_json(DEFAULT_CONFIG_PATH) == GameConfig()
