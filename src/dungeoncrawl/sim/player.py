from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dungeoncrawl.sim.coord import Coord
from dungeoncrawl.sim.items import ItemId

DEFAULT_HP = 12
DEFAULT_STRENGTH = 16


@dataclass(frozen=True)
class PlayerStatus:
    """Display snapshot of the player; ``to_list`` order is the display order."""

    dungeon_level: int = 1
    gold: int = 0
    hp_current: int = DEFAULT_HP
    hp_max: int = DEFAULT_HP
    str_current: int = DEFAULT_STRENGTH
    str_max: int = DEFAULT_STRENGTH
    exp: int = 0
    player_level: int = 1

    def to_list(self) -> list[tuple[str, int]]:
        return [
            ("Level", self.dungeon_level),
            ("Gold", self.gold),
            ("Hp", self.hp_current),
            ("MaxHp", self.hp_max),
            ("Str", self.str_current),
            ("MaxStr", self.str_max),
            ("Exp", self.exp),
            ("PlayerLevel", self.player_level),
        ]

    def to_dict(self) -> dict[str, int]:
        return dict(self.to_list())

    def to_display(self) -> str:
        return (
            f"Level: {self.dungeon_level}  Gold: {self.gold}  "
            f"Hp: {self.hp_current}({self.hp_max})  Str: {self.str_current}({self.str_max})  "
            f"Exp: {self.player_level}/{self.exp}"
        )


@dataclass
class Player:
    pos: Coord = field(default_factory=lambda: Coord(0, 0))
    gold: int = 0
    hp_current: int = DEFAULT_HP
    hp_max: int = DEFAULT_HP
    str_current: int = DEFAULT_STRENGTH
    str_max: int = DEFAULT_STRENGTH
    exp: int = 0
    player_level: int = 1
    pack: list[ItemId] = field(default_factory=list)

    def status(self, dungeon_level: int) -> PlayerStatus:
        return PlayerStatus(
            dungeon_level=dungeon_level,
            gold=self.gold,
            hp_current=self.hp_current,
            hp_max=self.hp_max,
            str_current=self.str_current,
            str_max=self.str_max,
            exp=self.exp,
            player_level=self.player_level,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "pos": self.pos.to_dict(),
            "gold": self.gold,
            "hp_current": self.hp_current,
            "hp_max": self.hp_max,
            "str_current": self.str_current,
            "str_max": self.str_max,
            "exp": self.exp,
            "player_level": self.player_level,
            "pack": [item_id.value for item_id in self.pack],
        }
