from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from dungeoncrawl.sim.coord import Coord, Direction, DungeonPath
from dungeoncrawl.sim.errors import ErrorId, chain_err
from dungeoncrawl.sim.items import ItemHandler, ItemKind
from dungeoncrawl.sim.levels import MIN_BLOCK_HEIGHT, MIN_BLOCK_WIDTH, CellKind, Level, Room, build_level
from dungeoncrawl.sim.player import Player, PlayerStatus
from dungeoncrawl.sim.reactions import REDRAW, STATUS_UPDATED, GameMsg, MsgKind, Notify, Reaction
from dungeoncrawl.sim.rng import RNG_DUNGEON_STREAM_NAME, stream
from dungeoncrawl.sim.tile import BLANK, PLAYER, Positioned, Tile

if TYPE_CHECKING:
    from dungeoncrawl.sim.core import ConfigInner, GameInfo

logger = logging.getLogger(__name__)

DUNGEON_STYLES = {"rogue"}
# message line above the map, status line below it
SCREEN_MAP_OFFSET_Y = 1
SCREEN_RESERVED_ROWS = 2
MAX_LEVEL_LIMIT = 99
MAX_SECRET_DOOR_INV = 100
# one in SEARCH_FAIL_INV searches misses an adjacent secret door
SEARCH_FAIL_INV = 3


@dataclass(frozen=True)
class DungeonStyle:
    """Dungeon builder settings; serialized flat into the game config document."""

    style: str = "rogue"
    room_num_x: int = 3
    room_num_y: int = 3
    max_level: int = 10
    secret_door_inv: int = 8

    @classmethod
    def rogue(cls) -> "DungeonStyle":
        return cls()

    def validate(self, map_width: int, map_height: int) -> None:
        if self.style not in DUNGEON_STYLES:
            raise ErrorId.INVALID_SETTING.into_with(f"unknown dungeon style: {self.style}")
        if self.room_num_x < 1 or self.room_num_y < 1:
            raise ErrorId.INVALID_SETTING.into_with("room_num_x and room_num_y must be >= 1")
        if map_width // self.room_num_x < MIN_BLOCK_WIDTH:
            raise ErrorId.INVALID_SETTING.into_with("room_num_x is too large for the screen width")
        if map_height // self.room_num_y < MIN_BLOCK_HEIGHT:
            raise ErrorId.INVALID_SETTING.into_with("room_num_y is too large for the screen height")
        if not 1 <= self.max_level <= MAX_LEVEL_LIMIT:
            raise ErrorId.INVALID_SETTING.into_with(f"max_level must be within [1, {MAX_LEVEL_LIMIT}]")
        if not 0 <= self.secret_door_inv <= MAX_SECRET_DOOR_INV:
            raise ErrorId.INVALID_SETTING.into_with(f"secret_door_inv must be within [0, {MAX_SECRET_DOOR_INV}]")

    def build(self, config: ConfigInner, items: ItemHandler, game_info: GameInfo, seed: int) -> "Dungeon":
        map_width = int(config.width)
        map_height = int(config.height) - SCREEN_RESERVED_ROWS
        with chain_err("in DungeonStyle.build"):
            self.validate(map_width, map_height)
            return Dungeon(self, config, items, game_info, seed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dungeon_style": self.style,
            "room_num_x": self.room_num_x,
            "room_num_y": self.room_num_y,
            "max_level": self.max_level,
            "secret_door_inv": self.secret_door_inv,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DungeonStyle":
        defaults = cls()
        return cls(
            style=str(data.get("dungeon_style", defaults.style)),
            room_num_x=int(data.get("room_num_x", defaults.room_num_x)),
            room_num_y=int(data.get("room_num_y", defaults.room_num_y)),
            max_level=int(data.get("max_level", defaults.max_level)),
            secret_door_inv=int(data.get("secret_door_inv", defaults.secret_door_inv)),
        )


class Dungeon:
    """Levels, the player, and every rule that moves the player around.

    Holds strong references to the shared config, item handler and game info.
    """

    def __init__(
        self,
        style: DungeonStyle,
        config: ConfigInner,
        items: ItemHandler,
        game_info: GameInfo,
        seed: int,
    ) -> None:
        self.style = style
        self.config = config
        self.items = items
        self.game_info = game_info
        self.rng = stream(seed, RNG_DUNGEON_STREAM_NAME)
        self.map_width = int(config.width)
        self.map_height = int(config.height) - SCREEN_RESERVED_ROWS
        self.player = Player()
        self.level_num = 0
        self.level = Level(self.map_width, self.map_height)
        self.new_level()

    def path(self, coord: Coord) -> DungeonPath:
        return DungeonPath(self.level_num, coord)

    def new_level(self) -> None:
        level_num = self.level_num + 1
        with chain_err("in Dungeon.new_level"):
            level = build_level(
                self.rng,
                self.map_width,
                self.map_height,
                room_num_x=self.style.room_num_x,
                room_num_y=self.style.room_num_y,
                secret_door_inv=self.style.secret_door_inv,
            )
            self.level_num = level_num
            self.level = level
            for room in level.rooms:
                self.items.setup_gold(level_num, self._empty_cell_supplier(room))
            start_room = self.rng.choice(level.rooms)
            self.player.pos = self._empty_cell_supplier(start_room)().coord
        self._reveal()
        logger.debug("entered level %d player=%s", level_num, self.player.pos.to_tuple())

    def _empty_cell_supplier(self, room: Room) -> Callable[[], DungeonPath]:
        def empty_cell() -> DungeonPath:
            candidates = [
                coord
                for coord in room.interior()
                if self.level.cell(coord).kind is CellKind.FLOOR
                and self.items.get_ref(self.path(coord)) is None
                and coord != self.player.pos
            ]
            if not candidates:
                raise ErrorId.INDEX.into_with(f"no empty cell in room {room.index}")
            return self.path(self.rng.choice(candidates))

        return empty_cell

    def _reveal(self) -> None:
        pos = self.player.pos
        room = self.level.room_at(pos)
        if room is not None:
            self.level.reveal_room(room)
        self.level.reveal_around(pos)

    def _can_step(self, src: Coord, dst: Coord, direction: Direction) -> bool:
        if not self.level.in_bounds(dst) or not self.level.cell(dst).passable:
            return False
        if direction.is_diagonal:
            # doorways can only be entered or left straight
            return self.level.cell(src).kind is not CellKind.DOOR and self.level.cell(dst).kind is not CellKind.DOOR
        return True

    def _step_to(self, dst: Coord, reactions: list[Reaction]) -> bool:
        """Move the player; return True when the move should end a run."""
        self.player.pos = dst
        self._reveal()
        picked = self._pick_up(reactions)
        return picked or self.level.cell(dst).kind is CellKind.DOOR

    def _pick_up(self, reactions: list[Reaction]) -> bool:
        taken = self.items.take_item(self.path(self.player.pos))
        if taken is None:
            return False
        item_id, item = taken
        if item.kind is ItemKind.GOLD:
            self.player.gold += int(item.how_many)
        else:
            self.player.pack.append(item_id)
        reactions.append(Notify(GameMsg.got_item(item.kind, int(item.how_many))))
        reactions.append(STATUS_UPDATED)
        return True

    def move_player(self, direction: Direction) -> list[Reaction]:
        if direction is Direction.STAY:
            return []
        src = self.player.pos
        dst = src + direction.to_cd()
        if not self._can_step(src, dst, direction):
            return [Notify(GameMsg.cant_move(direction))]
        reactions: list[Reaction] = [REDRAW]
        self._step_to(dst, reactions)
        return reactions

    def run_player(self, direction: Direction) -> list[Reaction]:
        if direction is Direction.STAY:
            return []
        delta = direction.to_cd()
        first = self.player.pos + delta
        if not self._can_step(self.player.pos, first, direction):
            return [Notify(GameMsg.cant_move(direction))]
        reactions: list[Reaction] = [REDRAW]
        for dst in first.direction_iter(direction, lambda coord: not self._can_step(coord - delta, coord, direction)):
            if self._step_to(dst, reactions):
                break
        return reactions

    def search(self) -> list[Reaction]:
        found = False
        for coord in self.player.pos.neighbors():
            if not self.level.in_bounds(coord):
                continue
            cell = self.level.cell(coord)
            if cell.hidden and self.rng.randrange(SEARCH_FAIL_INV) != 0:
                cell.hidden = False
                cell.visible = True
                found = True
        if not found:
            return []
        return [Notify(GameMsg.of(MsgKind.SECRET_DOOR)), REDRAW]

    def down_stair(self) -> list[Reaction]:
        if self.level.cell(self.player.pos).kind is not CellKind.STAIR:
            return [Notify(GameMsg.of(MsgKind.NO_DOWNSTAIR))]
        if self.level_num >= self.style.max_level:
            self.game_info.is_cleared = True
            return [Notify(GameMsg.of(MsgKind.CLEARED)), Notify(GameMsg.of(MsgKind.QUIT))]
        self.new_level()
        return [REDRAW, STATUS_UPDATED]

    def tile_at(self, coord: Coord) -> Tile:
        if coord == self.player.pos:
            return PLAYER
        cell = self.level.cell(coord)
        if not cell.visible:
            return BLANK
        item = self.items.get_ref(self.path(coord))
        if item is not None:
            return item.tile()
        return cell.tile()

    def draw(self, draw: Callable[[Positioned], None]) -> None:
        for coord, _ in self.level.iter_cells():
            draw(Positioned(coord.slide_y(SCREEN_MAP_OFFSET_Y), self.tile_at(coord)))

    def player_status(self) -> PlayerStatus:
        return self.player.status(self.level_num)

    def to_dict(self) -> dict[str, Any]:
        return {
            "style": self.style.to_dict(),
            "level": self.level_num,
            "player": self.player.to_dict(),
            "rows": self.level.to_rows(),
            "visible": self.level.visibility_rows(),
            "hidden_doors": [coord.to_dict() for coord in self.level.hidden_doors()],
        }
