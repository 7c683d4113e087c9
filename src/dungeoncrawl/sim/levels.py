from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from dungeoncrawl.sim.coord import Coord, Direction
from dungeoncrawl.sim.errors import ErrorId
from dungeoncrawl.sim.rng import does_happen
from dungeoncrawl.sim.tile import Tile

logger = logging.getLogger(__name__)

MIN_ROOM_WIDTH = 5
MIN_ROOM_HEIGHT = 4
# a block must hold the smallest room plus a one-cell margin on each side
MIN_BLOCK_WIDTH = MIN_ROOM_WIDTH + 2
MIN_BLOCK_HEIGHT = MIN_ROOM_HEIGHT + 2


class CellKind(Enum):
    EMPTY = " "
    FLOOR = "."
    WALL_H = "-"
    WALL_V = "|"
    DOOR = "+"
    PASSAGE = "#"
    STAIR = "%"


PASSABLE_KINDS = frozenset({CellKind.FLOOR, CellKind.DOOR, CellKind.PASSAGE, CellKind.STAIR})


@dataclass
class Cell:
    kind: CellKind = CellKind.EMPTY
    visible: bool = False
    # secret door shown as ``disguise`` until found
    hidden: bool = False
    disguise: CellKind = CellKind.EMPTY

    @property
    def passable(self) -> bool:
        return self.kind in PASSABLE_KINDS and not self.hidden

    def tile(self) -> Tile:
        kind = self.disguise if self.hidden else self.kind
        return Tile.of(kind.value)


@dataclass(frozen=True)
class Room:
    """Walled room; bounds are inclusive and include the walls."""

    index: int
    left: int
    top: int
    right: int
    bottom: int

    def contains(self, coord: Coord) -> bool:
        return self.left <= coord.x <= self.right and self.top <= coord.y <= self.bottom

    def interior(self) -> list[Coord]:
        return [
            Coord(x, y)
            for y in range(self.top + 1, self.bottom)
            for x in range(self.left + 1, self.right)
        ]

    def outline(self) -> list[Coord]:
        return [Coord(x, y) for y in range(self.top, self.bottom + 1) for x in range(self.left, self.right + 1)]


class Level:
    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.cells = [[Cell() for _ in range(width)] for _ in range(height)]
        self.rooms: list[Room] = []
        self.stair: Coord | None = None

    def in_bounds(self, coord: Coord) -> bool:
        return 0 <= coord.x < self.width and 0 <= coord.y < self.height

    def cell(self, coord: Coord) -> Cell:
        if not self.in_bounds(coord):
            raise ErrorId.INDEX.into_with(f"{coord.to_tuple()} outside {self.width}x{self.height} level")
        return self.cells[int(coord.y)][int(coord.x)]

    def iter_cells(self) -> Iterator[tuple[Coord, Cell]]:
        for y, row in enumerate(self.cells):
            for x, cell in enumerate(row):
                yield Coord(x, y), cell

    def room_at(self, coord: Coord) -> Room | None:
        for room in self.rooms:
            if room.contains(coord):
                return room
        return None

    def reveal_room(self, room: Room) -> None:
        for coord in room.outline():
            self.cell(coord).visible = True

    def reveal_around(self, coord: Coord) -> None:
        for target in [coord, *coord.neighbors()]:
            if self.in_bounds(target):
                self.cell(target).visible = True

    def hidden_doors(self) -> list[Coord]:
        return [coord for coord, cell in self.iter_cells() if cell.hidden]

    def to_rows(self) -> list[str]:
        return ["".join(cell.kind.value for cell in row) for row in self.cells]

    def visibility_rows(self) -> list[str]:
        return ["".join("1" if cell.visible else "0" for cell in row) for row in self.cells]


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _dig(level: Level, start: Coord, end: Coord) -> None:
    """Carve a straight passage from ``start`` to ``end`` inclusive."""
    if start == end:
        cells = [start]
    else:
        direction = Direction.from_delta(Coord(_sign(int(end.x - start.x)), _sign(int(end.y - start.y))))
        stop = end + direction.to_cd()
        cells = list(start.direction_iter(direction, lambda coord: coord == stop))
    for coord in cells:
        cell = level.cell(coord)
        if cell.kind is CellKind.EMPTY:
            cell.kind = CellKind.PASSAGE


def _carve_room(
    rng: random.Random,
    level: Level,
    index: int,
    block_x: int,
    block_y: int,
    block_width: int,
    block_height: int,
) -> Room:
    width = rng.randint(MIN_ROOM_WIDTH, block_width - 2)
    height = rng.randint(MIN_ROOM_HEIGHT, block_height - 2)
    left = rng.randint(block_x + 1, block_x + block_width - 1 - width)
    top = rng.randint(block_y + 1, block_y + block_height - 1 - height)
    room = Room(index=index, left=left, top=top, right=left + width - 1, bottom=top + height - 1)
    for coord in room.outline():
        cell = level.cell(coord)
        if coord.y in (room.top, room.bottom):
            cell.kind = CellKind.WALL_H
        elif coord.x in (room.left, room.right):
            cell.kind = CellKind.WALL_V
        else:
            cell.kind = CellKind.FLOOR
    return room


def _make_door(rng: random.Random, level: Level, coord: Coord, secret_door_inv: int) -> None:
    cell = level.cell(coord)
    wall = cell.kind
    cell.kind = CellKind.DOOR
    if does_happen(rng, secret_door_inv):
        cell.hidden = True
        cell.disguise = wall


def _connect_horizontal(rng: random.Random, level: Level, left: Room, right: Room, secret_door_inv: int) -> None:
    door_a = Coord(left.right, rng.randint(left.top + 1, left.bottom - 1))
    door_b = Coord(right.left, rng.randint(right.top + 1, right.bottom - 1))
    middle_x = rng.randint(left.right + 1, right.left - 1)
    _make_door(rng, level, door_a, secret_door_inv)
    _make_door(rng, level, door_b, secret_door_inv)
    _dig(level, door_a.slide_x(1), Coord(middle_x, door_a.y))
    _dig(level, Coord(middle_x, door_a.y), Coord(middle_x, door_b.y))
    _dig(level, Coord(middle_x, door_b.y), door_b.slide_x(-1))


def _connect_vertical(rng: random.Random, level: Level, upper: Room, lower: Room, secret_door_inv: int) -> None:
    door_a = Coord(rng.randint(upper.left + 1, upper.right - 1), upper.bottom)
    door_b = Coord(rng.randint(lower.left + 1, lower.right - 1), lower.top)
    middle_y = rng.randint(upper.bottom + 1, lower.top - 1)
    _make_door(rng, level, door_a, secret_door_inv)
    _make_door(rng, level, door_b, secret_door_inv)
    _dig(level, door_a.slide_y(1), Coord(door_a.x, middle_y))
    _dig(level, Coord(door_a.x, middle_y), Coord(door_b.x, middle_y))
    _dig(level, Coord(door_b.x, middle_y), door_b.slide_y(-1))


def build_level(
    rng: random.Random,
    width: int,
    height: int,
    *,
    room_num_x: int,
    room_num_y: int,
    secret_door_inv: int,
) -> Level:
    """Grid of ``room_num_x * room_num_y`` rooms, each joined to its right and lower neighbour."""
    block_width = width // room_num_x
    block_height = height // room_num_y
    if block_width < MIN_BLOCK_WIDTH or block_height < MIN_BLOCK_HEIGHT:
        raise ErrorId.INVALID_SETTING.into_with(
            f"{room_num_x}x{room_num_y} rooms do not fit in a {width}x{height} level"
        )

    level = Level(width, height)
    grid: dict[tuple[int, int], Room] = {}
    for j in range(room_num_y):
        for i in range(room_num_x):
            room = _carve_room(rng, level, len(level.rooms), i * block_width, j * block_height, block_width, block_height)
            level.rooms.append(room)
            grid[(i, j)] = room

    for j in range(room_num_y):
        for i in range(room_num_x):
            if i + 1 < room_num_x:
                _connect_horizontal(rng, level, grid[(i, j)], grid[(i + 1, j)], secret_door_inv)
            if j + 1 < room_num_y:
                _connect_vertical(rng, level, grid[(i, j)], grid[(i, j + 1)], secret_door_inv)

    stair_room = rng.choice(level.rooms)
    level.stair = rng.choice(stair_room.interior())
    level.cell(level.stair).kind = CellKind.STAIR
    logger.debug("built level %dx%d rooms=%d stair=%s", width, height, len(level.rooms), level.stair.to_tuple())
    return level
