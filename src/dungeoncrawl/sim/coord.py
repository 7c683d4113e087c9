from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator

from dungeoncrawl.sim.scalar import BoundedInt


class X(BoundedInt):
    """Horizontal screen coordinate."""

    __slots__ = ()


class Y(BoundedInt):
    """Vertical screen coordinate."""

    __slots__ = ()


@dataclass(frozen=True, order=True)
class Coord:
    """Screen/map coordinate; ordered by x first, then y."""

    x: X
    y: Y

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", X(self.x))
        object.__setattr__(self, "y", Y(self.y))

    def __add__(self, other: object) -> "Coord":
        if not isinstance(other, Coord):
            return NotImplemented
        return Coord(self.x + other.x, self.y + other.y)

    def __sub__(self, other: object) -> "Coord":
        if not isinstance(other, Coord):
            return NotImplemented
        return Coord(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Coord":
        return Coord(-self.x, -self.y)

    def euc_dist(self, other: "Coord") -> float:
        dx = int(self.x) - int(other.x)
        dy = int(self.y) - int(other.y)
        return math.sqrt(dx * dx + dy * dy)

    def scale(self, sx: int, sy: int) -> "Coord":
        return Coord(self.x * int(sx), self.y * int(sy))

    def slide_x(self, dx: int) -> "Coord":
        return Coord(self.x + X(dx), self.y)

    def slide_y(self, dy: int) -> "Coord":
        return Coord(self.x, self.y + Y(dy))

    def endless_iter(self, direction: "Direction") -> Iterator["Coord"]:
        delta = direction.to_cd()
        current = self
        while True:
            yield current
            current = current + delta

    def direction_iter(
        self,
        direction: "Direction",
        end_condition: Callable[["Coord"], bool],
    ) -> Iterator["Coord"]:
        """Like ``endless_iter`` but stops at the first coordinate matching ``end_condition``.

        The matching coordinate itself is not yielded.
        """
        for current in self.endless_iter(direction):
            if end_condition(current):
                return
            yield current

    def neighbors(self) -> list["Coord"]:
        return [self + direction.to_cd() for direction in Direction if direction is not Direction.STAY]

    def to_tuple(self) -> tuple[int, int]:
        return (int(self.x), int(self.y))

    @classmethod
    def from_tuple(cls, value: tuple[int, int]) -> "Coord":
        return cls(value[0], value[1])

    def to_dict(self) -> dict[str, int]:
        return {"x": int(self.x), "y": int(self.y)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Coord":
        return cls(int(data["x"]), int(data["y"]))


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    LEFT_UP = "left_up"
    RIGHT_UP = "right_up"
    LEFT_DOWN = "left_down"
    RIGHT_DOWN = "right_down"
    STAY = "stay"

    def to_cd(self) -> Coord:
        return Coord.from_tuple(_DIRECTION_DELTAS[self])

    @property
    def is_diagonal(self) -> bool:
        dx, dy = _DIRECTION_DELTAS[self]
        return dx != 0 and dy != 0

    def reverse(self) -> "Direction":
        dx, dy = _DIRECTION_DELTAS[self]
        return Direction.from_delta(Coord(-dx, -dy))

    @classmethod
    def from_delta(cls, delta: Coord) -> "Direction":
        key = delta.to_tuple()
        for direction, value in _DIRECTION_DELTAS.items():
            if value == key:
                return direction
        raise ValueError(f"not a unit direction delta: {key}")


_DIRECTION_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.LEFT_UP: (-1, -1),
    Direction.RIGHT_UP: (1, -1),
    Direction.LEFT_DOWN: (-1, 1),
    Direction.RIGHT_DOWN: (1, 1),
    Direction.STAY: (0, 0),
}


@dataclass(frozen=True, order=True)
class DungeonPath:
    """Addressable location in the dungeon: level number plus map coordinate."""

    level: int
    coord: Coord

    def __post_init__(self) -> None:
        if isinstance(self.level, bool) or not isinstance(self.level, int) or self.level < 1:
            raise ValueError("dungeon path level must be an integer >= 1")

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level, "coord": self.coord.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DungeonPath":
        return cls(level=int(data["level"]), coord=Coord.from_dict(data["coord"]))
