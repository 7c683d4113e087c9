from __future__ import annotations

from dataclasses import dataclass

from dungeoncrawl.sim.coord import Coord

# symbol index order for the automation symbol image
TILE_SYMBOLS: tuple[bytes, ...] = (b" ", b"@", b"#", b".", b"-", b"|", b"+", b"%", b"*", b")")
SYMBOL_INDEX: dict[int, int] = {symbol[0]: index for index, symbol in enumerate(TILE_SYMBOLS)}


@dataclass(frozen=True)
class Tile:
    """Single display byte."""

    byte: int

    def __post_init__(self) -> None:
        if isinstance(self.byte, bool) or not isinstance(self.byte, int) or not 0 <= self.byte <= 255:
            raise ValueError("tile byte must be an integer in [0, 255]")

    @classmethod
    def of(cls, char: str) -> "Tile":
        return cls(ord(char))

    def to_byte(self) -> int:
        return self.byte

    def __str__(self) -> str:
        return chr(self.byte)


BLANK = Tile.of(" ")
PLAYER = Tile.of("@")


@dataclass(frozen=True)
class Positioned:
    coord: Coord
    tile: Tile


def tile_to_sym(byte: int) -> int | None:
    return SYMBOL_INDEX.get(byte)
