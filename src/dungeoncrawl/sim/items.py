"""Item identity, attributes, generation policy and the item registry."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum, Flag
from typing import Any, Callable, Hashable, Iterator

from dungeoncrawl.sim.errors import ErrorId, GameError, chain_err
from dungeoncrawl.sim.rng import RNG_ITEMS_STREAM_NAME, does_happen, stream
from dungeoncrawl.sim.scalar import U32_MAX, BoundedInt
from dungeoncrawl.sim.tile import Tile

logger = logging.getLogger(__name__)


class ItemNum(BoundedInt):
    """Unsigned 32-bit item quantity."""

    __slots__ = ()

    MIN = 0
    MAX = U32_MAX


class ItemAttr(Flag):
    NONE = 0
    IS_CURSED = 0b001
    CAN_THROW = 0b010
    # two stacks of the item can be merged
    IS_MANY = 0b100


AttrMerger = Callable[[ItemAttr, ItemAttr], ItemAttr]


class ItemKind(Enum):
    ARMOR = "armor"
    CUSTOM = "custom"
    GOLD = "gold"
    POTION = "potion"
    RING = "ring"
    SCROLL = "scroll"
    STICK = "stick"
    WEAPON = "weapon"

    def numbered(self, num: int) -> "Item":
        """Build an item of this kind with its default attributes."""
        if self is ItemKind.GOLD:
            attr = ItemAttr.NONE
        else:
            raise ErrorId.UNSUPPORTED_ITEM_KIND.into_with(f"no default attributes for {self.value}")
        return Item(kind=self, how_many=ItemNum(num), attr=attr)

    def tile(self) -> Tile:
        glyph = ITEM_TILES.get(self)
        if glyph is None:
            raise ErrorId.UNSUPPORTED_ITEM_KIND.into_with(f"no tile for {self.value}")
        return Tile.of(glyph)


ITEM_TILES: dict[ItemKind, str] = {ItemKind.GOLD: "*", ItemKind.WEAPON: ")"}


@dataclass(frozen=True, order=True)
class ItemId:
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int) or not 0 <= self.value <= U32_MAX:
            raise ValueError("item id must be an unsigned 32-bit integer")

    def increment(self) -> "ItemId":
        return ItemId(self.value + 1)


@dataclass(frozen=True)
class Item:
    kind: ItemKind
    how_many: ItemNum
    attr: ItemAttr = ItemAttr.NONE

    def __post_init__(self) -> None:
        object.__setattr__(self, "how_many", ItemNum(self.how_many))

    def merge(self, other: "Item", attr_merger: AttrMerger | None = None) -> "Item":
        if other.kind is not self.kind:
            raise ErrorId.LOGIC_ERROR.into_with(f"cannot merge {self.kind.value} with {other.kind.value}")
        if attr_merger is None:
            attr = self.attr | other.attr
        else:
            attr = attr_merger(self.attr, other.attr)
        return Item(kind=self.kind, how_many=self.how_many + other.how_many, attr=attr)

    def many(self) -> "Item":
        return replace(self, attr=self.attr | ItemAttr.IS_MANY)

    def tile(self) -> Tile:
        return self.kind.tile()

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "how_many": int(self.how_many), "attr": self.attr.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        return cls(kind=ItemKind(data["kind"]), how_many=ItemNum(int(data["how_many"])), attr=ItemAttr(int(data["attr"])))


def _require_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    return value


@dataclass(frozen=True)
class GoldConfig:
    """Gold spawn policy: spawn with probability ``1/rate_inv``.

    Quantity is ``randrange(base + level_rate * level) + minimum``.
    """

    rate_inv: int = 2
    base: int = 50
    level_rate: int = 10
    minimum: int = 2

    def validate(self, max_level: int = 1) -> None:
        if self.rate_inv <= 0:
            raise ErrorId.INVALID_SETTING.into_with("gold.rate_inv must be > 0")
        for name in ("base", "level_rate", "minimum"):
            if getattr(self, name) < 0:
                raise ErrorId.INVALID_SETTING.into_with(f"gold.{name} must be >= 0")
        if self.base + self.level_rate == 0:
            raise ErrorId.INVALID_SETTING.into_with("gold.base and gold.level_rate must not both be 0")
        # largest pile gen() can produce on the deepest level
        if self.base + self.level_rate * max_level + self.minimum - 1 > U32_MAX:
            raise ErrorId.INVALID_SETTING.into_with(f"gold amount can exceed {U32_MAX} by level {max_level}")

    def gen(self, rng: random.Random, level: int) -> ItemNum | None:
        if not does_happen(rng, self.rate_inv):
            return None
        return ItemNum(rng.randrange(self.base + self.level_rate * level) + self.minimum)

    def to_dict(self) -> dict[str, int]:
        return {
            "rate_inv": self.rate_inv,
            "base": self.base,
            "level_rate": self.level_rate,
            "minimum": self.minimum,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GoldConfig":
        if not isinstance(data, dict):
            raise ValueError("item.gold must be an object")
        defaults = cls()
        return cls(
            rate_inv=_require_int(data.get("rate_inv", defaults.rate_inv), field_name="item.gold.rate_inv"),
            base=_require_int(data.get("base", defaults.base), field_name="item.gold.base"),
            level_rate=_require_int(data.get("level_rate", defaults.level_rate), field_name="item.gold.level_rate"),
            minimum=_require_int(data.get("minimum", defaults.minimum), field_name="item.gold.minimum"),
        )


@dataclass(frozen=True)
class ItemConfig:
    gold: GoldConfig = field(default_factory=GoldConfig)

    def validate(self, max_level: int = 1) -> None:
        with chain_err("in ItemConfig.validate"):
            self.gold.validate(max_level)

    def to_dict(self) -> dict[str, Any]:
        return {"gold": self.gold.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ItemConfig":
        if not isinstance(data, dict):
            raise ValueError("item must be an object")
        return cls(gold=GoldConfig.from_dict(data.get("gold", {})))


class ItemHandler:
    """Owns every item of a game and the index of items lying in the dungeon."""

    def __init__(self, config: ItemConfig, seed: int) -> None:
        self.config = config
        self.seed = seed
        self.rng = stream(seed, RNG_ITEMS_STREAM_NAME)
        self.items: dict[ItemId, Item] = {}
        self._placed: dict[Hashable, ItemId] = {}
        self._next_id = ItemId(0)

    def get_ref(self, path: Hashable) -> Item | None:
        item_id = self._placed.get(path)
        if item_id is None:
            return None
        return self.items.get(item_id)

    def gen_item(self, itemgen: Callable[[], Item]) -> ItemId:
        item = itemgen()
        item_id = self._next_id
        self.items[item_id] = item
        self._next_id = item_id.increment()
        logger.debug("generated item id=%d kind=%s num=%d", item_id.value, item.kind.value, int(item.how_many))
        return item_id

    def place_item(self, path: Hashable, item_id: ItemId) -> None:
        if item_id not in self.items:
            raise ErrorId.LOGIC_ERROR.into_with(f"placing unregistered item id {item_id.value}")
        self._placed[path] = item_id
        logger.debug("placed item id=%d at %s", item_id.value, path)

    def take_item(self, path: Hashable) -> tuple[ItemId, Item] | None:
        item_id = self._placed.pop(path, None)
        if item_id is None:
            return None
        return item_id, self.items[item_id]

    def placed_items(self) -> Iterator[tuple[Hashable, ItemId, Item]]:
        for path in sorted(self._placed):
            item_id = self._placed[path]
            yield path, item_id, self.items[item_id]

    def setup_gold(self, level: int, empty_cell: Callable[[], Hashable]) -> ItemId | None:
        """Maybe spawn one pile of gold; ``empty_cell`` supplies where to put it."""
        num = self.config.gold.gen(self.rng, level)
        if num is None:
            return None
        gold = ItemKind.GOLD.numbered(num).many()
        with chain_err("in ItemHandler.setup_gold"):
            place = empty_cell()
        item_id = self.gen_item(lambda: gold)
        self.place_item(place, item_id)
        return item_id

    @property
    def next_id(self) -> ItemId:
        return self._next_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "seed": self.seed,
            "next_id": self._next_id.value,
            "items": [
                {"item_id": item_id.value, **item.to_dict()}
                for item_id, item in sorted(self.items.items(), key=lambda entry: entry[0])
            ],
            "placed": [
                {"path": path.to_dict() if hasattr(path, "to_dict") else repr(path), "item_id": item_id.value}
                for path, item_id, _ in self.placed_items()
            ],
        }
