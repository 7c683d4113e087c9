"""Per-turn output of the runtime.

A turn returns an ordered list of reactions; front ends process them in order.
A ``Notify`` carrying a ``QUIT`` message ends the session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from dungeoncrawl.sim.coord import Direction
from dungeoncrawl.sim.items import ItemKind


class UiState(Enum):
    DUNGEON = "dungeon"
    QUIT_CONFIRM = "quit_confirm"

    @property
    def is_modal(self) -> bool:
        return self is not UiState.DUNGEON


class MsgKind(Enum):
    CANT_MOVE = "cant_move"
    GOT_ITEM = "got_item"
    NO_DOWNSTAIR = "no_downstair"
    SECRET_DOOR = "secret_door"
    CLEARED = "cleared"
    QUIT = "quit"


@dataclass(frozen=True)
class GameMsg:
    kind: MsgKind
    direction: Direction | None = None
    item_kind: ItemKind | None = None
    num: int | None = None

    @classmethod
    def cant_move(cls, direction: Direction) -> "GameMsg":
        return cls(MsgKind.CANT_MOVE, direction=direction)

    @classmethod
    def got_item(cls, item_kind: ItemKind, num: int) -> "GameMsg":
        return cls(MsgKind.GOT_ITEM, item_kind=item_kind, num=num)

    @classmethod
    def of(cls, kind: MsgKind) -> "GameMsg":
        return cls(kind)

    @property
    def is_terminal(self) -> bool:
        return self.kind is MsgKind.QUIT

    def text(self) -> str:
        if self.kind is MsgKind.CANT_MOVE:
            return f"your {self.direction.value.replace('_', '-')} way is blocked"
        if self.kind is MsgKind.GOT_ITEM:
            return f"Now you have {self.num} {self.item_kind.value}"
        if self.kind is MsgKind.NO_DOWNSTAIR:
            return "Hmm... there seems to be no downstair"
        if self.kind is MsgKind.SECRET_DOOR:
            return "you found a secret door"
        if self.kind is MsgKind.CLEARED:
            return "You reached the bottom of the dungeon!"
        return "Thank you for playing!"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind.value}
        if self.direction is not None:
            payload["direction"] = self.direction.value
        if self.item_kind is not None:
            payload["item_kind"] = self.item_kind.value
        if self.num is not None:
            payload["num"] = self.num
        return payload


class Reaction:
    name = "reaction"

    def to_dict(self) -> dict[str, Any]:
        return {"reaction": self.name}


@dataclass(frozen=True)
class Notify(Reaction):
    msg: GameMsg
    name = "notify"

    def to_dict(self) -> dict[str, Any]:
        return {"reaction": self.name, "msg": self.msg.to_dict()}


@dataclass(frozen=True)
class Redraw(Reaction):
    name = "redraw"


@dataclass(frozen=True)
class StatusUpdated(Reaction):
    name = "status_updated"


@dataclass(frozen=True)
class UiTransition(Reaction):
    state: UiState
    name = "ui_transition"

    def to_dict(self) -> dict[str, Any]:
        return {"reaction": self.name, "state": self.state.value}


REDRAW = Redraw()
STATUS_UPDATED = StatusUpdated()


def is_quit(reaction: Reaction) -> bool:
    return isinstance(reaction, Notify) and reaction.msg.is_terminal
