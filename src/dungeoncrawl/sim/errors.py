from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator


class ErrorId(Enum):
    INDEX = "Invalid index access"
    INPUT = "Invalid input"
    INCOMPLETE_INPUT = "Incomplete input"
    INVALID_SETTING = "Invalid setting"
    UNSUPPORTED_ITEM_KIND = "Unsupported item kind"
    # only for broken invariants; never meant to be handled
    LOGIC_ERROR = "Logic error"

    @property
    def short(self) -> str:
        return self.value

    def into_with(self, detail: Any) -> "GameError":
        return GameError(self, detail)

    def error(self) -> "GameError":
        return GameError(self)


RECOVERABLE_ERROR_IDS = frozenset({ErrorId.INPUT, ErrorId.INCOMPLETE_INPUT})


class GameError(Exception):
    """Engine error tagged with an ``ErrorId`` and a chain of call-site contexts.

    Contexts are appended innermost first as the error travels outwards through
    ``chain_err`` blocks.
    """

    def __init__(self, kind: ErrorId, detail: Any = None) -> None:
        self.kind = kind
        self.detail = detail
        self.contexts: list[str] = []
        super().__init__(self.headline())

    def headline(self) -> str:
        if self.detail is None:
            return self.kind.short
        return f"{self.kind.short}: {self.detail}"

    def chain(self, context: str) -> "GameError":
        self.contexts.append(context)
        return self

    def causal_path(self) -> tuple[str, ...]:
        return (self.headline(), *self.contexts)

    @property
    def is_recoverable(self) -> bool:
        return self.kind in RECOVERABLE_ERROR_IDS

    def __str__(self) -> str:
        return " <- ".join(self.causal_path())


@contextmanager
def chain_err(context: str) -> Iterator[None]:
    try:
        yield
    except GameError as exc:
        exc.chain(context)
        raise
