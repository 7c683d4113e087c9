from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Iterator, Sequence, TextIO

from dungeoncrawl.content.io import load_game_config_json
from dungeoncrawl.logging_config import configure_logging
from dungeoncrawl.sim.core import GameConfig, RunTime
from dungeoncrawl.sim.errors import GameError
from dungeoncrawl.sim.player import PlayerStatus
from dungeoncrawl.sim.reactions import MsgKind, Notify, Reaction, Redraw, StatusUpdated, UiState, UiTransition
from dungeoncrawl.sim.tile import Positioned

logger = logging.getLogger(__name__)

QUIT_CONFIRM_PROMPT = "You really quit game?(y/n)"


class TextScreen:
    """Character buffer for the whole screen.

    Row 0 is the message line; notifications are printed as they arrive instead
    of being kept in the buffer. The last row is the status line.
    """

    def __init__(self, width: int, height: int, out: TextIO) -> None:
        self.width = width
        self.height = height
        self.out = out
        self.rows = [[" "] * width for _ in range(height)]

    def draw_tile(self, positioned: Positioned) -> None:
        x, y = positioned.coord.to_tuple()
        self.rows[y][x] = str(positioned.tile)

    def notify(self, text: str) -> None:
        print(f"-- {text}", file=self.out)

    def status(self, status: PlayerStatus) -> None:
        self.rows[self.height - 1] = list(status.to_display().ljust(self.width)[: self.width])

    def render(self) -> str:
        return "\n".join("".join(row).rstrip() for row in self.rows[1:])

    def flush(self) -> None:
        print(self.render(), file=self.out)


def draw_dungeon(screen: TextScreen, runtime: RunTime) -> None:
    runtime.draw_screen(screen.draw_tile)


def process_reaction(screen: TextScreen, runtime: RunTime, reaction: Reaction) -> bool:
    """Apply one reaction to the screen; return True when the session ends."""
    if isinstance(reaction, Notify):
        msg = reaction.msg
        # blocked moves stay silent, as in rogue
        if msg.kind is not MsgKind.CANT_MOVE:
            screen.notify(msg.text())
        return msg.is_terminal
    if isinstance(reaction, Redraw):
        draw_dungeon(screen, runtime)
        screen.flush()
        return False
    if isinstance(reaction, StatusUpdated):
        status = runtime.player_status()
        screen.status(status)
        print(status.to_display(), file=screen.out)
        return False
    if isinstance(reaction, UiTransition):
        if reaction.state is UiState.QUIT_CONFIRM:
            screen.notify(QUIT_CONFIRM_PROMPT)
        return False
    raise TypeError(f"unknown reaction: {reaction!r}")


def iter_keys(lines: Iterable[str]) -> Iterator[str]:
    """Every character of every line is one key press; line breaks are ignored."""
    for line in lines:
        for key in line.rstrip("\r\n"):
            yield key


def play_game(runtime: RunTime, keys: Iterable[str], out: TextIO) -> int:
    width, height = runtime.screen_size()
    screen = TextScreen(int(width), int(height), out)
    draw_dungeon(screen, runtime)
    screen.status(runtime.player_status())
    screen.flush()
    for key in keys:
        try:
            reactions = runtime.react_to_key(key)
        except GameError as exc:
            if not exc.is_recoverable:
                raise
            screen.notify(str(exc))
            continue
        for reaction in reactions:
            if process_reaction(screen, runtime, reaction):
                return 0
    logger.info("input exhausted before quit")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dungeoncrawl-play", description="Text front end for the dungeon crawler.")
    parser.add_argument("--config", default=None, help="Game config JSON (default: built-in defaults).")
    parser.add_argument("--seed", type=int, default=None, help="Override the config seed.")
    parser.add_argument("--keys", default=None, help="Key presses to play instead of reading stdin.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    args = _build_parser().parse_args(argv)
    try:
        config = load_game_config_json(args.config) if args.config else GameConfig()
        if args.seed is not None:
            config.seed = args.seed
        runtime = config.build()
    except (GameError, OSError, ValueError) as exc:
        print(f"[dungeoncrawl.play] failed to start: {exc}", file=sys.stderr)
        return 1
    lines: Iterable[str] = [args.keys] if args.keys is not None else sys.stdin
    return play_game(runtime, iter_keys(lines), sys.stdout)


if __name__ == "__main__":
    raise SystemExit(main())
