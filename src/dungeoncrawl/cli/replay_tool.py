from __future__ import annotations

import argparse
from typing import Sequence

from dungeoncrawl.cli.play import iter_keys
from dungeoncrawl.content.io import load_game_config_json, save_snapshot_json
from dungeoncrawl.logging_config import configure_logging
from dungeoncrawl.sim.core import GameConfig, RunTime
from dungeoncrawl.sim.errors import GameError
from dungeoncrawl.sim.hash import runtime_hash
from dungeoncrawl.sim.reactions import is_quit

DEFAULT_SEED = 7


def _non_negative_int(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise argparse.ArgumentTypeError("seed must be >= 0")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dungeoncrawl-replay",
        description=(
            "Deterministic replay tool. Builds a fresh game from a config and seed, feeds a key "
            "sequence and prints state hashes."
        ),
    )
    parser.add_argument("--config", default=None, help="Game config JSON (default: built-in config)")
    parser.add_argument("--seed", type=_non_negative_int, default=DEFAULT_SEED, help="Master seed")
    parser.add_argument("--keys", default="", help="Key presses to replay, one character per key")
    parser.add_argument("--per-key", action="store_true", help="Print the runtime hash after each key")
    parser.add_argument("--dump-snapshot", help="Optional path to write the snapshot after replay")
    return parser


def _print_header(runtime: RunTime, key_count: int) -> None:
    config = runtime.config
    print(
        "header "
        f"seed={config.seed} "
        f"width={int(config.width)} "
        f"height={int(config.height)} "
        f"key_count={key_count}"
    )


def replay(runtime: RunTime, keys: Sequence[str], *, per_key: bool = False) -> None:
    for index, key in enumerate(keys):
        try:
            reactions = runtime.react_to_key(key)
        except GameError as exc:
            if not exc.is_recoverable:
                raise
            print(f"input_error index={index} key={key!r} error={exc.kind.name}")
            continue
        if per_key:
            print(f"key index={index} key={key!r} hash={runtime_hash(runtime)}")
        if any(is_quit(reaction) for reaction in reactions):
            print(f"quit index={index} cleared={str(runtime.is_cleared).lower()}")
            break


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_game_config_json(args.config) if args.config else GameConfig()
        config.seed = args.seed
        runtime = config.build()
        keys = list(iter_keys([args.keys]))

        _print_header(runtime, len(keys))
        print(f"start_hash={runtime_hash(runtime)}")
        replay(runtime, keys, per_key=args.per_key)
        print(f"end_hash={runtime_hash(runtime)}")

        if args.dump_snapshot:
            save_snapshot_json(args.dump_snapshot, runtime)
            print(f"dumped_snapshot={args.dump_snapshot}")

    except (GameError, OSError, ValueError) as exc:
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
