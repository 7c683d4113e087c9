from __future__ import annotations

import hashlib
import random
import secrets

RNG_ITEMS_STREAM_NAME = "rng_items"
RNG_DUNGEON_STREAM_NAME = "rng_dungeon"
SEED_BITS = 64


def derive_stream_seed(master_seed: int, stream_name: str) -> int:
    """Derive a deterministic child RNG seed from (master_seed, stream_name)."""
    digest = hashlib.sha256(f"{master_seed}:{stream_name}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


def stream(master_seed: int, stream_name: str) -> random.Random:
    return random.Random(derive_stream_seed(master_seed=master_seed, stream_name=stream_name))


def gen_seed() -> int:
    """Fresh master seed from process entropy."""
    return secrets.randbits(SEED_BITS)


def does_happen(rng: random.Random, inv: int) -> bool:
    """True with probability ``1 / inv``; never when ``inv`` is 0."""
    if inv <= 0:
        return False
    return rng.randrange(inv) == 0
