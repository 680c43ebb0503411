from __future__ import annotations

import struct
from functools import reduce
from operator import xor

from orebot.domain.constants import NUM_SLOTS

_WORDS = struct.Struct("<4Q")


def is_populated(slot_hash: bytes) -> bool:
    """An all-zero entropy block means the outcome is not known yet."""
    return any(slot_hash)


def entropy_rng(slot_hash: bytes) -> int:
    if len(slot_hash) < _WORDS.size:
        raise ValueError(f"entropy block must be {_WORDS.size} bytes, got {len(slot_hash)}")
    return reduce(xor, _WORDS.unpack_from(slot_hash))


def winning_slot(slot_hash: bytes) -> int:
    """1-based winning slot encoded by a populated entropy block."""
    return entropy_rng(slot_hash) % NUM_SLOTS + 1
