from __future__ import annotations

import asyncio
import logging
import struct

from orebot.data.layouts import BOARD_LAYOUT, MINER_LAYOUT, ROUND_LAYOUT, decode_round
from orebot.domain import RoundDetail
from orebot.domain.constants import LAMPORTS_PER_SOL, NUM_SLOTS
from orebot.errors import SubmissionRejected
from orebot.infra import RuntimeEventLogger

DISCRIMINATOR = bytes(8)
ZERO_HASH = bytes(32)


def entropy_for(rng: int) -> bytes:
    """Entropy block whose XOR-folded words equal ``rng``."""
    return struct.pack("<4Q", rng, 0, 0, 0)


def lamports(sol: float) -> int:
    return int(round(sol * LAMPORTS_PER_SOL))


def board_bytes(round_id: int, start_slot: int = 0, end_slot: int = 0) -> bytes:
    return DISCRIMINATOR + BOARD_LAYOUT.pack(round_id, start_slot, end_slot)


def round_bytes(
    round_id: int,
    deployed_sol: list[float] | None = None,
    counts: list[int] | None = None,
    slot_hash: bytes = ZERO_HASH,
    motherlode: int = 0,
) -> bytes:
    deployed = [lamports(x) for x in (deployed_sol or [0.0] * NUM_SLOTS)]
    counts = list(counts or [0] * NUM_SLOTS)
    return DISCRIMINATOR + ROUND_LAYOUT.pack(
        round_id,
        *deployed,
        slot_hash,
        *counts,
        0,
        motherlode,
        bytes(32),
        bytes(32),
        0,
        sum(deployed),
        0,
        0,
    )


def miner_bytes(round_id: int = 0, checkpoint_id: int = 0, rewards_sol: int = 0) -> bytes:
    return DISCRIMINATOR + MINER_LAYOUT.pack(
        bytes(32),
        *([0] * NUM_SLOTS),
        *([0] * NUM_SLOTS),
        0,
        checkpoint_id,
        0,
        0,
        bytes(16),
        rewards_sol,
        0,
        0,
        round_id,
        0,
        0,
    )


def sample_board() -> tuple[list[float], list[int]]:
    """Board where slot 7 and slot 3 are thin and every other occupied slot holds 1 SOL."""
    deployed = [1.0] * NUM_SLOTS
    counts = [2] * NUM_SLOTS
    deployed[6], counts[6] = 0.1, 1
    deployed[2], counts[2] = 0.2, 4
    deployed[11], counts[11] = 0.0, 0
    return deployed, counts


def make_round(round_id: int = 1, **kwargs) -> RoundDetail:
    return decode_round(round_bytes(round_id, **kwargs))


def quiet_logger(name: str = "orebot-test") -> logging.Logger:
    log = logging.getLogger(name)
    log.addHandler(logging.NullHandler())
    log.propagate = False
    return log


class RecordingEvents(RuntimeEventLogger):
    def __init__(self, calls: list | None = None):
        super().__init__(None)
        self.calls = calls if calls is not None else []

    def emit(self, event: str, **fields) -> None:
        super().emit(event, **fields)
        self.calls.append((event, fields))


class FakeLedger:
    def __init__(self):
        self.accounts: dict[str, bytes] = {}
        self.slot = 0
        self.balance = 0
        self.reject: str | None = None
        self.submissions: list[list] = []
        self.fetches: list[str] = []
        self.slot_error: Exception | None = None
        self.holds: dict[str, asyncio.Event] = {}

    def put(self, pubkey, data: bytes) -> None:
        self.accounts[str(pubkey)] = data

    def hold(self, pubkey) -> asyncio.Event:
        """Park the next fetch of ``pubkey`` until the returned event is set."""
        gate = asyncio.Event()
        self.holds[str(pubkey)] = gate
        return gate

    async def get_slot(self) -> int:
        if self.slot_error is not None:
            raise self.slot_error
        return self.slot

    async def get_account_data(self, pubkey) -> bytes | None:
        self.fetches.append(str(pubkey))
        gate = self.holds.pop(str(pubkey), None)
        if gate is not None:
            await gate.wait()
        return self.accounts.get(str(pubkey))

    async def get_balance(self, pubkey) -> int:
        return self.balance

    async def submit(self, instructions, signer) -> str:
        if self.reject is not None:
            raise SubmissionRejected(self.reject)
        self.submissions.append(list(instructions))
        return "5" * 88
