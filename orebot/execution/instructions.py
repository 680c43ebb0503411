from __future__ import annotations

import struct
from collections.abc import Iterable
from dataclasses import dataclass

from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from orebot.domain.constants import (
    AUTOMATION_SEED,
    BOARD_SEED,
    COMPUTE_UNIT_LIMIT,
    COMPUTE_UNIT_PRICE_MICROLAMPORTS,
    ENTROPY_PROGRAM_ID,
    MINER_SEED,
    NUM_SLOTS,
    OP_CHECKPOINT,
    OP_CLAIM_SOL,
    OP_DEPLOY,
    PROGRAM_ID,
    ROUND_SEED,
    SYSTEM_PROGRAM_ID,
    TREASURY_SEED,
    VAR_SEED,
)

DEPLOY_LAYOUT = struct.Struct("<BQI")


@dataclass(frozen=True)
class ProgramAccounts:
    """Address book of the game program and its derived accounts."""

    program_id: Pubkey
    entropy_program_id: Pubkey
    var_address: Pubkey
    system_program_id: Pubkey = Pubkey.from_string(SYSTEM_PROGRAM_ID)

    @classmethod
    def default(cls, *, entropy_program_id: str = "", var_address: str = "") -> "ProgramAccounts":
        program = Pubkey.from_string(PROGRAM_ID)
        entropy = Pubkey.from_string(entropy_program_id or ENTROPY_PROGRAM_ID)
        if var_address:
            var = Pubkey.from_string(var_address)
        else:
            board, _ = Pubkey.find_program_address([BOARD_SEED], program)
            var, _ = Pubkey.find_program_address(
                [VAR_SEED, bytes(board), (0).to_bytes(8, "little")], entropy
            )
        return cls(program_id=program, entropy_program_id=entropy, var_address=var)

    @classmethod
    def from_settings(cls, settings) -> "ProgramAccounts":
        return cls.default(
            entropy_program_id=settings.entropy_program_id,
            var_address=settings.var_address,
        )

    def _pda(self, *seeds: bytes) -> Pubkey:
        pda, _ = Pubkey.find_program_address(list(seeds), self.program_id)
        return pda

    def board(self) -> Pubkey:
        return self._pda(BOARD_SEED)

    def round(self, round_id: int) -> Pubkey:
        return self._pda(ROUND_SEED, int(round_id).to_bytes(8, "little"))

    def miner(self, authority: Pubkey) -> Pubkey:
        return self._pda(MINER_SEED, bytes(authority))

    def automation(self, authority: Pubkey) -> Pubkey:
        return self._pda(AUTOMATION_SEED, bytes(authority))

    def treasury(self) -> Pubkey:
        return self._pda(TREASURY_SEED)


def slot_mask(slots: Iterable[int]) -> int:
    """u32 bitmask with bit ``i`` set for 1-based slot ``i + 1``; out-of-range slots are ignored."""
    mask = 0
    for slot in slots:
        idx = int(slot) - 1
        if 0 <= idx < NUM_SLOTS:
            mask |= 1 << idx
    return mask


def deploy_data(amount_lamports: int, slots: Iterable[int]) -> bytes:
    return DEPLOY_LAYOUT.pack(OP_DEPLOY, int(amount_lamports), slot_mask(slots))


def checkpoint_data() -> bytes:
    return bytes([OP_CHECKPOINT])


def claim_sol_data() -> bytes:
    return bytes([OP_CLAIM_SOL])


def compute_budget_ixs() -> list[Instruction]:
    return [
        set_compute_unit_limit(COMPUTE_UNIT_LIMIT),
        set_compute_unit_price(COMPUTE_UNIT_PRICE_MICROLAMPORTS),
    ]


def deploy_ix(
    accounts: ProgramAccounts,
    authority: Pubkey,
    round_id: int,
    amount_lamports: int,
    slots: Iterable[int],
) -> Instruction:
    metas = [
        AccountMeta(authority, is_signer=True, is_writable=True),
        AccountMeta(authority, is_signer=False, is_writable=True),
        AccountMeta(accounts.automation(authority), is_signer=False, is_writable=True),
        AccountMeta(accounts.board(), is_signer=False, is_writable=True),
        AccountMeta(accounts.miner(authority), is_signer=False, is_writable=True),
        AccountMeta(accounts.round(round_id), is_signer=False, is_writable=True),
        AccountMeta(accounts.system_program_id, is_signer=False, is_writable=False),
        AccountMeta(accounts.var_address, is_signer=False, is_writable=True),
        AccountMeta(accounts.entropy_program_id, is_signer=False, is_writable=False),
    ]
    return Instruction(accounts.program_id, deploy_data(amount_lamports, slots), metas)


def checkpoint_ix(accounts: ProgramAccounts, authority: Pubkey, round_id: int) -> Instruction:
    metas = [
        AccountMeta(authority, is_signer=True, is_writable=True),
        AccountMeta(accounts.board(), is_signer=False, is_writable=False),
        AccountMeta(accounts.miner(authority), is_signer=False, is_writable=True),
        AccountMeta(accounts.round(round_id), is_signer=False, is_writable=True),
        AccountMeta(accounts.treasury(), is_signer=False, is_writable=True),
        AccountMeta(accounts.system_program_id, is_signer=False, is_writable=False),
    ]
    return Instruction(accounts.program_id, checkpoint_data(), metas)


def claim_sol_ix(accounts: ProgramAccounts, authority: Pubkey) -> Instruction:
    metas = [
        AccountMeta(authority, is_signer=True, is_writable=True),
        AccountMeta(accounts.miner(authority), is_signer=False, is_writable=True),
        AccountMeta(accounts.system_program_id, is_signer=False, is_writable=False),
    ]
    return Instruction(accounts.program_id, claim_sol_data(), metas)
