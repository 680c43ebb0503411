from __future__ import annotations

import struct

from orebot.domain import BoardSnapshot, MinerSnapshot, RoundDetail
from orebot.domain.constants import ACCOUNT_DISCRIMINATOR_SIZE, NUM_SLOTS
from orebot.errors import AccountDecodeError

# All integers are little-endian u64; blobs are raw bytes.
BOARD_LAYOUT = struct.Struct("<3Q")
ROUND_LAYOUT = struct.Struct(f"<Q{NUM_SLOTS}Q32s{NUM_SLOTS}QQQ32s32sQQQQ")
MINER_LAYOUT = struct.Struct(f"<32s{NUM_SLOTS}Q{NUM_SLOTS}QQQQQ16sQQQQQQ")


def _body(data: bytes, layout: struct.Struct, name: str) -> tuple:
    if data is None:
        raise AccountDecodeError(f"{name} account missing")
    need = ACCOUNT_DISCRIMINATOR_SIZE + layout.size
    if len(data) < need:
        raise AccountDecodeError(f"{name} account too short: {len(data)} < {need} bytes")
    return layout.unpack_from(data, ACCOUNT_DISCRIMINATOR_SIZE)


def decode_board(data: bytes) -> BoardSnapshot:
    round_id, start_slot, end_slot = _body(data, BOARD_LAYOUT, "board")
    return BoardSnapshot(round_id=round_id, start_slot=start_slot, end_slot=end_slot)


def decode_round(data: bytes) -> RoundDetail:
    f = _body(data, ROUND_LAYOUT, "round")
    n = NUM_SLOTS
    deployed = tuple(f[1:1 + n])
    slot_hash = f[1 + n]
    count = tuple(f[2 + n:2 + 2 * n])
    (
        expires_at,
        motherlode,
        rent_payer,
        top_miner,
        top_miner_reward,
        total_deployed,
        total_vaulted,
        total_winnings,
    ) = f[2 + 2 * n:]
    return RoundDetail(
        round_id=f[0],
        deployed=deployed,
        slot_hash=slot_hash,
        count=count,
        expires_at=expires_at,
        motherlode=motherlode,
        rent_payer=rent_payer,
        top_miner=top_miner,
        top_miner_reward=top_miner_reward,
        total_deployed=total_deployed,
        total_vaulted=total_vaulted,
        total_winnings=total_winnings,
    )


def decode_miner(data: bytes) -> MinerSnapshot:
    f = _body(data, MINER_LAYOUT, "miner")
    n = NUM_SLOTS
    (
        checkpoint_fee,
        checkpoint_id,
        last_claim_ore_at,
        last_claim_sol_at,
        rewards_factor,
        rewards_sol,
        rewards_ore,
        refined_ore,
        round_id,
        lifetime_rewards_sol,
        lifetime_rewards_ore,
    ) = f[1 + 2 * n:]
    return MinerSnapshot(
        authority=f[0],
        deployed=tuple(f[1:1 + n]),
        cumulative=tuple(f[1 + n:1 + 2 * n]),
        checkpoint_fee=checkpoint_fee,
        checkpoint_id=checkpoint_id,
        last_claim_ore_at=last_claim_ore_at,
        last_claim_sol_at=last_claim_sol_at,
        rewards_factor=rewards_factor,
        rewards_sol=rewards_sol,
        rewards_ore=rewards_ore,
        refined_ore=refined_ore,
        round_id=round_id,
        lifetime_rewards_sol=lifetime_rewards_sol,
        lifetime_rewards_ore=lifetime_rewards_ore,
    )
