import asyncio

from solders.keypair import Keypair

from orebot.domain import SlotRanking
from orebot.execution import DeploymentSequencer, ProgramAccounts, checkpoint_round_for
from orebot.runtime.state import AppState
from orebot.tests.helpers import FakeLedger, miner_bytes, quiet_logger, round_bytes

ACCOUNTS = ProgramAccounts.default()


def _targets(*slots: int) -> tuple[SlotRanking, ...]:
    return tuple(SlotRanking(slot=s, sol=0.1, count=1, ratio=0.1, ev=0.2) for s in slots)


def _setup(round_id: int = 10):
    state = AppState()
    state.round_id = round_id
    ledger = FakeLedger()
    ledger.put(ACCOUNTS.round(round_id), round_bytes(round_id))
    signer = Keypair()
    seq = DeploymentSequencer(ledger, state, ACCOUNTS, log=quiet_logger())
    return state, ledger, signer, seq


def test_checkpoint_round_for() -> None:
    assert checkpoint_round_for(9, 9, 10) is None
    assert checkpoint_round_for(9, 8, 10) == 9
    # Dirty, but not older than the current round.
    assert checkpoint_round_for(10, 8, 10) is None
    assert checkpoint_round_for(0, 0, 10) is None


def test_dirty_miner_gets_checkpoint_before_deploy() -> None:
    state, ledger, signer, seq = _setup()
    ledger.put(ACCOUNTS.miner(signer.pubkey()), miner_bytes(round_id=9, checkpoint_id=8))

    out = asyncio.run(seq.deploy(_targets(7, 3), 0.01, signer))

    assert out.ok is True
    assert out.reason == "submitted"
    assert out.checkpoint_round == 9
    assert out.amount_lamports == 10_000_000
    assert state.flags.checkpoint_fired is True
    (ixs,) = ledger.submissions
    assert len(ixs) == 4
    assert bytes(ixs[2].data) == b"\x02"
    assert bytes(ixs[3].data)[0] == 6
    assert ixs[2].program_id == ACCOUNTS.program_id
    assert ixs[2].accounts[3].pubkey == ACCOUNTS.round(9)


def test_clean_miner_deploys_without_checkpoint() -> None:
    state, ledger, signer, seq = _setup()
    ledger.put(ACCOUNTS.miner(signer.pubkey()), miner_bytes(round_id=9, checkpoint_id=9))

    out = asyncio.run(seq.deploy(_targets(7), 0.01, signer))

    assert out.checkpoint_round is None
    assert state.flags.checkpoint_fired is False
    (ixs,) = ledger.submissions
    assert len(ixs) == 3
    assert bytes(ixs[2].data)[0] == 6


def test_fresh_wallet_has_no_miner_account() -> None:
    _, ledger, signer, seq = _setup()
    out = asyncio.run(seq.deploy(_targets(1), 0.001, signer))
    assert out.reason == "submitted"
    assert len(ledger.submissions[0]) == 3


def test_missing_round_account_skips_cycle() -> None:
    state, ledger, signer, seq = _setup()
    state.round_id = 11
    out = asyncio.run(seq.deploy(_targets(7), 0.01, signer))
    assert out.ok is True
    assert out.reason == "round_missing"
    assert ledger.submissions == []
    assert seq.submitted == 0


def test_too_late_rejection_is_not_an_error() -> None:
    _, ledger, signer, seq = _setup()
    ledger.reject = "Transaction simulation failed: InvalidAccountData"
    out = asyncio.run(seq.deploy(_targets(7), 0.01, signer))
    assert out.ok is True
    assert out.reason == "too_late"


def test_other_rejection_is_reported() -> None:
    _, ledger, signer, seq = _setup()
    ledger.reject = "insufficient funds for fee"
    out = asyncio.run(seq.deploy(_targets(7), 0.01, signer))
    assert out.ok is False
    assert out.reason == "rejected"


def test_successful_deploy_refreshes_balance() -> None:
    state, ledger, signer, seq = _setup()
    ledger.balance = 2_500_000_000
    asyncio.run(seq.deploy(_targets(7), 0.01, signer))
    assert state.balance_sol == 2.5
    assert seq.submitted == 1
