from __future__ import annotations

from collections.abc import Sequence

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.models import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from orebot.errors import SubmissionRejected

# Program errors that mean the round closed before the transaction landed.
TOO_LATE_MARKERS = ("InvalidAccountData",)
# Program errors returned when there is nothing to claim.
NOTHING_TO_CLAIM_MARKERS = ("custom program error",)


class LedgerClient:
    """Thin async wrapper over the Solana JSON-RPC client."""

    def __init__(self, rpc_url: str, *, commitment: str = "confirmed"):
        self.rpc_url = rpc_url
        self.commitment = Commitment(commitment)
        self._client = AsyncClient(rpc_url, commitment=self.commitment)

    async def close(self) -> None:
        await self._client.close()

    async def get_slot(self) -> int:
        resp = await self._client.get_slot(self.commitment)
        return int(resp.value)

    async def get_account_data(self, pubkey: Pubkey) -> bytes | None:
        resp = await self._client.get_account_info(pubkey, commitment=self.commitment)
        if resp.value is None:
            return None
        return bytes(resp.value.data)

    async def get_balance(self, pubkey: Pubkey) -> int:
        resp = await self._client.get_balance(pubkey, commitment=self.commitment)
        return int(resp.value)

    async def submit(self, instructions: Sequence[Instruction], signer: Keypair) -> str:
        """Sign and send all instructions as one transaction and wait for confirmation."""
        try:
            blockhash = (await self._client.get_latest_blockhash(self.commitment)).value.blockhash
            message = Message.new_with_blockhash(list(instructions), signer.pubkey(), blockhash)
            tx = Transaction([signer], message, blockhash)
            resp = await self._client.send_transaction(
                tx, opts=TxOpts(skip_preflight=False, preflight_commitment=self.commitment)
            )
            await self._client.confirm_transaction(resp.value, self.commitment)
        except Exception as exc:
            raise SubmissionRejected(str(exc) or exc.__class__.__name__) from exc
        return str(resp.value)
