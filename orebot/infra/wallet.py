from __future__ import annotations

import logging
from pathlib import Path

import orjson
from solders.keypair import Keypair


def load_signer(path: str, log: logging.Logger) -> Keypair | None:
    """Load a Solana CLI keypair file (JSON array of 64 bytes); None when unavailable."""
    keypair_path = Path(path).expanduser()
    if not keypair_path.exists():
        log.warning("signer not found: no keypair at %s (run `solana-keygen new`)", keypair_path)
        return None
    try:
        secret = orjson.loads(keypair_path.read_bytes())
        signer = Keypair.from_bytes(bytes(secret))
    except Exception as exc:
        log.error("error loading keypair %s: %s", keypair_path, exc)
        return None
    log.info("loaded wallet: %s", signer.pubkey())
    return signer
