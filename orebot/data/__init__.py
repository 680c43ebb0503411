from .layouts import decode_board, decode_miner, decode_round
from .snapshot_store import SnapshotStore

__all__ = ["SnapshotStore", "decode_board", "decode_miner", "decode_round"]
