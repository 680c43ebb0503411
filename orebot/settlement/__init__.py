from .manager import SettlementManager, SettlementResult
from .outcome import entropy_rng, is_populated, winning_slot

__all__ = ["SettlementManager", "SettlementResult", "entropy_rng", "is_populated", "winning_slot"]
