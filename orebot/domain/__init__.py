from .models import (
    EMPTY_ANALYSIS,
    BoardAnalysis,
    BoardSnapshot,
    MinerSnapshot,
    PriceQuote,
    RoundDetail,
    RoundPhase,
    SlotRanking,
)

__all__ = [
    "EMPTY_ANALYSIS",
    "BoardAnalysis",
    "BoardSnapshot",
    "MinerSnapshot",
    "PriceQuote",
    "RoundDetail",
    "RoundPhase",
    "SlotRanking",
]
