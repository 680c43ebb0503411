from __future__ import annotations

import logging

from orebot.data.http_service import HttpService
from orebot.domain import PriceQuote
from orebot.domain.constants import ORE_MINT, SOL_MINT

DEXSCREENER_TOKENS = "https://api.dexscreener.com/latest/dex/tokens/{}"


def _volume_h24(pair: dict) -> float:
    try:
        return float((pair.get("volume") or {}).get("h24") or 0.0)
    except (TypeError, ValueError):
        return 0.0


def best_pair_price(payload) -> float:
    """USD price of the highest 24h-volume pair in a DexScreener response; 0 when absent."""
    pairs = payload.get("pairs") if isinstance(payload, dict) else None
    if not pairs:
        return 0.0
    best = pairs[0]
    for pair in pairs[1:]:
        if _volume_h24(pair) > _volume_h24(best):
            best = pair
    try:
        price = float(best.get("priceUsd") or 0.0)
    except (TypeError, ValueError):
        return 0.0
    return price if price > 0 else 0.0


class PriceFeed:
    def __init__(self, http: HttpService, log: logging.Logger):
        self.http = http
        self.log = log

    async def fetch_price(self, mint: str) -> float:
        try:
            payload = await self.http.get_json(DEXSCREENER_TOKENS.format(mint), cache_ttl=10.0)
        except Exception as exc:
            self.log.warning("error fetching price for %s: %s", mint, exc)
            return 0.0
        return best_pair_price(payload)

    async def quote(self) -> PriceQuote:
        ore_usd = await self.fetch_price(ORE_MINT)
        sol_usd = await self.fetch_price(SOL_MINT)
        return PriceQuote(ore_usd=ore_usd, sol_usd=sol_usd)
