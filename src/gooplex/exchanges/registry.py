"""Market and currency lookup tables filled by ``fetch_markets``."""

from __future__ import annotations

import logging
from typing import Iterable

from ..errors import MarketNotFound
from .models import Market

logger = logging.getLogger(__name__)

COMMON_CURRENCIES: dict[str, str] = {
    "XBT": "BTC",
    "BCC": "BCH",
    "BCHABC": "BCH",
    "BCHSV": "BSV",
    "DRK": "DASH",
}


def resolve_currency_code(asset_id: str | None) -> str | None:
    """Map an exchange asset id onto the common currency code."""
    if asset_id is None:
        return None
    code = asset_id.upper()
    return COMMON_CURRENCIES.get(code, code)


class MarketRegistry:
    """Loaded markets indexed by canonical symbol and exchange id."""

    def __init__(self, markets: Iterable[Market] = ()):
        self._by_symbol: dict[str, Market] = {}
        self._by_id: dict[str, Market] = {}
        self._currency_ids: dict[str, str] = {}
        self._loaded = False
        markets = list(markets)
        if markets:
            self.load(markets)

    def load(self, markets: Iterable[Market]) -> None:
        by_symbol: dict[str, Market] = {}
        by_id: dict[str, Market] = {}
        currency_ids: dict[str, str] = {}
        for market in markets:
            by_symbol[market.symbol] = market
            by_id[market.id] = market
            for code, asset_id in ((market.base, market.base_id), (market.quote, market.quote_id)):
                if code and asset_id:
                    currency_ids.setdefault(code, asset_id)
        self._by_symbol = by_symbol
        self._by_id = by_id
        self._currency_ids = currency_ids
        self._loaded = True
        logger.debug("Registry loaded with %d markets", len(by_symbol))

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def markets(self) -> dict[str, Market]:
        return dict(self._by_symbol)

    @property
    def symbols(self) -> list[str]:
        return list(self._by_symbol)

    def resolve_market(self, symbol: str) -> Market:
        market = self._by_symbol.get(symbol) or self._by_id.get(symbol)
        if market is None:
            raise MarketNotFound(f"Market {symbol} not found")
        return market

    def market_by_id(self, market_id: str | None) -> Market | None:
        if market_id is None:
            return None
        return self._by_id.get(market_id) or self._by_id.get(market_id.replace("_", ""))

    def resolve_currency_code(self, asset_id: str | None) -> str | None:
        return resolve_currency_code(asset_id)

    def currency_id(self, code: str) -> str:
        """Exchange asset id for a currency code; the code itself when unknown."""
        code = code.upper()
        return self._currency_ids.get(code, code)
