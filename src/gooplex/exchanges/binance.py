"""Binance public market-data surface (``/api`` and ``/api/v3``)."""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..errors import BadResponse, NotSupported
from ..settings import AdapterSettings
from .base import ApiClient, require_argument
from .models import OHLCV, AggTrade, Market, OrderBook, Ticker, Trade
from .normalization import (
    filter_by_since_limit,
    normalize_agg_trade,
    normalize_market,
    normalize_ohlcv,
    normalize_order_book,
    normalize_ticker,
    normalize_trade,
    safe_integer,
    safe_value,
)
from .registry import MarketRegistry
from .signer import now_ms
from .transport import Transport

logger = logging.getLogger(__name__)

TIMEFRAMES: dict[str, str] = {
    "1m": "1m",
    "3m": "3m",
    "5m": "5m",
    "15m": "15m",
    "30m": "30m",
    "1h": "1h",
    "2h": "2h",
    "4h": "4h",
    "6h": "6h",
    "8h": "8h",
    "12h": "12h",
    "1d": "1d",
    "3d": "3d",
    "1w": "1w",
    "1M": "1M",
}


class BinanceMarketData:
    """Market data from Binance proper in canonical form.

    Can run on its own, or share an ApiClient and registry with an adapter
    that routes its public market data here.
    """

    def __init__(
        self,
        settings: AdapterSettings | None = None,
        *,
        client: ApiClient | None = None,
        registry: MarketRegistry | None = None,
        transport: Transport | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.settings = settings or (client.settings if client else AdapterSettings(exchange="binance"))
        self.client = client or ApiClient(self.settings, transport, clock)
        self.registry = registry if registry is not None else MarketRegistry()

    @property
    def name(self) -> str:
        return "binance"

    async def fetch_time(self) -> int | None:
        response = await self.client.request("public", "time")
        return safe_integer(response, "serverTime")

    async def fetch_markets(self) -> list[Market]:
        response = await self.client.request("public", "exchangeInfo")
        symbols = safe_value(response, "symbols")
        if not isinstance(symbols, list):
            raise BadResponse("exchangeInfo response has no symbols list")
        fees = self.settings.fees
        return [normalize_market(raw, maker=fees.maker, taker=fees.taker) for raw in symbols]

    async def load_markets(self, reload: bool = False) -> dict[str, Market]:
        if reload or not self.registry.loaded:
            self.registry.load(await self.fetch_markets())
        return self.registry.markets

    async def _market(self, symbol: str) -> Market:
        await self.load_markets()
        return self.registry.resolve_market(symbol)

    async def fetch_order_book(self, symbol: str, limit: int | None = None) -> OrderBook:
        require_argument(symbol, "symbol", "fetch_order_book")
        market = await self._market(symbol)
        request: dict[str, Any] = {"symbol": market.id}
        if limit is not None:
            request["limit"] = limit
        response = await self.client.request("public", "depth", params=request)
        return normalize_order_book(response, market.symbol)

    async def fetch_ticker(self, symbol: str) -> Ticker:
        require_argument(symbol, "symbol", "fetch_ticker")
        market = await self._market(symbol)
        response = await self.client.request("public", "ticker/24hr", params={"symbol": market.id})
        if isinstance(response, list):
            response = safe_value(response, 0, {})
        return normalize_ticker(response, market, self.registry)

    def _parse_tickers(self, response: Any, symbols: list[str] | None) -> list[Ticker]:
        if not isinstance(response, list):
            raise BadResponse("ticker response is not a list")
        tickers = [normalize_ticker(raw, registry=self.registry) for raw in response]
        if symbols is None:
            return tickers
        wanted = set(symbols)
        return [t for t in tickers if t.symbol in wanted]

    async def fetch_tickers(self, symbols: list[str] | None = None) -> list[Ticker]:
        await self.load_markets()
        response = await self.client.request("public", "ticker/24hr")
        return self._parse_tickers(response, symbols)

    async def fetch_bids_asks(self, symbols: list[str] | None = None) -> list[Ticker]:
        """Best bid/ask for every market; other ticker fields stay unknown."""
        await self.load_markets()
        response = await self.client.request("public", "ticker/bookTicker")
        return self._parse_tickers(response, symbols)

    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: int | None = None,
        limit: int | None = None,
    ) -> list[OHLCV]:
        require_argument(symbol, "symbol", "fetch_ohlcv")
        if timeframe not in TIMEFRAMES:
            raise NotSupported(f"Timeframe {timeframe} not supported")
        market = await self._market(symbol)
        request: dict[str, Any] = {"symbol": market.id, "interval": TIMEFRAMES[timeframe]}
        if since is not None:
            request["startTime"] = since
        if limit is not None:
            request["limit"] = limit  # default == max == 500
        response = await self.client.request("public", "klines", params=request)
        candles = [normalize_ohlcv(row) for row in response or []]
        return filter_by_since_limit(candles, since, limit)

    async def fetch_trades(
        self,
        symbol: str,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Trade]:
        require_argument(symbol, "symbol", "fetch_trades")
        market = await self._market(symbol)
        request: dict[str, Any] = {"symbol": market.id}
        if limit is not None:
            request["limit"] = limit
        response = await self.client.request("api", "v3/trades", params=request)
        trades = [normalize_trade(raw, market.symbol) for raw in response or []]
        return filter_by_since_limit(trades, since, limit)

    async def fetch_agg_trades(self, symbol: str, limit: int | None = None) -> list[AggTrade]:
        require_argument(symbol, "symbol", "fetch_agg_trades")
        market = await self._market(symbol)
        request: dict[str, Any] = {"symbol": market.id}
        if limit is not None:
            request["limit"] = limit
        response = await self.client.request("api", "v3/aggTrades", params=request)
        return [normalize_agg_trade(raw) for raw in response or []]

    async def close(self) -> None:
        await self.client.close()
