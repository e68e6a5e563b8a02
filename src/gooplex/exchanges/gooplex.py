"""Gooplex adapter over the ``open`` / ``signed`` API with Binance market data."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable

from ..errors import BadResponse, InvalidAddress, NotSupported
from ..settings import AdapterSettings
from .base import ApiClient, require_argument
from .binance import BinanceMarketData
from .compound import (
    cancel_sequentially,
    cancelable,
    filter_by_status,
    static_trading_fee,
    synthesized_status,
)
from .models import (
    OHLCV,
    AggTrade,
    BalanceSnapshot,
    CancelAllResult,
    DepositAddress,
    ExchangeStatus,
    Market,
    Order,
    OrderBook,
    Ticker,
    Trade,
    TradingFee,
    Transaction,
    WithdrawalReceipt,
)
from .normalization import (
    filter_by_since_limit,
    normalize_balance,
    normalize_market,
    normalize_order,
    normalize_order_book,
    normalize_trade,
    normalize_transaction,
    safe_integer,
    safe_string,
    safe_value,
)
from .registry import MarketRegistry
from .signer import now_ms
from .status import ORDER_SIDES, ORDER_TYPES
from .transport import Transport

logger = logging.getLogger(__name__)

CAPABILITIES: dict[str, bool | str] = {
    "cancelAllOrders": "emulated",
    "cancelOrder": True,
    "createOrder": True,
    "fetchBalance": True,
    "fetchBidsAsks": True,
    "fetchClosedOrders": "emulated",
    "fetchDepositAddress": True,
    "fetchDeposits": True,
    "fetchFundingFees": False,
    "fetchMarkets": True,
    "fetchMyTrades": True,
    "fetchOHLCV": True,
    "fetchOpenOrders": True,
    "fetchOrder": True,
    "fetchOrders": True,
    "fetchOrderBook": True,
    "fetchStatus": "emulated",
    "fetchTicker": True,
    "fetchTickers": True,
    "fetchTime": True,
    "fetchTrades": True,
    "fetchTradingFee": "emulated",
    "fetchTradingFees": "emulated",
    "fetchTransactions": False,
    "fetchWithdrawals": True,
    "withdraw": True,
}

ORDER_BOOK_LIMITS = (5, 10, 20, 50, 100, 500)

PRICED_TYPES = {"limit", "stop_loss_limit", "take_profit_limit", "limit_maker"}

# 90 days, the widest deposit/withdrawal history window the API accepts
HISTORY_WINDOW_MS = 7776000000


def check_address(address: str | None) -> str:
    if address is None or not address or any(ch.isspace() for ch in address):
        raise InvalidAddress(f"address is invalid or has less than 1 characters: {address!r}")
    return address


def _data(response: Any) -> Any:
    if isinstance(response, dict) and "data" in response:
        return response["data"]
    return response


def _data_list(response: Any, operation: str) -> list[dict[str, Any]]:
    items = safe_value(_data(response), "list")
    if not isinstance(items, list):
        raise BadResponse(f"{operation} response has no data.list")
    return items


class GooplexAdapter:
    """Canonical operation surface for Gooplex.

    Order, account and funding operations go to the Gooplex ``open``/``signed``
    API. Tickers, klines and trades come from Binance through a
    BinanceMarketData that shares this adapter's client and registry.

    fetch_trading_fee(s) and fetch_status are emulated: they return static
    configuration and a locally synthesized status, not live exchange data.
    """

    has = CAPABILITIES

    def __init__(
        self,
        settings: AdapterSettings | None = None,
        *,
        transport: Transport | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.settings = settings or AdapterSettings()
        self.client = ApiClient(self.settings, transport, clock)
        self.registry = MarketRegistry()
        self.market_data = BinanceMarketData(client=self.client, registry=self.registry)

    @property
    def name(self) -> str:
        return "gooplex"

    # ------------------------------------------------------------------
    # markets
    # ------------------------------------------------------------------

    async def fetch_time(self) -> int | None:
        response = await self.client.request("open", "common/time")
        return safe_integer(response, "timestamp", safe_integer(_data(response), "timestamp"))

    async def fetch_status(self) -> ExchangeStatus:
        """Always ``ok``; Gooplex has no health endpoint to ask."""
        return synthesized_status(self.client.milliseconds())

    async def fetch_markets(self) -> list[Market]:
        response = await self.client.request("open", "common/symbols")
        fees = self.settings.fees
        return [
            normalize_market(raw, maker=fees.maker, taker=fees.taker)
            for raw in _data_list(response, "fetch_markets")
        ]

    async def load_markets(self, reload: bool = False) -> dict[str, Market]:
        if reload or not self.registry.loaded:
            self.registry.load(await self.fetch_markets())
        return self.registry.markets

    async def _market(self, symbol: str) -> Market:
        await self.load_markets()
        return self.registry.resolve_market(symbol)

    async def fetch_order_book(self, symbol: str, limit: int | None = None) -> OrderBook:
        require_argument(symbol, "symbol", "fetch_order_book")
        if limit is not None and limit not in ORDER_BOOK_LIMITS:
            raise NotSupported(f"Order book limit {limit} not supported, use one of {ORDER_BOOK_LIMITS}")
        market = await self._market(symbol)
        request: dict[str, Any] = {"symbol": market.id}
        if limit is not None:
            request["limit"] = limit
        response = await self.client.request("open", "market/depth", params=request)
        return normalize_order_book(response, market.symbol)

    async def fetch_ticker(self, symbol: str) -> Ticker:
        require_argument(symbol, "symbol", "fetch_ticker")
        await self.load_markets()
        return await self.market_data.fetch_ticker(symbol)

    async def fetch_tickers(self, symbols: list[str] | None = None) -> list[Ticker]:
        await self.load_markets()
        return await self.market_data.fetch_tickers(symbols)

    async def fetch_bids_asks(self, symbols: list[str] | None = None) -> list[Ticker]:
        await self.load_markets()
        return await self.market_data.fetch_bids_asks(symbols)

    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: int | None = None,
        limit: int | None = None,
    ) -> list[OHLCV]:
        require_argument(symbol, "symbol", "fetch_ohlcv")
        await self.load_markets()
        return await self.market_data.fetch_ohlcv(symbol, timeframe, since, limit)

    async def fetch_trades(
        self,
        symbol: str,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Trade]:
        require_argument(symbol, "symbol", "fetch_trades")
        await self.load_markets()
        return await self.market_data.fetch_trades(symbol, since, limit)

    async def fetch_agg_trades(self, symbol: str, limit: int | None = None) -> list[AggTrade]:
        require_argument(symbol, "symbol", "fetch_agg_trades")
        await self.load_markets()
        return await self.market_data.fetch_agg_trades(symbol, limit)

    # ------------------------------------------------------------------
    # orders
    # ------------------------------------------------------------------

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: float | None = None,
        params: dict[str, Any] | None = None,
    ) -> Order:
        require_argument(symbol, "symbol", "create_order")
        if side not in ORDER_SIDES:
            raise NotSupported(f"Side {side} not supported")
        if type not in ORDER_TYPES:
            raise NotSupported(f"Type {type} not supported")
        require_argument(amount, "amount", "create_order")
        if type in PRICED_TYPES:
            require_argument(price, "price", f"create_order with type {type}")

        market = await self._market(symbol)
        request: dict[str, Any] = {
            "symbol": market.id,
            "side": ORDER_SIDES[side],
            "type": ORDER_TYPES[type],
            "quantity": amount,
        }
        if price is not None:
            request["price"] = price
        request.update(params or {})

        response = await self.client.request("signed", "orders", "POST", request)
        order = normalize_order(_data(response) or {}, market, self.registry)
        logger.info("Created %s %s order %s on %s", side, type, order.id, market.symbol)
        # the placement response only echoes ids; fill the rest from the request
        return replace(
            order,
            symbol=order.symbol or market.symbol,
            side=order.side or side,
            type=order.type or type,
            amount=order.amount if order.amount is not None else float(amount),
            price=order.price if order.price is not None else price,
        )

    async def fetch_order(self, id: str, symbol: str | None = None) -> Order:
        require_argument(id, "id", "fetch_order")
        await self.load_markets()
        market = self.registry.resolve_market(symbol) if symbol is not None else None
        response = await self.client.request("signed", "orders/detail", params={"orderId": id})
        order = normalize_order(_data(response) or {}, market, self.registry)
        return order if order.id is not None else replace(order, id=str(id))

    async def fetch_orders(
        self,
        symbol: str,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Order]:
        require_argument(symbol, "symbol", "fetch_orders")
        market = await self._market(symbol)
        request: dict[str, Any] = {"symbol": market.id}
        if since is not None:
            request["startTime"] = since
        if limit is not None:
            request["limit"] = limit
        response = await self.client.request("signed", "orders", params=request)
        return [
            normalize_order(raw, market, self.registry)
            for raw in _data_list(response, "fetch_orders")
        ]

    async def fetch_open_orders(self, symbol: str, since: int, limit: int) -> list[Order]:
        require_argument(symbol, "symbol", "fetch_open_orders")
        require_argument(since, "since", "fetch_open_orders")
        require_argument(limit, "limit", "fetch_open_orders")
        orders = await self.fetch_orders(symbol, since, limit)
        return filter_by_status(orders, "open")

    async def fetch_closed_orders(
        self,
        symbol: str,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Order]:
        orders = await self.fetch_orders(symbol, since, limit)
        return filter_by_status(orders, "closed")

    async def cancel_order(self, id: str, symbol: str | None = None) -> Order:
        require_argument(id, "id", "cancel_order")
        await self.load_markets()
        market = self.registry.resolve_market(symbol) if symbol is not None else None
        response = await self.client.request("signed", "orders/cancel", "POST", {"orderId": id})
        order = normalize_order(_data(response) or {}, market, self.registry)
        return order if order.id is not None else replace(order, id=str(id))

    async def cancel_all_orders(self, symbol: str) -> CancelAllResult:
        """Cancel every open order of ``symbol``, one call per order, in order.

        Fetched orders already closed, canceled, rejected or expired are
        skipped; orders whose status is unknown are still canceled.

        Raises:
            CancelAllOrdersError: when a cancel fails; its ``result`` tells
                canceled, failed and not-attempted orders apart
        """
        require_argument(symbol, "symbol", "cancel_all_orders")
        orders = await self.fetch_orders(symbol)
        targets = [o for o in orders if cancelable(o)]
        return await cancel_sequentially(symbol, targets, self.cancel_order)

    async def fetch_my_trades(
        self,
        symbol: str,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Trade]:
        require_argument(symbol, "symbol", "fetch_my_trades")
        market = await self._market(symbol)
        request: dict[str, Any] = {"symbol": market.id}
        if since is not None:
            request["startTime"] = since
        if limit is not None:
            request["limit"] = limit
        response = await self.client.request("signed", "orders/trades", params=request)
        trades = [
            normalize_trade(raw, market=market, registry=self.registry)
            for raw in _data_list(response, "fetch_my_trades")
        ]
        return filter_by_since_limit(trades, since, limit)

    # ------------------------------------------------------------------
    # account and funding
    # ------------------------------------------------------------------

    async def fetch_balance(self) -> BalanceSnapshot:
        response = await self.client.request("signed", "account/spot")
        return normalize_balance(response)

    async def _fetch_transactions(
        self,
        path: str,
        code: str | None,
        since: int | None,
        limit: int | None,
    ) -> list[Transaction]:
        await self.load_markets()
        request: dict[str, Any] = {}
        if code is not None:
            request["asset"] = self.registry.currency_id(code)
        if since is not None:
            request["startTime"] = since
            request["endTime"] = since + HISTORY_WINDOW_MS
        response = await self.client.request("signed", path, params=request)
        transactions = [
            normalize_transaction(raw, code)
            for raw in _data_list(response, path)
        ]
        transactions.sort(key=lambda t: (t.timestamp is None, t.timestamp or 0))
        return filter_by_since_limit(transactions, since, limit)

    async def fetch_deposits(
        self,
        code: str | None = None,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        return await self._fetch_transactions("deposits", code, since, limit)

    async def fetch_withdrawals(
        self,
        code: str | None = None,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        return await self._fetch_transactions("withdraws", code, since, limit)

    async def fetch_deposit_address(self, code: str) -> DepositAddress:
        require_argument(code, "code", "fetch_deposit_address")
        await self.load_markets()
        response = await self.client.request(
            "signed", "deposits/address", params={"asset": self.registry.currency_id(code)}
        )
        if safe_string(response, "msg") != "Success":
            raise InvalidAddress(
                "fetch_deposit_address returned an empty response, "
                "create the deposit address in the user settings first"
            )
        data = _data(response)
        address = check_address(safe_string(data, "address"))
        tag = safe_string(data, "addressTag") or None
        return DepositAddress(currency=code, address=address, tag=tag, info=response)

    async def withdraw(
        self,
        code: str,
        amount: float,
        address: str,
        tag: str | None = None,
        name: str | None = None,
    ) -> WithdrawalReceipt:
        """Request a withdrawal.

        ``name`` is a cosmetic label for the address book entry and defaults
        to the first 20 characters of the address.
        """
        check_address(address)
        require_argument(code, "code", "withdraw")
        require_argument(amount, "amount", "withdraw")
        await self.load_markets()
        request: dict[str, Any] = {
            "asset": self.registry.currency_id(code),
            "address": address,
            "amount": float(amount),
            "name": name if name is not None else address[:20],
        }
        if tag is not None:
            request["addressTag"] = tag
        response = await self.client.request("signed", "withdraws", "POST", request)
        logger.info("Withdrawal of %s %s requested", amount, code)
        return WithdrawalReceipt(id=safe_string(_data(response), "id"), info=response)

    # ------------------------------------------------------------------
    # fees
    # ------------------------------------------------------------------

    async def fetch_trading_fee(self, symbol: str) -> TradingFee:
        """Configured maker/taker rates for ``symbol`` (``live=False``)."""
        require_argument(symbol, "symbol", "fetch_trading_fee")
        market = await self._market(symbol)
        return static_trading_fee(market, self.settings.fees, self.registry)

    async def fetch_trading_fees(self) -> dict[str, TradingFee]:
        """Configured maker/taker rates for every market (``live=False``)."""
        markets = await self.load_markets()
        return {
            symbol: static_trading_fee(market, self.settings.fees, self.registry)
            for symbol, market in markets.items()
        }

    async def close(self) -> None:
        await self.client.close()
