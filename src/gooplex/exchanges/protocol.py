"""Capability interfaces implemented by the exchange adapters."""

from __future__ import annotations

from typing import Any, Protocol

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


class MarketDataAdapter(Protocol):
    """Public market data in canonical form."""

    async def fetch_time(self) -> int | None:
        """Exchange server time in epoch milliseconds."""
        ...

    async def fetch_markets(self) -> list[Market]:
        ...

    async def load_markets(self, reload: bool = False) -> dict[str, Market]:
        """Fetch markets once and keep them in the adapter's registry.

        Args:
            reload: Fetch again even if markets are already loaded

        Returns:
            Markets keyed by canonical symbol
        """
        ...

    async def fetch_order_book(self, symbol: str, limit: int | None = None) -> OrderBook:
        ...

    async def fetch_ticker(self, symbol: str) -> Ticker:
        ...

    async def fetch_tickers(self, symbols: list[str] | None = None) -> list[Ticker]:
        ...

    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: int | None = None,
        limit: int | None = None,
    ) -> list[OHLCV]:
        ...

    async def fetch_trades(
        self,
        symbol: str,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Trade]:
        ...

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        ...


class ExchangeAdapter(MarketDataAdapter, Protocol):
    """Full trading surface: market data plus account operations."""

    async def fetch_status(self) -> ExchangeStatus:
        ...

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: float | None = None,
        params: dict[str, Any] | None = None,
    ) -> Order:
        """Place an order.

        Args:
            symbol: Canonical symbol (e.g., 'BTC/USDT')
            type: limit, market, stop_loss, stop_loss_limit, take_profit,
                take_profit_limit or limit_maker
            side: 'buy' or 'sell'
            amount: Order quantity in base currency
            price: Limit price, when the type takes one

        Returns:
            The placed Order
        """
        ...

    async def fetch_order(self, id: str, symbol: str | None = None) -> Order:
        ...

    async def fetch_orders(
        self,
        symbol: str,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Order]:
        ...

    async def fetch_open_orders(self, symbol: str, since: int, limit: int) -> list[Order]:
        ...

    async def fetch_closed_orders(
        self,
        symbol: str,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Order]:
        ...

    async def cancel_order(self, id: str, symbol: str | None = None) -> Order:
        ...

    async def cancel_all_orders(self, symbol: str) -> CancelAllResult:
        ...

    async def fetch_balance(self) -> BalanceSnapshot:
        ...

    async def fetch_my_trades(
        self,
        symbol: str,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Trade]:
        ...

    async def fetch_agg_trades(self, symbol: str, limit: int | None = None) -> list[AggTrade]:
        ...

    async def fetch_deposits(
        self,
        code: str | None = None,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        ...

    async def fetch_withdrawals(
        self,
        code: str | None = None,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        ...

    async def fetch_deposit_address(self, code: str) -> DepositAddress:
        ...

    async def withdraw(
        self,
        code: str,
        amount: float,
        address: str,
        tag: str | None = None,
        name: str | None = None,
    ) -> WithdrawalReceipt:
        ...

    async def fetch_trading_fee(self, symbol: str) -> TradingFee:
        ...

    async def fetch_trading_fees(self) -> dict[str, TradingFee]:
        ...
