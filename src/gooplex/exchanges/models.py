"""Canonical entities produced by the normalizers.

Every entity is immutable and carries the raw exchange record in ``info``.
Fields the exchange did not report are ``None``, never zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MinMax:
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class Precision:
    price: int | None = None
    amount: int | None = None
    cost: int | None = None
    base: int | None = None
    quote: int | None = None


@dataclass(frozen=True)
class Limits:
    amount: MinMax = field(default_factory=MinMax)
    price: MinMax = field(default_factory=MinMax)
    cost: MinMax = field(default_factory=MinMax)


@dataclass(frozen=True)
class Market:
    id: str
    symbol: str
    base: str | None
    quote: str | None
    base_id: str | None
    quote_id: str | None
    active: bool | None
    type: str
    spot: bool
    margin: bool | None
    future: bool
    delivery: bool
    precision: Precision
    limits: Limits
    maker: float | None
    taker: float | None
    info: dict[str, Any] = field(repr=False)

    @property
    def lowercase_id(self) -> str:
        return self.id.lower()


@dataclass(frozen=True)
class Ticker:
    symbol: str | None
    timestamp: int | None
    datetime: str | None
    high: float | None
    low: float | None
    bid: float | None
    bid_volume: float | None
    ask: float | None
    ask_volume: float | None
    vwap: float | None
    open: float | None
    close: float | None
    last: float | None
    previous_close: float | None
    change: float | None
    percentage: float | None
    average: float | None
    base_volume: float | None
    quote_volume: float | None
    info: dict[str, Any] = field(repr=False)


@dataclass(frozen=True)
class Fee:
    currency: str | None
    cost: float | None
    rate: float | None = None


@dataclass(frozen=True)
class Trade:
    id: str | None
    order: str | None
    timestamp: int | None
    datetime: str | None
    symbol: str | None
    type: str | None
    side: str | None
    price: float | None
    amount: float | None
    cost: float | None
    taker_or_maker: str | None
    fee: Fee | None
    info: dict[str, Any] = field(repr=False)


@dataclass(frozen=True)
class AggTrade:
    trade_id: int | None
    price: float | None
    amount: float | None
    first_trade_id: int | None
    last_trade_id: int | None
    timestamp: int | None
    datetime: str | None
    maker: bool | None
    best_price_match: bool | None
    info: dict[str, Any] = field(repr=False)


@dataclass(frozen=True)
class OHLCV:
    timestamp: int | None
    open: float | None
    high: float | None
    low: float | None
    close: float | None
    volume: float | None


@dataclass(frozen=True)
class OrderBook:
    symbol: str | None
    bids: tuple[tuple[float, float], ...]
    asks: tuple[tuple[float, float], ...]
    timestamp: int | None
    datetime: str | None
    nonce: int | None
    info: dict[str, Any] = field(repr=False)


@dataclass(frozen=True)
class Order:
    id: str | None
    client_order_id: str | None
    symbol: str | None
    side: str | None
    type: str | None
    amount: float | None
    filled: float | None
    remaining: float | None
    price: float | None
    average: float | None
    cost: float | None
    status: str | None
    timestamp: int | None
    datetime: str | None
    info: dict[str, Any] = field(repr=False)


@dataclass(frozen=True)
class Transaction:
    id: str | None
    txid: str | None
    address: str | None
    tag: str | None
    amount: float | None
    currency: str | None
    status: str | None
    type: str | None
    timestamp: int | None
    datetime: str | None
    updated: int | None
    fee: Fee | None
    info: dict[str, Any] = field(repr=False)


@dataclass(frozen=True)
class Balance:
    free: float
    used: float

    @property
    def total(self) -> float:
        return self.free + self.used


@dataclass(frozen=True)
class AccountInfo:
    """Account metadata reported next to the balances."""

    account_type: str
    permissions: tuple[str, ...]
    maker_commission: float | None
    taker_commission: float | None
    buyer_commission: float | None
    seller_commission: float | None
    can_trade: bool | None
    can_deposit: bool | None
    can_withdraw: bool | None
    update_time: int | None


@dataclass(frozen=True)
class BalanceSnapshot:
    balances: dict[str, Balance]
    timestamp: int | None
    datetime: str | None
    account: AccountInfo
    info: dict[str, Any] = field(repr=False)

    def __getitem__(self, currency: str) -> Balance:
        return self.balances[currency]

    @property
    def free(self) -> dict[str, float]:
        return {code: b.free for code, b in self.balances.items()}

    @property
    def used(self) -> dict[str, float]:
        return {code: b.used for code, b in self.balances.items()}

    @property
    def total(self) -> dict[str, float]:
        return {code: b.total for code, b in self.balances.items()}


@dataclass(frozen=True)
class DepositAddress:
    currency: str
    address: str
    tag: str | None
    info: dict[str, Any] = field(repr=False)


@dataclass(frozen=True)
class WithdrawalReceipt:
    id: str | None
    info: dict[str, Any] = field(repr=False)


@dataclass(frozen=True)
class TradingFee:
    """Maker/taker rates for one symbol.

    ``live`` is always False for this exchange: the rates come from static
    configuration, not from a fee-schedule endpoint.
    """

    symbol: str
    maker: float | None
    taker: float | None
    live: bool
    info: dict[str, Any] = field(repr=False)


@dataclass(frozen=True)
class ExchangeStatus:
    """Exchange health as reported to callers.

    ``synthesized`` is True when no health endpoint was queried and the
    status was produced locally.
    """

    status: str
    updated: int
    synthesized: bool
    eta: int | None = None
    url: str | None = None


CANCELED = "canceled"
FAILED = "failed"
NOT_ATTEMPTED = "not_attempted"


@dataclass(frozen=True)
class CancelStep:
    order_id: str | None
    state: str
    response: Order | None = None
    error: BaseException | None = None


@dataclass(frozen=True)
class CancelAllResult:
    """Per-order outcome of a cancel-all run, in the order cancels were issued."""

    symbol: str
    steps: tuple[CancelStep, ...]

    @property
    def responses(self) -> list[Order]:
        return [s.response for s in self.steps if s.state == CANCELED and s.response is not None]

    @property
    def canceled(self) -> list[str | None]:
        return [s.order_id for s in self.steps if s.state == CANCELED]

    @property
    def failed(self) -> list[str | None]:
        return [s.order_id for s in self.steps if s.state == FAILED]

    @property
    def not_attempted(self) -> list[str | None]:
        return [s.order_id for s in self.steps if s.state == NOT_ATTEMPTED]

    @property
    def complete(self) -> bool:
        return all(s.state == CANCELED for s in self.steps)
