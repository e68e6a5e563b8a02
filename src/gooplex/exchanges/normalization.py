"""Mapping of raw exchange records onto canonical entities.

Each ``normalize_*`` function is pure: it reads named fields from one raw
record through the ``safe_*`` accessors and returns a fresh entity. Missing
or null source fields become ``None``. Datetimes are always derived from the
canonical millisecond timestamp.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Sequence, TypeVar

from ..errors import BadResponse
from .models import (
    OHLCV,
    AccountInfo,
    AggTrade,
    Balance,
    BalanceSnapshot,
    Fee,
    Limits,
    Market,
    MinMax,
    Order,
    OrderBook,
    Precision,
    Ticker,
    Trade,
    TradingFee,
    Transaction,
)
from .registry import MarketRegistry, resolve_currency_code
from .status import DEPOSIT, WITHDRAWAL, order_status, side_name, status_for, type_name

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# Anything below this is a seconds timestamp (ms value would be before 1973).
_SECONDS_THRESHOLD = 10**11


def safe_value(obj: Any, key: Any, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, dict):
        value = obj.get(key)
    elif isinstance(obj, (list, tuple)) and isinstance(key, int):
        value = obj[key] if -len(obj) <= key < len(obj) else None
    else:
        return default
    return default if value is None else value


def safe_string(obj: Any, key: Any, default: str | None = None) -> str | None:
    value = safe_value(obj, key)
    if value is None:
        return default
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def safe_float(obj: Any, key: Any, default: float | None = None) -> float | None:
    value = safe_value(obj, key)
    if value is None or isinstance(value, bool) or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def safe_integer(obj: Any, key: Any, default: int | None = None) -> int | None:
    value = safe_float(obj, key)
    if value is None:
        return default
    return int(value)


def safe_string2(obj: Any, key1: Any, key2: Any) -> str | None:
    value = safe_string(obj, key1)
    return value if value is not None else safe_string(obj, key2)


def safe_float2(obj: Any, key1: Any, key2: Any) -> float | None:
    value = safe_float(obj, key1)
    return value if value is not None else safe_float(obj, key2)


def to_milliseconds(value: int | float | None) -> int | None:
    """Upconvert an epoch timestamp in seconds to milliseconds; ms pass unchanged."""
    if value is None:
        return None
    if abs(value) < _SECONDS_THRESHOLD:
        return int(value * 1000)
    return int(value)


def safe_timestamp(obj: Any, *keys: Any) -> int | None:
    for key in keys:
        value = safe_float(obj, key)
        if value is not None:
            return to_milliseconds(value)
    return None


def iso8601(timestamp: int | None) -> str | None:
    """Render an epoch-ms timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if timestamp is None:
        return None
    dt = _EPOCH + timedelta(milliseconds=int(timestamp))
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{int(timestamp) % 1000:03d}Z"


def _truthy_flag(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true"}
    return bool(value)


def split_market_id(market_id: str) -> tuple[str | None, str | None]:
    """Split ``BTC_USDT`` style ids into their asset ids."""
    parts = market_id.split("_")
    if len(parts) == 2 and all(parts):
        return parts[0], parts[1]
    return None, None


def resolve_symbol(
    market_id: str | None,
    market: Market | None = None,
    registry: MarketRegistry | None = None,
) -> str | None:
    """Canonical symbol for a raw market id.

    Looks the id up in the registry first, then falls back to the market the
    caller supplied, then to the raw id itself.
    """
    if market_id is not None and registry is not None:
        found = registry.market_by_id(market_id)
        if found is not None:
            return found.symbol
    if market is not None:
        return market.symbol
    return market_id


def filter_by_since_limit(
    items: Iterable[T],
    since: int | None = None,
    limit: int | None = None,
) -> list[T]:
    result = list(items)
    if since is not None:
        result = [i for i in result if getattr(i, "timestamp", None) is not None and i.timestamp >= since]
    if limit is not None:
        result = result[:limit]
    return result


def _non_negative(value: int | None) -> int | None:
    if value is None or value < 0:
        return None
    return value


def _parse_filters(filters: Any) -> dict[str, dict[str, Any]]:
    if not isinstance(filters, list):
        return {}
    return {f["filterType"]: f for f in filters if isinstance(f, dict) and "filterType" in f}


def normalize_market(
    raw: dict[str, Any],
    *,
    maker: float | None = None,
    taker: float | None = None,
) -> Market:
    """Build a Market from a ``common/symbols`` or ``exchangeInfo`` entry."""
    raw_id = safe_string(raw, "symbol")
    if raw_id is None:
        raise BadResponse("market record has no symbol")
    market_id = raw_id.replace("_", "")

    split_base, split_quote = split_market_id(raw_id)
    base_id = safe_string(raw, "baseAsset", split_base)
    quote_id = safe_string(raw, "quoteAsset", split_quote)
    base = resolve_currency_code(base_id)
    quote = resolve_currency_code(quote_id)

    future = False
    delivery = False
    market_type = "spot"
    if "maintMarginPercent" in raw:
        delivery = "marginAsset" in raw
        future = not delivery
        market_type = "delivery" if delivery else "future"
    spot = not (future or delivery)
    symbol = market_id if delivery else f"{base}/{quote}"

    status = safe_string2(raw, "status", "contractStatus")
    active = None if status is None else status == "TRADING"
    margin_flag = safe_value(raw, "isMarginTradingAllowed")
    margin = bool(margin_flag) if margin_flag is not None else (True if not spot else None)

    base_precision = _non_negative(
        safe_integer(raw, "basePrecision", safe_integer(raw, "baseAssetPrecision"))
    )
    quote_precision = _non_negative(
        safe_integer(raw, "quotePrecision", safe_integer(raw, "quoteAssetPrecision"))
    )
    precision = Precision(
        price=quote_precision,
        amount=base_precision,
        cost=base_precision,
        base=base_precision,
        quote=quote_precision,
    )

    filters = _parse_filters(safe_value(raw, "filters"))
    price_filter = filters.get("PRICE_FILTER", {})
    lot_size = filters.get("LOT_SIZE", {})
    min_notional = filters.get("MIN_NOTIONAL", filters.get("NOTIONAL", {}))

    amount_min = safe_float(lot_size, "minQty")
    if amount_min is None and precision.amount is not None:
        amount_min = 10 ** -precision.amount
    limits = Limits(
        amount=MinMax(amount_min, safe_float(lot_size, "maxQty")),
        price=MinMax(safe_float(price_filter, "minPrice"), safe_float(price_filter, "maxPrice")),
        cost=MinMax(safe_float(min_notional, "minNotional"), safe_float(min_notional, "maxNotional")),
    )

    return Market(
        id=market_id,
        symbol=symbol,
        base=base,
        quote=quote,
        base_id=base_id,
        quote_id=quote_id,
        active=active,
        type=market_type,
        spot=spot,
        margin=margin,
        future=future,
        delivery=delivery,
        precision=precision,
        limits=limits,
        maker=maker,
        taker=taker,
        info=raw,
    )


def normalize_ticker(
    raw: dict[str, Any],
    market: Market | None = None,
    registry: MarketRegistry | None = None,
) -> Ticker:
    """Build a Ticker from a ``ticker/24hr`` or ``ticker/bookTicker`` entry."""
    timestamp = safe_timestamp(raw, "closeTime")
    last = safe_float(raw, "lastPrice")
    return Ticker(
        symbol=resolve_symbol(safe_string(raw, "symbol"), market, registry),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        high=safe_float(raw, "highPrice"),
        low=safe_float(raw, "lowPrice"),
        bid=safe_float(raw, "bidPrice"),
        bid_volume=safe_float(raw, "bidQty"),
        ask=safe_float(raw, "askPrice"),
        ask_volume=safe_float(raw, "askQty"),
        vwap=safe_float(raw, "weightedAvgPrice"),
        open=safe_float(raw, "openPrice"),
        close=last,
        last=last,
        previous_close=safe_float(raw, "prevClosePrice"),
        change=safe_float(raw, "priceChange"),
        percentage=safe_float(raw, "priceChangePercent"),
        average=None,
        base_volume=safe_float(raw, "volume"),
        quote_volume=safe_float(raw, "quoteVolume"),
        info=raw,
    )


def _taker_or_maker(raw: dict[str, Any]) -> str | None:
    flag = safe_value(raw, "isBuyerMaker")
    if flag is None:
        flag = safe_value(raw, "isMaker")
    if flag is None:
        return None
    return "maker" if _truthy_flag(flag) else "taker"


def _trade_side(raw: dict[str, Any]) -> str | None:
    if "isBuyer" in raw and raw["isBuyer"] is not None:
        return "buy" if _truthy_flag(raw["isBuyer"]) else "sell"
    side = side_name(safe_value(raw, "side"))
    if side is not None:
        return side
    buyer_maker = safe_value(raw, "isBuyerMaker")
    if buyer_maker is not None:
        # public trades report the taker's side
        return "sell" if _truthy_flag(buyer_maker) else "buy"
    return None


def normalize_trade(
    raw: dict[str, Any],
    symbol: str | None = None,
    market: Market | None = None,
    registry: MarketRegistry | None = None,
) -> Trade:
    """Build a Trade from a public ``trades`` or private ``orders/trades`` entry."""
    timestamp = safe_timestamp(raw, "time")
    price = safe_float(raw, "price")
    amount = safe_float2(raw, "qty", "quantity")
    cost = price * amount if price is not None and amount is not None else None

    fee = None
    commission = safe_float(raw, "commission")
    if commission is not None:
        fee = Fee(
            currency=resolve_currency_code(safe_string(raw, "commissionAsset")),
            cost=commission,
        )

    if symbol is None:
        symbol = resolve_symbol(safe_string(raw, "symbol"), market, registry)

    return Trade(
        id=safe_string2(raw, "id", "tradeId"),
        order=safe_string(raw, "orderId"),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        symbol=symbol,
        type=None,
        side=_trade_side(raw),
        price=price,
        amount=amount,
        cost=cost,
        taker_or_maker=_taker_or_maker(raw),
        fee=fee,
        info=raw,
    )


def normalize_agg_trade(raw: dict[str, Any]) -> AggTrade:
    timestamp = safe_timestamp(raw, "T")
    maker = safe_value(raw, "m")
    best = safe_value(raw, "M")
    return AggTrade(
        trade_id=safe_integer(raw, "a"),
        price=safe_float(raw, "p"),
        amount=safe_float(raw, "q"),
        first_trade_id=safe_integer(raw, "f"),
        last_trade_id=safe_integer(raw, "l"),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        maker=None if maker is None else bool(maker),
        best_price_match=None if best is None else bool(best),
        info=raw,
    )


def normalize_ohlcv(row: Sequence[Any]) -> OHLCV:
    """Keep the first six kline columns: open time, OHLC and base volume."""
    return OHLCV(
        timestamp=to_milliseconds(safe_integer(row, 0)),
        open=safe_float(row, 1),
        high=safe_float(row, 2),
        low=safe_float(row, 3),
        close=safe_float(row, 4),
        volume=safe_float(row, 5),
    )


def _book_side(levels: Any, descending: bool) -> tuple[tuple[float, float], ...]:
    merged: dict[float, float] = {}
    if isinstance(levels, list):
        for level in levels:
            price = safe_float(level, 0)
            amount = safe_float(level, 1)
            if price is None or amount is None:
                continue
            merged[price] = merged.get(price, 0.0) + amount
    return tuple(sorted(merged.items(), key=lambda pa: pa[0], reverse=descending))


def normalize_order_book(raw: dict[str, Any], symbol: str | None = None) -> OrderBook:
    """Build an OrderBook with bids descending and asks ascending.

    Levels repeating a price are merged into one by summing their amounts.
    """
    book = safe_value(raw, "data", raw)
    if not isinstance(book, dict):
        raise BadResponse("order book payload is not an object")
    timestamp = safe_timestamp(book, "T", "E", "timestamp")
    return OrderBook(
        symbol=symbol,
        bids=_book_side(book.get("bids"), descending=True),
        asks=_book_side(book.get("asks"), descending=False),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        nonce=safe_integer(book, "lastUpdateId"),
        info=raw,
    )


def normalize_order(
    raw: dict[str, Any],
    market: Market | None = None,
    registry: MarketRegistry | None = None,
) -> Order:
    """Build an Order from an ``orders`` list entry or an order detail."""
    timestamp = safe_timestamp(raw, "createTime", "time", "transactTime")
    amount = safe_float2(raw, "origQty", "quantity")
    filled = safe_float(raw, "executedQty")
    cost = safe_float2(raw, "cummulativeQuoteQty", "executedQuoteQty")
    remaining = amount - filled if amount is not None and filled is not None else None
    average = cost / filled if cost is not None and filled else None
    return Order(
        id=safe_string2(raw, "orderId", "id"),
        client_order_id=safe_string2(raw, "clientOrderId", "clientId"),
        symbol=resolve_symbol(safe_string(raw, "symbol"), market, registry),
        side=side_name(safe_value(raw, "side")),
        type=type_name(safe_value(raw, "type")),
        amount=amount,
        filled=filled,
        remaining=remaining,
        price=safe_float(raw, "price"),
        average=average,
        cost=cost,
        status=order_status(safe_value(raw, "status")),
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        info=raw,
    )


def normalize_transaction(raw: dict[str, Any], currency: str | None = None) -> Transaction:
    """Build a deposit or withdrawal record.

    When the record has no explicit ``type``, ``insertTime`` alone marks a
    deposit and ``applyTime`` alone marks a withdrawal.
    """
    tag = safe_string(raw, "addressTag")
    if tag is not None and len(tag) < 1:
        tag = None

    insert_time = safe_timestamp(raw, "insertTime")
    apply_time = safe_timestamp(raw, "applyTime")
    tx_type = safe_string(raw, "type")
    timestamp = None
    if tx_type is None:
        if insert_time is not None and apply_time is None:
            tx_type = DEPOSIT
            timestamp = insert_time
        elif insert_time is None and apply_time is not None:
            tx_type = WITHDRAWAL
            timestamp = apply_time
    elif tx_type == DEPOSIT:
        timestamp = insert_time
    elif tx_type == WITHDRAWAL:
        timestamp = apply_time

    code = resolve_currency_code(safe_string(raw, "asset")) or currency
    fee = None
    fee_cost = safe_float(raw, "transactionFee")
    if fee_cost is not None:
        fee = Fee(currency=code, cost=fee_cost)

    return Transaction(
        id=safe_string(raw, "id"),
        txid=safe_string(raw, "txId"),
        address=safe_string(raw, "address"),
        tag=tag,
        amount=safe_float(raw, "amount"),
        currency=code,
        status=status_for(safe_string(raw, "status"), tx_type),
        type=tx_type,
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        updated=safe_timestamp(raw, "successTime"),
        fee=fee,
        info=raw,
    )


def normalize_balance(response: dict[str, Any]) -> BalanceSnapshot:
    """Build a BalanceSnapshot from an ``account/spot`` response.

    Raises:
        BadResponse: if the response carries no ``accountAssets`` list
    """
    data = safe_value(response, "data", {})
    assets = safe_value(data, "accountAssets")
    if not isinstance(assets, list):
        raise BadResponse("account response has no accountAssets")

    balances: dict[str, Balance] = {}
    for entry in assets:
        code = resolve_currency_code(safe_string(entry, "asset"))
        free = safe_float(entry, "free")
        used = safe_float(entry, "locked")
        if code is None or free is None or used is None:
            logger.warning("Skipping incomplete balance entry: %r", entry)
            continue
        balances[code] = Balance(free=free, used=used)

    timestamp = safe_timestamp(response, "timestamp") or safe_timestamp(data, "updateTime")
    account = AccountInfo(
        account_type="SPOT",
        permissions=("SPOT",),
        maker_commission=safe_float(data, "makerCommission"),
        taker_commission=safe_float(data, "takerCommission"),
        buyer_commission=safe_float(data, "buyerCommission"),
        seller_commission=safe_float(data, "sellerCommission"),
        can_trade=_truthy_flag(safe_value(data, "canTrade")),
        can_deposit=_truthy_flag(safe_value(data, "canDeposit")),
        can_withdraw=_truthy_flag(safe_value(data, "canWithdraw")),
        update_time=timestamp,
    )
    return BalanceSnapshot(
        balances=balances,
        timestamp=timestamp,
        datetime=iso8601(timestamp),
        account=account,
        info=response,
    )


def normalize_trading_fee(
    raw: dict[str, Any],
    registry: MarketRegistry | None = None,
    *,
    live: bool = False,
) -> TradingFee:
    market_id = safe_string(raw, "symbol")
    return TradingFee(
        symbol=resolve_symbol(market_id, None, registry) or "",
        maker=safe_float(raw, "maker"),
        taker=safe_float(raw, "taker"),
        live=live,
        info=raw,
    )
