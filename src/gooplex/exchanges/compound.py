"""Operations the exchange has no single endpoint for, built from primitives.

Multi-step operations run their sub-calls one at a time, in order.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable

from ..errors import CancelAllOrdersError
from ..settings import FeeSettings
from .models import (
    CANCELED,
    FAILED,
    NOT_ATTEMPTED,
    CancelAllResult,
    CancelStep,
    ExchangeStatus,
    Market,
    Order,
    TradingFee,
)
from .normalization import normalize_trading_fee
from .registry import MarketRegistry

logger = logging.getLogger(__name__)

CancelCall = Callable[[str, str], Awaitable[Order]]


def filter_by_status(orders: Iterable[Order], status: str) -> list[Order]:
    return [o for o in orders if o.status == status]


def cancelable(order: Order) -> bool:
    """Open orders, and orders whose state the exchange did not report."""
    return order.status in (None, "open")


async def cancel_sequentially(symbol: str, orders: list[Order], cancel: CancelCall) -> CancelAllResult:
    """Cancel ``orders`` one by one, in list order.

    The first failing cancel stops the run. The raised CancelAllOrdersError
    carries a result where earlier orders are ``canceled``, the failing one
    ``failed`` and the remaining ones ``not_attempted``.
    """
    steps: list[CancelStep] = []
    for index, order in enumerate(orders):
        try:
            response = await cancel(order.id, symbol)
        except Exception as exc:
            steps.append(CancelStep(order.id, FAILED, error=exc))
            steps.extend(CancelStep(o.id, NOT_ATTEMPTED) for o in orders[index + 1 :])
            result = CancelAllResult(symbol, tuple(steps))
            logger.error(
                "cancel_all_orders %s stopped at order %s: %s (%d canceled, %d not attempted)",
                symbol,
                order.id,
                exc,
                len(result.canceled),
                len(result.not_attempted),
            )
            raise CancelAllOrdersError(
                f"cancel_all_orders {symbol} failed on order {order.id}: {exc}", result
            ) from exc
        steps.append(CancelStep(order.id, CANCELED, response=response))

    logger.info("cancel_all_orders %s canceled %d orders", symbol, len(steps))
    return CancelAllResult(symbol, tuple(steps))


def static_trading_fee(market: Market, fees: FeeSettings, registry: MarketRegistry | None = None) -> TradingFee:
    """Project the configured maker/taker rates onto one market.

    No fee-schedule endpoint is queried; the result has ``live=False`` and is
    the same for every symbol.
    """
    raw = {"symbol": market.id, "maker": fees.maker, "taker": fees.taker}
    fee = normalize_trading_fee(raw, registry, live=False)
    if fee.symbol != market.symbol:
        fee = TradingFee(market.symbol, fee.maker, fee.taker, fee.live, fee.info)
    return fee


def synthesized_status(now_ms: int) -> ExchangeStatus:
    """An always-ok status stamped with the local clock.

    This is not a liveness probe: the exchange exposes no health endpoint.
    """
    return ExchangeStatus(status="ok", updated=now_ms, synthesized=True)
