"""Status code translation for transactions and orders."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

DEPOSIT = "deposit"
WITHDRAWAL = "withdrawal"

# Deposit and withdrawal codes live in separate code spaces: "1" is ok for a
# deposit but canceled for a withdrawal.
TRANSACTION_STATUSES: dict[str, dict[str, str]] = {
    DEPOSIT: {
        "0": "pending",
        "1": "ok",
    },
    WITHDRAWAL: {
        "0": "pending",  # email sent
        "1": "canceled",
        "2": "pending",  # awaiting approval
        "3": "failed",  # rejected
        "4": "pending",  # processing
        "5": "failed",
        "6": "ok",  # completed
    },
}

ORDER_STATUSES: dict[str, str] = {
    "0": "open",
    "1": "open",
    "2": "closed",
    "3": "canceled",
    "4": "canceled",
    "5": "rejected",
    "6": "expired",
    "NEW": "open",
    "PARTIALLY_FILLED": "open",
    "FILLED": "closed",
    "CANCELED": "canceled",
    "PENDING_CANCEL": "canceled",
    "REJECTED": "rejected",
    "EXPIRED": "expired",
}


def status_for(raw_status: Any, record_type: str | None) -> Any:
    """Translate a deposit or withdrawal status code.

    Codes with no entry for ``record_type`` are returned unchanged so that
    new exchange codes stay visible to the caller.
    """
    if raw_status is None:
        return None
    statuses = TRANSACTION_STATUSES.get(record_type or "", {})
    key = str(raw_status)
    if key in statuses:
        return statuses[key]
    logger.debug("Passing through unmapped %s status %r", record_type, raw_status)
    return raw_status


def order_status(raw_status: Any) -> str | None:
    if raw_status is None:
        return None
    status = ORDER_STATUSES.get(str(raw_status).upper())
    if status is None:
        logger.warning("Unrecognized order status %r", raw_status)
    return status


ORDER_SIDES: dict[str, int] = {
    "buy": 0,
    "sell": 1,
}

ORDER_TYPES: dict[str, int] = {
    "limit": 1,
    "market": 2,
    "stop_loss": 3,
    "stop_loss_limit": 4,
    "take_profit": 5,
    "take_profit_limit": 6,
    "limit_maker": 7,
}


def _code_name(table: dict[str, int], raw: Any) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, str) and not raw.isdigit():
        name = raw.lower()
        return name if name in table else None
    try:
        code = int(raw)
    except (TypeError, ValueError):
        return None
    for name, value in table.items():
        if value == code:
            return name
    return None


def side_name(raw: Any) -> str | None:
    """Canonical side for a numeric code (0/1) or a ``BUY``/``SELL`` string."""
    return _code_name(ORDER_SIDES, raw)


def type_name(raw: Any) -> str | None:
    return _code_name(ORDER_TYPES, raw)
