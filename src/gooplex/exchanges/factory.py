"""Factory for creating exchange adapter instances."""

from __future__ import annotations

from typing import Any, Callable, Type

from ..settings import AdapterSettings, Credentials
from .binance import BinanceMarketData
from .gooplex import GooplexAdapter
from .signer import now_ms
from .transport import Transport


EXCHANGE_ADAPTERS: dict[str, Type[GooplexAdapter] | Type[BinanceMarketData]] = {
    "gooplex": GooplexAdapter,
    "binance": BinanceMarketData,
}


def create_exchange_adapter(
    exchange: str | None = None,
    settings: AdapterSettings | None = None,
    *,
    api_key: str | None = None,
    secret: str | None = None,
    transport: Transport | None = None,
    clock: Callable[[], int] = now_ms,
    **overrides: Any,
) -> GooplexAdapter | BinanceMarketData:
    """Create an exchange adapter instance.

    Args:
        exchange: Exchange name (gooplex or binance); defaults to settings.exchange
        settings: Base settings; defaults are used when omitted
        api_key: API key, replacing the configured one
        secret: API secret, replacing the configured one
        transport: Transport to use instead of a new HttpTransport
        clock: Millisecond clock used for nonces and synthesized status
        **overrides: Top-level settings fields to replace (recv_window, fees, ...)

    Returns:
        Configured adapter

    Raises:
        ValueError: If exchange is not supported
    """
    settings = settings or AdapterSettings()
    exchange_lower = (exchange or settings.exchange).lower()

    if exchange_lower not in EXCHANGE_ADAPTERS:
        supported = ", ".join(EXCHANGE_ADAPTERS.keys())
        raise ValueError(
            f"Unsupported exchange: {exchange}. Supported exchanges: {supported}"
        )

    update: dict[str, Any] = {"exchange": exchange_lower, **overrides}
    if api_key is not None or secret is not None:
        current = settings.credentials
        update["credentials"] = Credentials(
            api_key=api_key if api_key is not None else current.api_key,
            secret=secret if secret is not None else current.secret,
        )
    settings = AdapterSettings.model_validate({**settings.model_dump(), **update})

    adapter_class = EXCHANGE_ADAPTERS[exchange_lower]
    return adapter_class(settings, transport=transport, clock=clock)
