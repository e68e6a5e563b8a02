"""gooplex: canonical REST adapter for the Gooplex and Binance trading APIs."""

from .settings import AdapterSettings
from .exchanges import GooplexAdapter, BinanceMarketData, create_exchange_adapter

__all__ = [
    "AdapterSettings",
    "GooplexAdapter",
    "BinanceMarketData",
    "create_exchange_adapter",
]
