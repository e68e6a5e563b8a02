"""Exchange adapters, normalizers and request signing."""

from .protocol import ExchangeAdapter, MarketDataAdapter
from .gooplex import GooplexAdapter, CAPABILITIES
from .binance import BinanceMarketData
from .factory import create_exchange_adapter, EXCHANGE_ADAPTERS
from .signer import Signer, SignedRequest, now_ms
from .status import status_for
from .transport import HttpTransport, Transport

__all__ = [
    "ExchangeAdapter",
    "MarketDataAdapter",
    "GooplexAdapter",
    "CAPABILITIES",
    "BinanceMarketData",
    "create_exchange_adapter",
    "EXCHANGE_ADAPTERS",
    "Signer",
    "SignedRequest",
    "now_ms",
    "status_for",
    "HttpTransport",
    "Transport",
]
