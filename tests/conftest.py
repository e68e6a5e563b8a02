"""Pytest configuration and fixtures."""

import copy
from urllib.parse import parse_qs, urlsplit

import pytest

from gooplex.errors import NetworkError
from gooplex.exchanges.gooplex import GooplexAdapter
from gooplex.settings import AdapterSettings, Credentials


class FakeTransport:
    """Transport double answering from a ``"METHOD /path"`` route table."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []
        self.closed = False

    @staticmethod
    def route_of(request):
        return f"{request.method} {urlsplit(request.url).path}"

    async def send(self, request):
        self.requests.append(request)
        key = self.route_of(request)
        if key not in self.routes:
            raise NetworkError(f"unexpected request {key}", status=404)
        handler = self.routes[key]
        if isinstance(handler, BaseException):
            raise handler
        if callable(handler):
            return handler(request)
        return copy.deepcopy(handler)

    async def close(self):
        self.closed = True

    def calls(self, key):
        return [r for r in self.requests if self.route_of(r) == key]


def query_of(request):
    """Decoded query string of a request, single values unwrapped."""
    parsed = parse_qs(urlsplit(request.url).query)
    return {k: v[0] if len(v) == 1 else v for k, v in parsed.items()}


@pytest.fixture
def api_key():
    """Test API key."""
    return "test_api_key_123456"


@pytest.fixture
def api_secret():
    """Test API secret."""
    return "test_api_secret_789012"


@pytest.fixture
def settings(api_key, api_secret):
    """Settings with credentials and default fees."""
    return AdapterSettings(credentials=Credentials(api_key=api_key, secret=api_secret))


@pytest.fixture
def clock():
    """Fixed millisecond clock."""
    return lambda: 1700000000000


@pytest.fixture
def sample_symbols_response():
    """Gooplex common/symbols response."""
    return {
        "code": 0,
        "msg": "Success",
        "timestamp": 1700000000000,
        "data": {
            "list": [
                {
                    "symbol": "BTC_USDT",
                    "baseAsset": "BTC",
                    "quoteAsset": "USDT",
                    "basePrecision": 6,
                    "quotePrecision": 2,
                    "status": "TRADING",
                },
                {
                    "symbol": "ETH_BTC",
                    "baseAsset": "ETH",
                    "quoteAsset": "BTC",
                    "basePrecision": 3,
                    "quotePrecision": 6,
                    "status": "TRADING",
                },
            ]
        },
    }


@pytest.fixture
def transport(sample_symbols_response):
    """Fake transport that already knows the market list."""
    return FakeTransport({"GET /open/v1/common/symbols": sample_symbols_response})


@pytest.fixture
def adapter(settings, transport, clock):
    """Gooplex adapter wired to the fake transport."""
    return GooplexAdapter(settings, transport=transport, clock=clock)


@pytest.fixture
def sample_ticker():
    """Binance ticker/24hr entry."""
    return {
        "symbol": "BTCUSDT",
        "priceChange": "120.50",
        "priceChangePercent": "0.322",
        "weightedAvgPrice": "37512.11",
        "prevClosePrice": "37400.00",
        "lastPrice": "37520.50",
        "lastQty": "0.01",
        "bidPrice": "37520.40",
        "bidQty": "1.2",
        "askPrice": "37520.60",
        "askQty": "0.8",
        "openPrice": "37400.00",
        "highPrice": "37800.00",
        "lowPrice": "37100.00",
        "volume": "1520.5",
        "quoteVolume": "57000000.1",
        "openTime": 1601469986932,
        "closeTime": 1601556386932,
        "firstId": 196098772,
        "lastId": 196186315,
        "count": 87544,
    }
