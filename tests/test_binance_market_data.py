"""Tests for the standalone Binance market-data surface."""

import pytest

from gooplex.errors import ArgumentsRequired, BadResponse, NotSupported
from gooplex.exchanges.binance import TIMEFRAMES, BinanceMarketData
from gooplex.settings import AdapterSettings
from tests.conftest import FakeTransport, query_of


@pytest.fixture
def exchange_info():
    """Binance exchangeInfo with one spot market."""
    return {
        "timezone": "UTC",
        "serverTime": 1700000000000,
        "symbols": [
            {
                "symbol": "BTCUSDT",
                "status": "TRADING",
                "baseAsset": "BTC",
                "baseAssetPrecision": 8,
                "quoteAsset": "USDT",
                "quoteAssetPrecision": 8,
                "isMarginTradingAllowed": True,
                "filters": [
                    {"filterType": "PRICE_FILTER", "minPrice": "0.01", "maxPrice": "1000000.00"},
                    {"filterType": "LOT_SIZE", "minQty": "0.00001", "maxQty": "9000.0"},
                    {"filterType": "MIN_NOTIONAL", "minNotional": "10.0"},
                ],
            },
        ],
    }


@pytest.fixture
def binance_transport(exchange_info):
    return FakeTransport({"GET /api/v3/exchangeInfo": exchange_info})


@pytest.fixture
def binance(binance_transport, clock):
    return BinanceMarketData(AdapterSettings(exchange="binance"), transport=binance_transport, clock=clock)


class TestBinanceMarkets:
    """Tests for market loading."""

    @pytest.mark.asyncio
    async def test_fetch_markets(self, binance):
        markets = await binance.fetch_markets()
        market = markets[0]
        assert market.symbol == "BTC/USDT"
        assert market.id == "BTCUSDT"
        assert market.lowercase_id == "btcusdt"
        assert market.active is True
        assert market.margin is True
        assert market.limits.amount.min == 0.00001
        assert market.limits.price.max == 1000000.0
        assert market.limits.cost.min == 10.0

    @pytest.mark.asyncio
    async def test_bad_exchange_info(self, binance, binance_transport):
        binance_transport.routes["GET /api/v3/exchangeInfo"] = {"code": -1}
        with pytest.raises(BadResponse):
            await binance.fetch_markets()

    @pytest.mark.asyncio
    async def test_fetch_time(self, binance, binance_transport):
        binance_transport.routes["GET /api/v3/time"] = {"serverTime": 1700000000999}
        assert await binance.fetch_time() == 1700000000999

    def test_name(self, binance):
        assert binance.name == "binance"


class TestBinanceMarketData:
    """Tests for tickers, klines, trades and depth."""

    @pytest.mark.asyncio
    async def test_fetch_order_book(self, binance, binance_transport):
        binance_transport.routes["GET /api/v3/depth"] = {
            "lastUpdateId": 1027024,
            "bids": [["4.00000000", "431.00000000"]],
            "asks": [["4.00000200", "12.00000000"]],
        }
        book = await binance.fetch_order_book("BTC/USDT", 100)
        assert query_of(binance_transport.calls("GET /api/v3/depth")[0]) == {"symbol": "BTCUSDT", "limit": "100"}
        assert book.bids == ((4.0, 431.0),)
        assert book.asks == ((4.000002, 12.0),)
        assert book.nonce == 1027024

    @pytest.mark.asyncio
    async def test_fetch_ticker(self, binance, binance_transport, sample_ticker):
        binance_transport.routes["GET /api/v3/ticker/24hr"] = sample_ticker
        ticker = await binance.fetch_ticker("BTC/USDT")
        assert ticker.symbol == "BTC/USDT"
        assert ticker.timestamp == 1601556386932
        assert ticker.bid == 37520.4
        assert ticker.ask_volume == 0.8
        assert ticker.close == ticker.last

    @pytest.mark.asyncio
    async def test_fetch_tickers_filtered(self, binance, binance_transport, sample_ticker):
        other = dict(sample_ticker, symbol="ETHBTC")
        binance_transport.routes["GET /api/v3/ticker/24hr"] = [sample_ticker, other]
        tickers = await binance.fetch_tickers(["BTC/USDT"])
        assert [t.symbol for t in tickers] == ["BTC/USDT"]

        everything = await binance.fetch_tickers()
        # unknown markets keep their raw id
        assert [t.symbol for t in everything] == ["BTC/USDT", "ETHBTC"]

    @pytest.mark.asyncio
    async def test_fetch_bids_asks(self, binance, binance_transport):
        binance_transport.routes["GET /api/v3/ticker/bookTicker"] = [
            {"symbol": "BTCUSDT", "bidPrice": "4.0", "bidQty": "431", "askPrice": "4.2", "askQty": "9"},
        ]
        tickers = await binance.fetch_bids_asks()
        assert tickers[0].bid == 4.0
        assert tickers[0].ask == 4.2
        assert tickers[0].last is None

    @pytest.mark.asyncio
    async def test_fetch_tickers_not_a_list(self, binance, binance_transport):
        binance_transport.routes["GET /api/v3/ticker/24hr"] = {"symbol": "BTCUSDT"}
        with pytest.raises(BadResponse):
            await binance.fetch_tickers()

    @pytest.mark.asyncio
    async def test_fetch_ohlcv(self, binance, binance_transport):
        binance_transport.routes["GET /api/v3/klines"] = [
            [1591478520000, "0.02501300", "0.02501800", "0.02500000", "0.02500000", "22.19000000",
             1591478579999, "0.55490906", 40, "10.92900000", "0.27336462", "0"],
            [1591478580000, "0.02499600", "0.02500900", "0.02499400", "0.02500300", "21.34700000",
             1591478639999, "0.53370468", 24, "7.53800000", "0.18850725", "0"],
        ]
        candles = await binance.fetch_ohlcv("BTC/USDT", "1m", limit=1)
        query = query_of(binance_transport.calls("GET /api/v3/klines")[0])
        assert query == {"symbol": "BTCUSDT", "interval": "1m", "limit": "1"}
        assert len(candles) == 1
        assert candles[0].timestamp == 1591478520000
        assert candles[0].open == 0.025013
        assert candles[0].volume == 22.19

    @pytest.mark.asyncio
    async def test_fetch_ohlcv_since(self, binance, binance_transport):
        binance_transport.routes["GET /api/v3/klines"] = [
            [1591478520000, "1", "1", "1", "1", "1"],
            [1591478580000, "2", "2", "2", "2", "2"],
        ]
        candles = await binance.fetch_ohlcv("BTC/USDT", since=1591478580000)
        assert [c.close for c in candles] == [2.0]

    @pytest.mark.asyncio
    async def test_unknown_timeframe(self, binance, binance_transport):
        assert "7m" not in TIMEFRAMES
        with pytest.raises(NotSupported):
            await binance.fetch_ohlcv("BTC/USDT", "7m")
        assert binance_transport.requests == []

    @pytest.mark.asyncio
    async def test_fetch_trades(self, binance, binance_transport):
        binance_transport.routes["GET /api/v3/trades"] = [
            {"id": 28457, "price": "4.00000100", "qty": "12.00000000", "quoteQty": "48.000012",
             "time": 1499865549590, "isBuyerMaker": True, "isBestMatch": True},
            {"id": 28458, "price": "4.00000200", "qty": "1.00000000", "quoteQty": "4.000002",
             "time": 1499865549600, "isBuyerMaker": False, "isBestMatch": True},
        ]
        trades = await binance.fetch_trades("BTC/USDT")
        assert [t.id for t in trades] == ["28457", "28458"]
        assert [t.side for t in trades] == ["sell", "buy"]
        assert [t.taker_or_maker for t in trades] == ["maker", "taker"]
        assert trades[0].symbol == "BTC/USDT"
        assert trades[0].cost == pytest.approx(48.000012)

    @pytest.mark.asyncio
    async def test_fetch_agg_trades(self, binance, binance_transport):
        binance_transport.routes["GET /api/v3/aggTrades"] = [
            {"a": 26129, "p": "0.01633102", "q": "4.70443515", "f": 27781, "l": 27781,
             "T": 1498793709153, "m": True, "M": True},
        ]
        trades = await binance.fetch_agg_trades("BTC/USDT", limit=1)
        assert query_of(binance_transport.calls("GET /api/v3/aggTrades")[0])["limit"] == "1"
        assert trades[0].trade_id == 26129
        assert trades[0].maker is True
        assert trades[0].timestamp == 1498793709153

    @pytest.mark.asyncio
    async def test_symbol_required(self, binance, binance_transport):
        with pytest.raises(ArgumentsRequired):
            await binance.fetch_order_book(None)
        with pytest.raises(ArgumentsRequired):
            await binance.fetch_agg_trades(None)
        assert binance_transport.requests == []

    @pytest.mark.asyncio
    async def test_close(self, binance, binance_transport):
        await binance.close()
        assert binance_transport.closed is True
