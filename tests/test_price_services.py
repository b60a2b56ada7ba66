"""Tests for the HTTP price provider adapters, driven through httpx.MockTransport."""

import asyncio

import httpx
import pytest

from pricewatch.errors import ProviderError, SymbolNotListed
from pricewatch.price_services.binance_service import BinancePriceService
from pricewatch.price_services.coinbase_service import CoinbasePriceService
from pricewatch.price_services.coincap_service import CoinCapPriceService
from pricewatch.symbols.symbol_resolver import SymbolResolver


def _quote(service_cls, handler, symbol="BTCUSDT"):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            service = service_cls(client, SymbolResolver(), timeout=2.0)
            return await service.get_quote(symbol)
    return asyncio.run(run())


class TestBinance:

    def test_success(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"symbol": "BTCUSDT", "price": "50000.00"})

        quote = _quote(BinancePriceService, handler)
        assert quote.price_usd == 50000.0
        assert quote.source == "binance"
        assert quote.symbol == "BTCUSDT"

        request = seen[0]
        assert request.url.host == "api.binance.us"
        assert request.url.path == "/api/v3/ticker/price"
        assert request.url.params["symbol"] == "BTCUSDT"
        # Binance rejects unread parameters, freshness comes from headers
        assert "_" not in request.url.params
        assert "no-cache" in request.headers["Cache-Control"]
        assert request.headers["Pragma"] == "no-cache"

    def test_missing_price_is_provider_error(self):
        handler = lambda request: httpx.Response(200, json={"symbol": "BTCUSDT"})
        with pytest.raises(ProviderError) as exc:
            _quote(BinancePriceService, handler)
        assert "price" in exc.value.reason

    def test_non_numeric_price_is_provider_error(self):
        handler = lambda request: httpx.Response(200, json={"symbol": "BTCUSDT", "price": "n/a"})
        with pytest.raises(ProviderError):
            _quote(BinancePriceService, handler)

    def test_zero_price_is_provider_error(self):
        handler = lambda request: httpx.Response(200, json={"symbol": "BTCUSDT", "price": "0"})
        with pytest.raises(ProviderError) as exc:
            _quote(BinancePriceService, handler)
        assert "non-positive" in exc.value.reason

    def test_http_error_status(self):
        handler = lambda request: httpx.Response(400, json={"code": -1121, "msg": "Invalid symbol."})
        with pytest.raises(ProviderError) as exc:
            _quote(BinancePriceService, handler)
        assert "HTTP 400" in exc.value.reason

    def test_non_json_body(self):
        handler = lambda request: httpx.Response(200, text="<html>gateway</html>")
        with pytest.raises(ProviderError):
            _quote(BinancePriceService, handler)

    def test_timeout_is_provider_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ProviderError) as exc:
            _quote(BinancePriceService, handler)
        assert "timed out" in exc.value.reason

    def test_connection_error_is_provider_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProviderError):
            _quote(BinancePriceService, handler)

    def test_unlisted_symbol_skips_without_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(SymbolNotListed):
            _quote(BinancePriceService, handler, symbol="XAUUSD")


class TestCoinbase:

    def test_reads_data_amount(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"amount": "3012.55", "base": "ETH", "currency": "USD"}})

        quote = _quote(CoinbasePriceService, handler, symbol="ETHUSDT")
        assert quote.price_usd == 3012.55
        assert quote.source == "coinbase"
        assert seen[0].url.path == "/v2/prices/ETH-USD/spot"

    def test_every_request_is_unique(self):
        nonces = []

        def handler(request):
            nonces.append(request.url.params["_"])
            return httpx.Response(200, json={"data": {"amount": "1", "base": "BTC", "currency": "USD"}})

        _quote(CoinbasePriceService, handler)
        _quote(CoinbasePriceService, handler)
        assert len(set(nonces)) == 2

    def test_missing_data_object(self):
        handler = lambda request: httpx.Response(200, json={"errors": [{"id": "not_found"}]})
        with pytest.raises(ProviderError):
            _quote(CoinbasePriceService, handler)


class TestCoinCap:

    def test_reads_data_price_usd(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"id": "bitcoin", "priceUsd": "49999.1234"}, "timestamp": 1})

        quote = _quote(CoinCapPriceService, handler)
        assert quote.price_usd == pytest.approx(49999.1234)
        assert seen[0].url.path == "/v2/assets/bitcoin"

    def test_null_price_is_provider_error(self):
        handler = lambda request: httpx.Response(200, json={"data": {"id": "bitcoin", "priceUsd": None}})
        with pytest.raises(ProviderError):
            _quote(CoinCapPriceService, handler)

    def test_asset_without_slug_is_not_listed(self):
        handler = lambda request: httpx.Response(500)
        with pytest.raises(SymbolNotListed):
            _quote(CoinCapPriceService, handler, symbol="FOOUSDT")
