# pricewatch/price_services/binance_service.py
from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field

from pricewatch.symbols.symbol_resolver import ProviderKind
from .price_service import HttpPriceService

BINANCE_API_URL = "https://api.binance.us"


class BinanceTicker(BaseModel):
    """GET /api/v3/ticker/price -> {"symbol": "BTCUSDT", "price": "50000.00"}"""
    symbol: str
    price: float = Field(allow_inf_nan=False)


class BinancePriceService(HttpPriceService):
    kind = ProviderKind.BINANCE
    label = "Binance"
    base_url = BINANCE_API_URL
    response_model = BinanceTicker
    # Binance answers -1104 when it receives a parameter it does not read
    cache_bust_param = None

    def _build_request(self, identifier: str) -> Tuple[str, Dict[str, Any]]:
        return f"{self.base_url}/api/v3/ticker/price", {"symbol": identifier}

    def _extract_price(self, parsed: BinanceTicker) -> float:
        return parsed.price
