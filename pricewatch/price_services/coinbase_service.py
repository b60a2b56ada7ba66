# pricewatch/price_services/coinbase_service.py
from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field

from pricewatch.symbols.symbol_resolver import ProviderKind
from .price_service import HttpPriceService

COINBASE_API_URL = "https://api.coinbase.com"


class CoinbaseSpotData(BaseModel):
    amount: float = Field(allow_inf_nan=False)
    base: str
    currency: str


class CoinbaseSpot(BaseModel):
    """GET /v2/prices/BTC-USD/spot -> {"data": {"amount": "50000.01", "base": "BTC", "currency": "USD"}}"""
    data: CoinbaseSpotData


class CoinbasePriceService(HttpPriceService):
    kind = ProviderKind.COINBASE
    label = "Coinbase"
    base_url = COINBASE_API_URL
    response_model = CoinbaseSpot

    def _build_request(self, identifier: str) -> Tuple[str, Dict[str, Any]]:
        return f"{self.base_url}/v2/prices/{identifier}/spot", {}

    def _extract_price(self, parsed: CoinbaseSpot) -> float:
        return parsed.data.amount
