# pricewatch/price_services/coincap_service.py
from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field

from pricewatch.symbols.symbol_resolver import ProviderKind
from .price_service import HttpPriceService

COINCAP_API_URL = "https://api.coincap.io"


class CoinCapAssetData(BaseModel):
    id: str
    priceUsd: float = Field(allow_inf_nan=False)


class CoinCapAsset(BaseModel):
    """GET /v2/assets/bitcoin -> {"data": {"id": "bitcoin", "priceUsd": "50000.1234", ...}, "timestamp": ...}"""
    data: CoinCapAssetData


class CoinCapPriceService(HttpPriceService):
    kind = ProviderKind.COINCAP
    label = "CoinCap"
    base_url = COINCAP_API_URL
    response_model = CoinCapAsset

    def _build_request(self, identifier: str) -> Tuple[str, Dict[str, Any]]:
        return f"{self.base_url}/v2/assets/{identifier}", {}

    def _extract_price(self, parsed: CoinCapAsset) -> float:
        return parsed.data.priceUsd
