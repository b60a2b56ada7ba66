# pricewatch/price_services/price_service.py
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple, Type

import httpx
from pydantic import BaseModel, ValidationError

from pricewatch.errors import ProviderError, SymbolNotListed
from pricewatch.logger import logger
from pricewatch.models import Quote, normalize_symbol
from pricewatch.symbols.symbol_resolver import ProviderKind, SymbolResolver

# Sent on every provider call: thresholds are compared against this price,
# so an intermediary must never answer from cache.
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, max-age=0",
    "Pragma": "no-cache",
    "Accept": "application/json",
}


class PriceService(ABC):
    """One price provider. get_quote either returns a fresh Quote or raises."""

    name: str = "unknown"

    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote:
        """
        Raises:
            SymbolNotListed: the provider has no identifier for the symbol.
            ProviderError: anything else went wrong.
        """


class HttpPriceService(PriceService):
    """
    Shared request/parse pipeline for JSON-over-HTTPS providers.

    Subclasses declare the provider kind, the pydantic model describing the
    response, how to build the request for a resolved identifier, and where
    the price lives in the parsed model.
    """

    kind: ProviderKind
    label: str = "Provider"
    base_url: str = ""
    response_model: Type[BaseModel]
    # Query parameter carrying a per-request nonce; None for providers that
    # reject unknown parameters (the no-cache headers still apply).
    cache_bust_param: Optional[str] = "_"

    def __init__(
        self,
        client: httpx.AsyncClient,
        resolver: SymbolResolver,
        timeout: float = 5.0,
        base_url: Optional[str] = None,
    ):
        self.client = client
        self.resolver = resolver
        self.timeout = timeout
        if base_url:
            self.base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return self.kind.value

    @abstractmethod
    def _build_request(self, identifier: str) -> Tuple[str, Dict[str, Any]]:
        """Return (url, query params) for one identifier."""

    @abstractmethod
    def _extract_price(self, parsed: BaseModel) -> float:
        pass

    async def get_quote(self, symbol: str) -> Quote:
        nominal = normalize_symbol(symbol)
        identifier = self.resolver.resolve(nominal, self.kind)
        if identifier is None:
            raise SymbolNotListed(self.name, nominal)

        url, params = self._build_request(identifier)
        if self.cache_bust_param:
            params = {**params, self.cache_bust_param: uuid.uuid4().hex}

        try:
            response = await self.client.get(
                url, params=params, headers=NO_CACHE_HEADERS, timeout=self.timeout
            )
        except httpx.TimeoutException:
            raise ProviderError(self.name, nominal, f"timed out after {self.timeout}s")
        except httpx.RequestError as e:
            raise ProviderError(self.name, nominal, f"request error: {e}")

        logger.debug(f"[{self.label}] HTTP {response.status_code} for {identifier}")
        if response.status_code != 200:
            raise ProviderError(
                self.name, nominal, f"HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            payload = response.json()
        except ValueError:
            raise ProviderError(self.name, nominal, "response is not JSON")

        try:
            parsed = self.response_model.model_validate(payload)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise ProviderError(self.name, nominal, f"unexpected response shape ({fields})")

        price = self._extract_price(parsed)
        if price <= 0:
            raise ProviderError(self.name, nominal, f"non-positive price {price}")

        logger.info(f"[{self.label}] Retrieved price for {nominal} ({identifier}): {price}")
        return Quote(symbol=nominal, price_usd=price, source=self.name)
