# pricewatch/price_services/multiprovider_service.py
import asyncio
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple, Type

import httpx

from pricewatch.errors import ProviderError, SymbolNotListed, SymbolUnavailable
from pricewatch.logger import logger
from pricewatch.models import Quote, normalize_symbol
from pricewatch.symbols.symbol_resolver import SymbolResolver
from .binance_service import BinancePriceService
from .coinbase_service import CoinbasePriceService
from .coincap_service import CoinCapPriceService
from .price_service import HttpPriceService, PriceService

PROVIDER_CLASSES: Dict[str, Type[HttpPriceService]] = {
    "binance": BinancePriceService,
    "coinbase": CoinbasePriceService,
    "coincap": CoinCapPriceService,
}


class MultiProviderPriceService(PriceService):
    """
    Ordered fallback over a list of PriceService providers.

    Providers are tried once each, in priority order; the first valid quote
    wins. A provider that fails, times out, or returns a bad price is
    counted as a failure and the next one is tried. A provider with no
    identifier for the symbol is skipped without counting as a failure.

    lookup() writes no shared state, so lookups for different symbols can
    run concurrently; callers fold the returned counts into `failures`
    with record_failures() once they are done.
    """

    name = "chain"

    def __init__(self, providers: List[PriceService], call_timeout: float = 5.0):
        if not providers:
            raise ValueError("At least one price provider is required")
        self.providers = list(providers)
        self.call_timeout = call_timeout
        self.failures: Counter = Counter()

    async def lookup(self, symbol: str) -> Tuple[Optional[Quote], Counter]:
        """Return (first successful Quote or None, failed attempts per provider)."""
        nominal = normalize_symbol(symbol)
        failed: Counter = Counter()
        for provider in self.providers:
            try:
                # Outer bound: httpx timeouts are per phase, not per call
                quote = await asyncio.wait_for(
                    provider.get_quote(nominal), timeout=self.call_timeout
                )
                return quote, failed
            except SymbolNotListed:
                logger.debug(f"[MultiProvider] {provider.name} has no listing for {nominal}; skipping")
            except asyncio.TimeoutError:
                failed[provider.name] += 1
                logger.warning(f"[MultiProvider] {provider.name} timed out for {nominal}; trying next")
            except ProviderError as e:
                failed[provider.name] += 1
                logger.warning(f"[MultiProvider] {e.provider} failed for {nominal}: {e.reason}")
            except Exception as e:
                failed[provider.name] += 1
                logger.exception(f"[MultiProvider] Unexpected error from {provider.name} for {nominal}: {e}")

        logger.error(f"[MultiProvider] All price providers failed for {nominal}")
        return None, failed

    def record_failures(self, failed: Counter) -> None:
        self.failures.update(failed)

    async def get_quote(self, symbol: str) -> Quote:
        """
        Raises:
            SymbolUnavailable: every provider failed or was skipped.
        """
        quote, failed = await self.lookup(symbol)
        self.record_failures(failed)
        if quote is None:
            raise SymbolUnavailable(normalize_symbol(symbol))
        return quote

    async def fetch(self, symbol: str) -> Optional[Quote]:
        """Return the first successful Quote, or None when every provider failed."""
        try:
            return await self.get_quote(symbol)
        except SymbolUnavailable:
            return None


def build_price_services(
    names: Iterable[str],
    client: httpx.AsyncClient,
    resolver: SymbolResolver,
    timeout: float = 5.0,
) -> List[PriceService]:
    providers: List[PriceService] = []
    for name in names:
        provider_cls = PROVIDER_CLASSES.get(name.lower())
        if provider_cls is None:
            raise ValueError(f"Unknown price provider: {name}")
        providers.append(provider_cls(client, resolver, timeout=timeout))
    return providers
