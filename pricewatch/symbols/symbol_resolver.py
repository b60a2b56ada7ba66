# pricewatch/symbols/symbol_resolver.py
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import yaml

from pricewatch.logger import logger
from pricewatch.models import normalize_symbol


class ProviderKind(str, Enum):
    BINANCE = "binance"
    COINBASE = "coinbase"
    COINCAP = "coincap"


# Longest first so "USDT" is stripped before "USD"
QUOTE_SUFFIXES = ("USDT", "USDC", "BUSD", "USD")

# CoinCap addresses assets by slug, not ticker
COINCAP_ASSET_IDS: Dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "BNB": "binance-coin",
    "SOL": "solana",
    "XRP": "xrp",
    "ADA": "cardano",
    "DOGE": "dogecoin",
    "DOT": "polkadot",
    "AVAX": "avalanche",
    "LINK": "chainlink",
    "LTC": "litecoin",
    "MATIC": "polygon",
    "TRX": "tron",
    "SHIB": "shiba-inu",
    "ATOM": "cosmos",
    "UNI": "uniswap",
    "BCH": "bitcoin-cash",
}

# Symbols with no integrated price feed. They resolve to nothing for every
# provider, so the chain reports them unavailable instead of inventing a price.
NO_DATA_SOURCE = frozenset({"XAUUSD", "XAUUSDT", "XAGUSD"})

# Per-symbol exceptions to the default rules. A None value means
# "this provider has no listing for the symbol".
DEFAULT_OVERRIDES: Dict[str, Dict[ProviderKind, Optional[str]]] = {
    "PAXGUSDT": {
        ProviderKind.COINBASE: None,
        ProviderKind.COINCAP: "pax-gold",
    },
}


def split_pair(symbol: str) -> str:
    """Return the base asset of a pair: 'BTCUSDT' -> 'BTC'."""
    for suffix in QUOTE_SUFFIXES:
        if symbol.endswith(suffix) and len(symbol) > len(suffix):
            return symbol[: -len(suffix)]
    return symbol


class SymbolResolver:
    """
    Maps a nominal pair such as 'BTCUSDT' to each provider's identifier.

    Lookup order: NO_DATA_SOURCE, then the override table, then the default
    entry for the provider:
        binance  -> the pair itself ('BTCUSDT')
        coinbase -> base asset priced in USD ('BTC-USD')
        coincap  -> asset slug from COINCAP_ASSET_IDS ('bitcoin'), else unresolved
    Pure and deterministic; no network access.
    """

    def __init__(
        self,
        overrides: Optional[Dict[str, Dict[ProviderKind, Optional[str]]]] = None,
        no_data_source: Iterable[str] = NO_DATA_SOURCE,
    ):
        self.overrides: Dict[str, Dict[ProviderKind, Optional[str]]] = {
            symbol: dict(entry) for symbol, entry in DEFAULT_OVERRIDES.items()
        }
        for symbol, entry in (overrides or {}).items():
            self.overrides.setdefault(normalize_symbol(symbol), {}).update(entry)
        self.no_data_source = frozenset(normalize_symbol(s) for s in no_data_source)

    def resolve(self, symbol: str, provider: Union[ProviderKind, str]) -> Optional[str]:
        kind = ProviderKind(provider)
        nominal = normalize_symbol(symbol)
        if not nominal or nominal in self.no_data_source:
            return None

        entry = self.overrides.get(nominal, {})
        if kind in entry:
            return entry[kind]

        return self._default_entry(nominal, kind)

    def resolve_batch(self, symbols: Iterable[str], provider: Union[ProviderKind, str]) -> Dict[str, Optional[str]]:
        return {symbol: self.resolve(symbol, provider) for symbol in symbols}

    def _default_entry(self, nominal: str, kind: ProviderKind) -> Optional[str]:
        if kind == ProviderKind.BINANCE:
            return nominal
        base = split_pair(nominal)
        if kind == ProviderKind.COINBASE:
            return f"{base}-USD"
        if kind == ProviderKind.COINCAP:
            return COINCAP_ASSET_IDS.get(base)
        return None

    @classmethod
    def from_yaml(cls, file_path: Union[str, Path]) -> "SymbolResolver":
        """
        Build a resolver with extra overrides read from YAML:

            overrides:
              WBTCUSDT: {coincap: wrapped-bitcoin, coinbase: WBTC-USD}
            no_data_source: [XAUUSD]
        """
        path = Path(file_path)
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}

        overrides: Dict[str, Dict[ProviderKind, Optional[str]]] = {}
        for symbol, entry in (raw.get("overrides") or {}).items():
            overrides[symbol] = {ProviderKind(k.lower()): v for k, v in (entry or {}).items()}

        no_data = set(NO_DATA_SOURCE) | {str(s) for s in raw.get("no_data_source") or []}
        logger.info(f"[SymbolResolver] Loaded {len(overrides)} overrides from {path}")
        return cls(overrides=overrides, no_data_source=no_data)
