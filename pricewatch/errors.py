# pricewatch/errors.py
from typing import Iterable


class PriceWatchError(Exception):
    """Base class for every error raised by the worker."""


class ConfigError(PriceWatchError):
    """Mandatory configuration missing at startup. Fatal."""

    def __init__(self, missing: Iterable[str]):
        self.missing = sorted(missing)
        super().__init__(f"Missing required configuration: {', '.join(self.missing)}")


class ProviderError(PriceWatchError):
    """One price provider failed for one symbol (network, timeout, parse, bad price)."""

    def __init__(self, provider: str, symbol: str, reason: str):
        self.provider = provider
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"[{provider}] {symbol}: {reason}")


class SymbolUnavailable(PriceWatchError):
    """Every provider in the chain failed or was skipped for a symbol."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"No price available for {symbol}")


class StoreError(PriceWatchError):
    """The alert store rejected or failed a list/update call."""


class NotifyError(PriceWatchError):
    """The notification transport failed to deliver a message."""


class SymbolNotListed(PriceWatchError):
    """A provider has no identifier for a symbol; the provider is skipped, not failed."""

    def __init__(self, provider: str, symbol: str):
        self.provider = provider
        self.symbol = symbol
        super().__init__(f"[{provider}] {symbol} has no identifier for this provider")
