#!/usr/bin/env python3
"""
Look up symbols through the price provider chain and show which provider answered.

Does not touch the alert store. Useful when an alert never fires and the
logs say its symbol is unavailable.

Usage:
    python scripts/check_prices.py BTCUSDT ETHUSDT XAUUSD
    python scripts/check_prices.py SOLUSDT --providers coinbase,coincap
"""

import argparse
import asyncio

import httpx

from pricewatch.logger import setup_logger
from pricewatch.price_services.multiprovider_service import MultiProviderPriceService, build_price_services
from pricewatch.symbols.symbol_resolver import ProviderKind, SymbolResolver


async def check(symbols, provider_names, timeout, symbol_map=None):
    resolver = SymbolResolver.from_yaml(symbol_map) if symbol_map else SymbolResolver()
    async with httpx.AsyncClient(timeout=timeout) as client:
        chain = MultiProviderPriceService(
            build_price_services(provider_names, client, resolver, timeout=timeout),
            call_timeout=timeout,
        )
        for symbol in symbols:
            ids = {kind.value: resolver.resolve(symbol, kind) for kind in ProviderKind}
            print(f"\n{symbol}")
            print(f"  identifiers: {ids}")
            quote = await chain.fetch(symbol)
            if quote:
                print(f"  ✅ {quote.price_usd} USD from {quote.source}")
            else:
                print("  ❌ unavailable from every provider")
        if chain.failures:
            print(f"\nFailed attempts by provider: {dict(chain.failures)}")


def main():
    parser = argparse.ArgumentParser(description="Check symbol prices through the provider chain")
    parser.add_argument("symbols", nargs="+", help="Nominal symbols, e.g. BTCUSDT")
    parser.add_argument("--providers", default="binance,coinbase,coincap", help="Priority order")
    parser.add_argument("--timeout", type=float, default=5.0, help="Per provider timeout in seconds")
    parser.add_argument("--symbol-map", help="Optional YAML file with symbol overrides")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    setup_logger(debug=args.debug)
    names = [n.strip() for n in args.providers.split(",") if n.strip()]
    asyncio.run(check(args.symbols, names, args.timeout, args.symbol_map))


if __name__ == "__main__":
    main()
