#!/usr/bin/env python3
"""
Price alert worker entry point.

Loads .env, validates configuration (missing mandatory values stop the
process before the polling loop starts), then serves the liveness endpoint
with uvicorn while the worker polls in the app's lifespan.

Usage:
    pricewatch                # run the worker
    pricewatch --dry-run      # print notifications, skip store writes
    pricewatch --once         # run a single cycle and exit
"""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

import uvicorn
from dotenv import load_dotenv

from pricewatch.app import create_app
from pricewatch.config.settings import WorkerSettings, load_settings
from pricewatch.errors import ConfigError
from pricewatch.logger import logger, setup_logger
from pricewatch.worker.factory import build_worker, create_http_client


async def run_single_cycle(settings: WorkerSettings) -> bool:
    async with create_http_client(settings) as client:
        worker = build_worker(settings, client)
        report = await worker.run_once()
    return report is not None


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Price threshold alert worker")
    parser.add_argument("--dry-run", action="store_true", help="Print notifications and skip store writes")
    parser.add_argument("--once", action="store_true", help="Run one cycle and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    load_dotenv()
    environ = dict(os.environ)
    if args.dry_run:
        environ["DRY_RUN"] = "true"
    if args.debug:
        environ["DEBUG"] = "true"

    setup_logger(debug=args.debug)
    try:
        settings = load_settings(environ)
    except ConfigError as e:
        logger.critical(f"❌ {e}")
        return 1
    setup_logger(debug=settings.debug)

    if args.once:
        return 0 if asyncio.run(run_single_cycle(settings)) else 1

    logger.info(f"✅ Configuration loaded; liveness endpoint on port {settings.port}")
    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=settings.port,
        log_level="debug" if settings.debug else "warning",
    )
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
