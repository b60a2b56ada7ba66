# pricewatch/app.py
import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from pricewatch.config.settings import WorkerSettings
from pricewatch.logger import logger
from pricewatch.worker.factory import build_worker, create_http_client

LIVENESS_TEXT = "Price alert worker is running..."


def create_app(settings: Optional[WorkerSettings] = None) -> FastAPI:
    """
    Liveness app. With settings, its lifespan owns the shared HTTP client and
    runs the polling worker in the background; without, it only answers GET /.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings is None:
            yield
            return

        async with create_http_client(settings) as client:
            worker = build_worker(settings, client)
            app.state.worker = worker
            task = asyncio.create_task(worker.run(), name="pricewatch-worker")
            app.state.worker_task = task
            try:
                yield
            finally:
                logger.info("[App] Shutdown requested; waiting for the current cycle to finish")
                worker.stop()
                await task

    app = FastAPI(title="pricewatch", lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return LIVENESS_TEXT

    return app
