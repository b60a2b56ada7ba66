# pricewatch/worker/scheduler.py
import asyncio
import time
from enum import Enum
from typing import Optional

from pricewatch.alerts.evaluator import AlertEvaluator, CycleReport
from pricewatch.errors import StoreError
from pricewatch.logger import logger
from pricewatch.storage.alert_store import AlertStore


class WorkerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class AlertWorker:
    """
    Drives one evaluation cycle per tick.

    Cycles never overlap: the next tick is scheduled `interval` seconds after
    the previous one started, or immediately if that cycle overran. Any
    exception inside a cycle is logged and counted as a failed cycle; the
    loop always returns to IDLE. stop() is honoured between cycles only.
    """

    def __init__(self, store: AlertStore, evaluator: AlertEvaluator, interval: float = 10.0):
        self.store = store
        self.evaluator = evaluator
        self.interval = interval
        self.state = WorkerState.IDLE
        self.cycles = 0
        self.failed_cycles = 0
        self.last_report: Optional[CycleReport] = None
        self._stop = asyncio.Event()

    async def run_once(self) -> Optional[CycleReport]:
        """Run a single cycle. Returns its report, or None if the cycle failed."""
        self.state = WorkerState.RUNNING
        started = time.monotonic()
        logger.info("⏳ [Worker] Scanning pending alerts...")
        try:
            alerts = await self.store.list_pending()
            report = await self.evaluator.run_cycle(alerts)
            self.last_report = report
            logger.info(
                f"[Worker] Cycle {self.cycles + 1} done in {time.monotonic() - started:.2f}s: {report.summary()}"
            )
            return report
        except StoreError as e:
            self.failed_cycles += 1
            logger.error(f"[Worker] Cycle {self.cycles + 1} failed, alert store unavailable: {e}")
            return None
        except Exception as e:
            self.failed_cycles += 1
            logger.exception(f"[Worker] Cycle {self.cycles + 1} failed: {e}")
            return None
        finally:
            self.cycles += 1
            self.state = WorkerState.IDLE

    async def run(self, max_cycles: Optional[int] = None) -> None:
        logger.info(f"[Worker] Starting, polling every {self.interval}s")
        loop = asyncio.get_running_loop()

        while not self._stop.is_set():
            started = loop.time()
            await self.run_once()

            if max_cycles is not None and self.cycles >= max_cycles:
                break

            delay = max(0.0, self.interval - (loop.time() - started))
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass

        logger.info(f"[Worker] Stopped after {self.cycles} cycle(s), {self.failed_cycles} failed")

    def stop(self) -> None:
        """Request shutdown; a running cycle finishes first."""
        self._stop.set()

    @property
    def is_stopping(self) -> bool:
        return self._stop.is_set()
