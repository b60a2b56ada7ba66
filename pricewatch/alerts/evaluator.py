# pricewatch/alerts/evaluator.py
import asyncio
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from pricewatch.logger import logger
from pricewatch.models import Alert, Quote, utc_now
from pricewatch.notifications.base import Notifier
from pricewatch.notifications.messages import build_alert_message
from pricewatch.price_services.multiprovider_service import MultiProviderPriceService
from pricewatch.storage.alert_store import AlertStore


@dataclass
class CycleReport:
    """Counters for one evaluation cycle, logged by the worker."""
    alerts_seen: int = 0
    symbols: int = 0
    unavailable_symbols: List[str] = field(default_factory=list)
    expired: int = 0
    triggered: int = 0
    notified: int = 0
    notify_failures: int = 0
    marked_sent: int = 0
    errors: int = 0

    def summary(self) -> str:
        return (
            f"alerts={self.alerts_seen} symbols={self.symbols} "
            f"unavailable={len(self.unavailable_symbols)} expired={self.expired} "
            f"triggered={self.triggered} notified={self.notified} "
            f"notify_failures={self.notify_failures} marked_sent={self.marked_sent} "
            f"errors={self.errors}"
        )


class AlertEvaluator:
    """
    Evaluates one batch of pending alerts against fresh prices.

    Every distinct symbol is priced exactly once per cycle and the resulting
    Quote is shared by all alerts on that symbol. Lookups for different
    symbols run concurrently, at most `max_concurrency` at a time. Alerts
    are then processed one by one; a failure on one alert is logged and the
    rest of the batch continues.
    """

    def __init__(
        self,
        price_service: MultiProviderPriceService,
        store: AlertStore,
        notifier: Notifier,
        max_concurrency: int = 4,
        mark_sent_on_notify_failure: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.price_service = price_service
        self.store = store
        self.notifier = notifier
        self.max_concurrency = max(1, max_concurrency)
        self.mark_sent_on_notify_failure = mark_sent_on_notify_failure
        self.clock = clock
        # Alerts this process already consumed; guards against re-firing when
        # the store write failed or is skipped (dry run)
        self._fired: Set[str] = set()

    @staticmethod
    def group_by_symbol(alerts: Sequence[Alert]) -> Dict[str, List[Alert]]:
        groups: Dict[str, List[Alert]] = {}
        for alert in alerts:
            if not alert.is_candidate or not alert.is_actionable:
                continue
            symbol = alert.normalized_symbol
            if not symbol:
                logger.warning(f"[Evaluator] Alert {alert.id} has no symbol; ignoring")
                continue
            groups.setdefault(symbol, []).append(alert)
        return groups

    async def run_cycle(self, alerts: Sequence[Alert]) -> CycleReport:
        report = CycleReport(alerts_seen=len(alerts))
        # Forget ids the store no longer lists
        self._fired &= {a.id for a in alerts}
        groups = self.group_by_symbol([a for a in alerts if a.id not in self._fired])
        report.symbols = len(groups)

        if not groups:
            logger.info("[Evaluator] No alerts to process")
            return report

        quotes = await self._fetch_quotes(list(groups))
        now = self.clock()

        for symbol, group in groups.items():
            quote = quotes.get(symbol)
            if quote is None:
                report.unavailable_symbols.append(symbol)
                logger.warning(f"[Evaluator] No price for {symbol}; skipping {len(group)} alert(s) this cycle")
                continue

            logger.info(f"[Evaluator] {symbol}: {quote.price_usd} USD via {quote.source}")
            for alert in group:
                try:
                    await self._process_alert(alert, quote, now, report)
                except Exception as e:
                    report.errors += 1
                    logger.error(f"[Evaluator] Alert {alert.id} on {symbol} failed: {e}")

        return report

    async def _fetch_quotes(self, symbols: List[str]) -> Dict[str, Optional[Quote]]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch_one(symbol: str) -> Tuple[Optional[Quote], Counter]:
            async with semaphore:
                try:
                    return await self.price_service.lookup(symbol)
                except Exception as e:
                    logger.error(f"[Evaluator] Price lookup for {symbol} raised: {e}")
                    return None, Counter()

        results = await asyncio.gather(*(fetch_one(s) for s in symbols))
        quotes = {}
        for symbol, (quote, failed) in zip(symbols, results):
            self.price_service.record_failures(failed)
            quotes[symbol] = quote
        return quotes

    async def _process_alert(self, alert: Alert, quote: Quote, now: datetime, report: CycleReport) -> None:
        if alert.is_expired(now):
            report.expired += 1
            logger.debug(f"[Evaluator] Alert {alert.id} expired at {alert.expiry}; skipping")
            return

        trigger = alert.evaluate(quote.price_usd)
        if trigger is None:
            return

        report.triggered += 1
        logger.info(f"🔥 [Evaluator] {trigger.value} on {quote.symbol} at {quote.price_usd} for {alert.recipient}")

        message = build_alert_message(trigger, quote.price_usd, quote.symbol)
        try:
            delivered = await self.notifier.send(
                alert.recipient, message.subject, message.text_body, html_body=message.html_body
            )
        except Exception as e:
            delivered = False
            logger.error(f"[Evaluator] Notifier raised for alert {alert.id}: {e}")

        if delivered:
            report.notified += 1
        else:
            report.notify_failures += 1
            if not self.mark_sent_on_notify_failure:
                logger.warning(f"[Evaluator] Notification for alert {alert.id} failed; leaving it pending")
                return
            logger.warning(f"[Evaluator] Notification for alert {alert.id} failed; consuming it anyway")

        self._fired.add(alert.id)
        if await self.store.mark_sent(alert.id):
            report.marked_sent += 1
