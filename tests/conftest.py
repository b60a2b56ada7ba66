"""
Shared fakes and factories for the worker tests.
"""

import asyncio
import dataclasses
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pytest

from pricewatch.errors import StoreError
from pricewatch.models import Alert, AlertStatus, Quote
from pricewatch.notifications.base import Notifier
from pricewatch.storage.alert_store import AlertStore

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def make_alert(
    alert_id: str = "a1",
    symbol: str = "BTCUSDT",
    min_price: float = 0.0,
    max_price: float = 0.0,
    recipient: str = "trader@example.com",
    expiry: Optional[datetime] = None,
    active: bool = True,
    status: AlertStatus = AlertStatus.PENDING,
) -> Alert:
    return Alert(
        id=alert_id,
        recipient=recipient,
        symbol=symbol,
        min_price=min_price,
        max_price=max_price,
        active=active,
        status=status,
        expiry=expiry if expiry is not None else NOW + timedelta(days=7),
    )


class FakePriceService:
    """
    Stands in for MultiProviderPriceService; counts lookups per symbol and
    tracks how many were in flight at once.
    """

    def __init__(self, prices: Dict[str, float], delay: float = 0.0):
        self.prices = dict(prices)
        self.delay = delay
        self.calls: Counter = Counter()
        self.failures: Counter = Counter()
        self.in_flight = 0
        self.peak_in_flight = 0

    async def lookup(self, symbol: str) -> Tuple[Optional[Quote], Counter]:
        self.calls[symbol] += 1
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1

        price = self.prices.get(symbol)
        if price is None:
            return None, Counter({"fake": 1})
        return Quote(symbol=symbol, price_usd=price, source="fake", observed_at=NOW), Counter()

    def record_failures(self, failed: Counter) -> None:
        self.failures.update(failed)


class FakeAlertStore(AlertStore):
    """In-memory alert table honouring the PENDING -> SENT transition."""

    def __init__(self, alerts: List[Alert], fail_on: Optional[set] = None):
        self.alerts: Dict[str, Alert] = {a.id: a for a in alerts}
        self.fail_on = fail_on or set()
        self.marked: List[str] = []
        self.list_calls = 0

    async def list_pending(self) -> List[Alert]:
        self.list_calls += 1
        return [a for a in self.alerts.values() if a.is_candidate]

    async def mark_sent(self, alert_id: str) -> bool:
        if alert_id in self.fail_on:
            raise StoreError(f"update for {alert_id} rejected")
        self.marked.append(alert_id)
        alert = self.alerts.get(alert_id)
        if alert is None:
            return False
        self.alerts[alert_id] = dataclasses.replace(alert, status=AlertStatus.SENT, active=False)
        return True


class FakeNotifier(Notifier):
    name = "fake"

    def __init__(self, succeed: bool = True, raise_error: bool = False):
        self.succeed = succeed
        self.raise_error = raise_error
        self.sent: List[dict] = []

    async def send(self, recipient, subject, body, html_body=None) -> bool:
        self.sent.append({"recipient": recipient, "subject": subject, "body": body})
        if self.raise_error:
            raise RuntimeError("smtp exploded")
        return self.succeed


@pytest.fixture
def notifier():
    return FakeNotifier()
