# pricewatch/models.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class AlertStatus(str, Enum):
    """Stored alert lifecycle. Only PENDING -> SENT is ever written."""
    PENDING = "PENDING"
    SENT = "SENT"


class TriggerType(str, Enum):
    DOWNWARD_BREACH = "downward_breach"
    UPWARD_BREACH = "upward_breach"


def normalize_symbol(symbol: str) -> str:
    return (symbol or "").strip().upper()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Alert:
    """A stored request to be notified when a symbol crosses a threshold."""
    id: str
    recipient: str
    symbol: str
    min_price: float = 0.0
    max_price: float = 0.0
    active: bool = True
    status: AlertStatus = AlertStatus.PENDING
    expiry: Optional[datetime] = None  # None = never expires

    @property
    def normalized_symbol(self) -> str:
        return normalize_symbol(self.symbol)

    @property
    def is_candidate(self) -> bool:
        return self.active and self.status == AlertStatus.PENDING

    @property
    def is_actionable(self) -> bool:
        """Both bounds disabled means the alert can never trigger."""
        return self.min_price > 0 or self.max_price > 0

    def is_expired(self, now: datetime) -> bool:
        if self.expiry is None:
            return False
        expiry = self.expiry
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return expiry < now

    def evaluate(self, price: float) -> Optional[TriggerType]:
        """
        Returns the breach this price causes, if any.
        The downward check runs first, so a degenerate alert with
        min_price >= max_price resolves to DOWNWARD_BREACH when both hold.
        """
        if self.min_price > 0 and price <= self.min_price:
            return TriggerType.DOWNWARD_BREACH
        if self.max_price > 0 and price >= self.max_price:
            return TriggerType.UPWARD_BREACH
        return None


@dataclass(frozen=True)
class Quote:
    """Price observation for one symbol, valid only within the cycle that produced it."""
    symbol: str
    price_usd: float
    source: str
    observed_at: datetime = field(default_factory=utc_now)
