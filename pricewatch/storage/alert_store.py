# pricewatch/storage/alert_store.py
from abc import ABC, abstractmethod
from typing import List

from pricewatch.models import Alert


class AlertStore(ABC):
    """Persistence for alerts. The worker only lists and consumes them."""

    @abstractmethod
    async def list_pending(self) -> List[Alert]:
        """All alerts with active=true and status=PENDING."""

    @abstractmethod
    async def mark_sent(self, alert_id: str) -> bool:
        """
        Set status=SENT, active=false.

        Returns False when the alert no longer exists (a no-op, not an error).
        Raises StoreError when the update itself fails.
        """
