# pricewatch/notifications/base.py
from abc import ABC, abstractmethod
from typing import Optional


class Notifier(ABC):
    """Delivery channel for triggered alerts."""

    name: str = "notifier"

    @abstractmethod
    async def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        html_body: Optional[str] = None,
    ) -> bool:
        """
        Deliver one message. Returns True on success, False on failure.
        Implementations log their own failures and never raise for delivery problems.
        """
