# pricewatch/notifications/console_notifier.py
from typing import Optional

from pricewatch.logger import logger
from .base import Notifier


class ConsoleNotifier(Notifier):
    """Dry-run channel: prints what would have been sent."""

    name = "console"

    def __init__(self):
        self.sent_count = 0

    async def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        html_body: Optional[str] = None,
    ) -> bool:
        self.sent_count += 1
        print("=" * 60)
        print(f"To:      {recipient}")
        print(f"Subject: {subject}")
        print("-" * 60)
        print(body)
        print("=" * 60)
        logger.info(f"[Console] DRY RUN notification #{self.sent_count} for {recipient}")
        return True
