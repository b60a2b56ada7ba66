# pricewatch/notifications/messages.py
from dataclasses import dataclass
from html import escape
from typing import Optional

from pricewatch.models import TriggerType

TRIGGER_HEADLINES = {
    TriggerType.DOWNWARD_BREACH: "SHARP DROP",
    TriggerType.UPWARD_BREACH: "STRONG RISE",
}


@dataclass
class AlertMessage:
    subject: str
    text_body: str
    html_body: Optional[str] = None


def format_price(price: float) -> str:
    if price >= 1:
        return f"{price:,.2f}"
    return f"{price:.8f}".rstrip("0").rstrip(".")


def build_alert_message(trigger: TriggerType, price: float, symbol: str) -> AlertMessage:
    headline = f"{TRIGGER_HEADLINES[trigger]} ({symbol})"
    shown = format_price(price)
    return AlertMessage(
        subject=f"🚨 PRICE ALERT: {headline}",
        text_body=f"{symbol} has reached your threshold.\nCurrent price: {shown} USD",
        html_body=(
            f"<h1>{escape(symbol)} has reached your threshold!</h1>"
            f"<p>Current price: <b>{shown} USD</b></p>"
        ),
    )
