# pricewatch/storage/supabase_store.py
from datetime import datetime
from typing import List, Optional, Union

import httpx
from pydantic import BaseModel, ValidationError, field_validator

from pricewatch.errors import StoreError
from pricewatch.logger import logger
from pricewatch.models import Alert, AlertStatus
from .alert_store import AlertStore


class AlertRow(BaseModel):
    """One row of the alerts table as returned by PostgREST."""
    id: Union[str, int]
    email: str
    symbol: str = "BTCUSDT"
    min_price: float = 0.0
    max_price: float = 0.0
    is_active: bool
    status: AlertStatus
    expiry_date: Optional[datetime] = None

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def _null_is_disabled(cls, value):
        return 0.0 if value is None else value

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status(cls, value):
        return value.upper() if isinstance(value, str) else value

    def to_alert(self) -> Alert:
        return Alert(
            id=str(self.id),
            recipient=self.email,
            symbol=self.symbol,
            min_price=self.min_price,
            max_price=self.max_price,
            active=self.is_active,
            status=self.status,
            expiry=self.expiry_date,
        )


class SupabaseAlertStore(AlertStore):
    """
    Alert store backed by a Supabase table, spoken to through its PostgREST API.
    Uses the worker's shared httpx client; every call carries its own timeout.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        table: str = "price_alerts",
        timeout: float = 10.0,
        dry_run: bool = False,
        page_size: int = 1000,
    ):
        self.client = client
        self.endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self.timeout = timeout
        self.dry_run = dry_run
        # Must not exceed the server's db-max-rows, or pages come back short
        self.page_size = page_size
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    async def _fetch_page(self, offset: int) -> list:
        params = {
            "select": "*",
            "is_active": "eq.true",
            "status": f"eq.{AlertStatus.PENDING.value}",
            "order": "id.asc",
            "limit": str(self.page_size),
            "offset": str(offset),
        }
        try:
            response = await self.client.get(
                self.endpoint, params=params, headers=self.headers, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            raise StoreError(f"Listing pending alerts failed: {e}") from e

        if response.status_code not in (200, 206):
            raise StoreError(f"Listing pending alerts failed: HTTP {response.status_code} {response.text[:200]}")

        try:
            rows = response.json()
        except ValueError as e:
            raise StoreError("Alert store returned a non-JSON body") from e
        if not isinstance(rows, list):
            raise StoreError(f"Expected a list of alerts, got {type(rows).__name__}")
        return rows

    async def list_pending(self) -> List[Alert]:
        """Every pending alert, read page by page in id order."""
        rows = []
        while True:
            page = await self._fetch_page(offset=len(rows))
            rows.extend(page)
            if len(page) < self.page_size:
                break

        alerts = []
        for row in rows:
            try:
                alerts.append(AlertRow.model_validate(row).to_alert())
            except ValidationError as e:
                # A malformed row must not hide every other alert
                row_id = row.get("id") if isinstance(row, dict) else None
                logger.warning(f"[Store] Skipping malformed alert row {row_id}: {e.error_count()} field error(s)")

        logger.debug(f"[Store] {len(alerts)} pending alert(s) from {len(rows)} row(s)")
        return alerts

    async def mark_sent(self, alert_id: str) -> bool:
        if self.dry_run:
            logger.info(f"[Store] DRY RUN - would mark alert {alert_id} as SENT")
            return True

        headers = {
            **self.headers,
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        body = {"status": AlertStatus.SENT.value, "is_active": False}
        try:
            response = await self.client.patch(
                self.endpoint,
                params={"id": f"eq.{alert_id}"},
                json=body,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise StoreError(f"Marking alert {alert_id} as sent failed: {e}") from e

        if response.status_code not in (200, 204):
            raise StoreError(
                f"Marking alert {alert_id} as sent failed: HTTP {response.status_code} {response.text[:200]}"
            )

        if response.status_code == 204:
            # Representation not returned; the update went through
            logger.info(f"[Store] Alert {alert_id} marked as SENT")
            return True

        try:
            updated = response.json() if response.content else []
        except ValueError as e:
            raise StoreError(f"Alert store returned a non-JSON body for {alert_id}") from e
        if not updated:
            logger.info(f"[Store] Alert {alert_id} no longer exists; nothing to mark")
            return False

        logger.info(f"[Store] Alert {alert_id} marked as SENT")
        return True
