# pricewatch/config/settings.py
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from pricewatch.config.constants import CONFIG_SPECS
from pricewatch.errors import ConfigError
from pricewatch.logger import logger, redact_sensitive


@dataclass(frozen=True)
class WorkerSettings:
    supabase_url: str
    supabase_key: str
    resend_api_key: str
    port: int = 8080
    poll_interval_seconds: float = 10.0
    price_providers: Tuple[str, ...] = ("binance", "coinbase", "coincap")
    provider_timeout_seconds: float = 5.0
    store_timeout_seconds: float = 10.0
    notify_timeout_seconds: float = 15.0
    max_concurrent_fetches: int = 4
    alerts_table: str = "price_alerts"
    alerts_page_size: int = 1000
    smtp_host: str = "smtp.resend.com"
    smtp_port: int = 587
    smtp_username: str = "resend"
    mail_from: str = "noreply@uth.asia"
    mail_from_name: str = "Price Alert Bot"
    symbol_map_path: Optional[str] = None
    mark_sent_on_notify_failure: bool = True
    dry_run: bool = False
    debug: bool = False


def load_settings(environ: Optional[Mapping[str, str]] = None) -> WorkerSettings:
    """
    Build WorkerSettings from environment variables.

    Every key in CONFIG_SPECS is converted and validated; invalid optional
    values fall back to their default. Raises ConfigError listing every
    required key that is absent (or invalid) so the process can halt before
    the polling loop starts.
    """
    env = os.environ if environ is None else environ
    values = {}
    missing = []

    for key, spec in CONFIG_SPECS.items():
        raw = env.get(key)
        value = spec.validate(raw)
        if spec.required and value is None:
            missing.append(key)
        values[key.lower()] = value

    if missing:
        raise ConfigError(missing)

    values['price_providers'] = tuple(
        name.strip().lower() for name in values['price_providers'].split(",") if name.strip()
    )
    settings = WorkerSettings(**values)
    logger.info(
        f"[Config] store={settings.supabase_url} key={redact_sensitive(settings.supabase_key)} "
        f"interval={settings.poll_interval_seconds}s providers={','.join(settings.price_providers)} "
        f"dry_run={settings.dry_run}"
    )
    return settings
