# pricewatch/config/constants.py
from pricewatch.config.spec import ConfigSpec

KNOWN_PROVIDERS = ("binance", "coinbase", "coincap")


def _valid_provider_list(value: str) -> bool:
    names = [n.strip().lower() for n in value.split(",") if n.strip()]
    return bool(names) and all(n in KNOWN_PROVIDERS for n in names)


CONFIG_SPECS = {
    'SUPABASE_URL': ConfigSpec(
        type=str,
        required=True,
        validator=lambda x: x.startswith(("http://", "https://")),
        description="Base URL of the Supabase project holding the alerts table"
    ),
    'SUPABASE_KEY': ConfigSpec(
        type=str,
        required=True,
        secret=True,
        description="Supabase API key sent as apikey/Bearer"
    ),
    'RESEND_API_KEY': ConfigSpec(
        type=str,
        required=True,
        secret=True,
        description="Resend API key, used as the SMTP password"
    ),
    'PORT': ConfigSpec(
        type=int,
        default=8080,
        validator=lambda x: 0 < x < 65536,
        description="Port for the liveness endpoint"
    ),
    'POLL_INTERVAL_SECONDS': ConfigSpec(
        type=float,
        default=10.0,
        validator=lambda x: x > 0,
        description="Seconds between the start of two evaluation cycles"
    ),
    'PRICE_PROVIDERS': ConfigSpec(
        type=str,
        default="binance,coinbase,coincap",
        validator=_valid_provider_list,
        description="Comma separated provider priority order"
    ),
    'PROVIDER_TIMEOUT_SECONDS': ConfigSpec(
        type=float,
        default=5.0,
        validator=lambda x: 0 < x <= 60,
        description="Timeout for one price provider call"
    ),
    'STORE_TIMEOUT_SECONDS': ConfigSpec(
        type=float,
        default=10.0,
        validator=lambda x: 0 < x <= 120,
        description="Timeout for one alert store call"
    ),
    'NOTIFY_TIMEOUT_SECONDS': ConfigSpec(
        type=float,
        default=15.0,
        validator=lambda x: 0 < x <= 120,
        description="Timeout for one notification send"
    ),
    'MAX_CONCURRENT_FETCHES': ConfigSpec(
        type=int,
        default=4,
        validator=lambda x: 1 <= x <= 32,
        description="Symbols looked up in parallel within one cycle"
    ),
    'ALERTS_TABLE': ConfigSpec(
        type=str,
        default="price_alerts",
        description="Table holding the alerts"
    ),
    'ALERTS_PAGE_SIZE': ConfigSpec(
        type=int,
        default=1000,
        validator=lambda x: 1 <= x <= 10000,
        description="Rows per request when listing alerts; keep at or below the server max-rows"
    ),
    'SMTP_HOST': ConfigSpec(
        type=str,
        default="smtp.resend.com",
        description="SMTP relay host"
    ),
    'SMTP_PORT': ConfigSpec(
        type=int,
        default=587,
        validator=lambda x: 0 < x < 65536,
        description="SMTP relay port (465 = implicit TLS, otherwise STARTTLS)"
    ),
    'SMTP_USERNAME': ConfigSpec(
        type=str,
        default="resend",
        description="SMTP login user"
    ),
    'MAIL_FROM': ConfigSpec(
        type=str,
        default="noreply@uth.asia",
        validator=lambda x: "@" in x,
        description="Sender address for alert emails"
    ),
    'MAIL_FROM_NAME': ConfigSpec(
        type=str,
        default="Price Alert Bot",
        description="Sender display name"
    ),
    'SYMBOL_MAP_PATH': ConfigSpec(
        type=str,
        default=None,
        description="Optional YAML file with extra symbol mappings"
    ),
    'MARK_SENT_ON_NOTIFY_FAILURE': ConfigSpec(
        type=bool,
        default=True,
        description="Consume the alert even when the notification could not be sent"
    ),
    'DRY_RUN': ConfigSpec(
        type=bool,
        default=False,
        description="Print notifications and skip store writes"
    ),
    'DEBUG': ConfigSpec(
        type=bool,
        default=False,
        description="Enable debug logging"
    ),
}
