# pricewatch/worker/factory.py
import httpx

from pricewatch.alerts.evaluator import AlertEvaluator
from pricewatch.config.settings import WorkerSettings
from pricewatch.logger import logger
from pricewatch.notifications.base import Notifier
from pricewatch.notifications.console_notifier import ConsoleNotifier
from pricewatch.notifications.email_notifier import EmailNotifier
from pricewatch.price_services.multiprovider_service import MultiProviderPriceService, build_price_services
from pricewatch.storage.supabase_store import SupabaseAlertStore
from pricewatch.symbols.symbol_resolver import SymbolResolver
from .scheduler import AlertWorker

USER_AGENT = "pricewatch/0.1"


def create_http_client(settings: WorkerSettings) -> httpx.AsyncClient:
    """The one HTTP client shared by every provider and the store for the process lifetime."""
    limits = httpx.Limits(
        max_connections=max(10, settings.max_concurrent_fetches * 2),
        max_keepalive_connections=settings.max_concurrent_fetches,
    )
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.provider_timeout_seconds),
        limits=limits,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=False,
    )


def build_resolver(settings: WorkerSettings) -> SymbolResolver:
    if settings.symbol_map_path:
        return SymbolResolver.from_yaml(settings.symbol_map_path)
    return SymbolResolver()


def build_price_service(settings: WorkerSettings, client: httpx.AsyncClient) -> MultiProviderPriceService:
    resolver = build_resolver(settings)
    providers = build_price_services(
        settings.price_providers, client, resolver, timeout=settings.provider_timeout_seconds
    )
    logger.info(f"[Factory] Price providers in priority order: {[p.name for p in providers]}")
    return MultiProviderPriceService(providers, call_timeout=settings.provider_timeout_seconds)


def build_notifier(settings: WorkerSettings) -> Notifier:
    if settings.dry_run:
        logger.info("[Factory] DRY RUN - notifications go to the console")
        return ConsoleNotifier()
    return EmailNotifier(
        smtp_server=settings.smtp_host,
        smtp_port=settings.smtp_port,
        smtp_username=settings.smtp_username,
        smtp_password=settings.resend_api_key,
        from_address=settings.mail_from,
        from_name=settings.mail_from_name,
        timeout=settings.notify_timeout_seconds,
    )


def build_worker(settings: WorkerSettings, client: httpx.AsyncClient) -> AlertWorker:
    store = SupabaseAlertStore(
        client,
        base_url=settings.supabase_url,
        api_key=settings.supabase_key,
        table=settings.alerts_table,
        timeout=settings.store_timeout_seconds,
        dry_run=settings.dry_run,
        page_size=settings.alerts_page_size,
    )
    evaluator = AlertEvaluator(
        price_service=build_price_service(settings, client),
        store=store,
        notifier=build_notifier(settings),
        max_concurrency=settings.max_concurrent_fetches,
        mark_sent_on_notify_failure=settings.mark_sent_on_notify_failure,
    )
    return AlertWorker(store, evaluator, interval=settings.poll_interval_seconds)
