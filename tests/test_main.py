"""Tests for the command-line entry point."""

import asyncio
import os
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from pricewatch.config.settings import WorkerSettings
from pricewatch.main import main, run_single_cycle

REQUIRED = {
    "SUPABASE_URL": "https://demo.supabase.co",
    "SUPABASE_KEY": "service-key",
    "RESEND_API_KEY": "re_123",
}


@pytest.fixture(autouse=True)
def no_dotenv_or_logging_setup():
    with patch("pricewatch.main.load_dotenv"), patch("pricewatch.main.setup_logger"):
        yield


class TestMain:

    @patch("pricewatch.main.uvicorn.run")
    @patch("pricewatch.main.create_app")
    @patch("pricewatch.main.build_worker")
    @patch.dict(os.environ, {}, clear=True)
    def test_missing_config_exits_before_anything_is_built(self, mock_build_worker, mock_create_app, mock_run):
        assert main([]) == 1
        mock_build_worker.assert_not_called()
        mock_create_app.assert_not_called()
        mock_run.assert_not_called()

    @patch("pricewatch.main.run_single_cycle", new_callable=AsyncMock, return_value=True)
    @patch.dict(os.environ, REQUIRED, clear=True)
    def test_once_success_exits_zero(self, mock_cycle):
        assert main(["--once", "--dry-run"]) == 0
        settings = mock_cycle.call_args[0][0]
        assert settings.dry_run is True

    @patch("pricewatch.main.run_single_cycle", new_callable=AsyncMock, return_value=False)
    @patch.dict(os.environ, REQUIRED, clear=True)
    def test_once_failed_cycle_exits_one(self, mock_cycle):
        assert main(["--once"]) == 1
        mock_cycle.assert_awaited_once()

    @patch("pricewatch.main.uvicorn.run")
    @patch("pricewatch.main.create_app")
    @patch.dict(os.environ, dict(REQUIRED, PORT="9000"), clear=True)
    def test_serves_liveness_app_on_configured_port(self, mock_create_app, mock_run):
        assert main([]) == 0
        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args[0] is mock_create_app.return_value
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9000


def _settings():
    return WorkerSettings(
        supabase_url="https://demo.supabase.co",
        supabase_key="service-key",
        resend_api_key="re_123",
        dry_run=True,
    )


def _client_factory(handler):
    return lambda settings: httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_single_cycle_reports_success():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json=[])

    with patch("pricewatch.main.create_http_client", _client_factory(handler)):
        assert asyncio.run(run_single_cycle(_settings())) is True
    assert seen == ["/rest/v1/price_alerts"]


def test_single_cycle_reports_store_outage():
    handler = lambda request: httpx.Response(503, text="unavailable")

    with patch("pricewatch.main.create_http_client", _client_factory(handler)):
        assert asyncio.run(run_single_cycle(_settings())) is False
