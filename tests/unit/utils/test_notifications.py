"""Tests unitarios para el reporte de errores de sincronización."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.core.config import Settings
from app.utils.error_handler import ShipStationAPIException
from app.utils.notifications import report_exception


def reporting_settings(**overrides):
    values = {
        "ERROR_REPORTING_ENABLED": True,
        "ERROR_REPORTING_URL": "https://errors.example.com/report",
        "ERROR_REPORTING_API_KEY": "key-123",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestReportException:
    """Tests para report_exception."""

    @pytest.mark.asyncio
    async def test_disabled_only_logs(self):
        """Sin colector configurado solo se registra en logs."""
        settings = reporting_settings(ERROR_REPORTING_ENABLED=False)

        with (
            patch("app.utils.notifications.get_settings", return_value=settings),
            patch("app.utils.notifications.httpx.AsyncClient") as client_cls,
            patch("app.utils.notifications.log_error") as log_error,
        ):
            await report_exception(ValueError("boom"), {"operation": "create_order"})

        log_error.assert_called_once()
        client_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_posts_payload_to_collector(self):
        """Debe enviar el error con contexto y API key."""
        settings = reporting_settings()

        with (
            patch("app.utils.notifications.get_settings", return_value=settings),
            patch("app.utils.notifications.httpx.AsyncClient") as client_cls,
        ):
            client = client_cls.return_value.__aenter__.return_value
            client.post = AsyncMock(return_value=MagicMock(status_code=202))

            await report_exception(
                ShipStationAPIException("HTTP 503: down", api_response_code=503, endpoint="/Orders"),
                {"operation": "create_order", "hub_id": "R123"},
            )

        url = client.post.await_args.args[0]
        payload = client.post.await_args.kwargs["json"]
        headers = client.post.await_args.kwargs["headers"]
        assert url == "https://errors.example.com/report"
        assert payload["error_code"] == "SHIPSTATION_API_ERROR"
        assert payload["is_retryable"] is True
        assert payload["context"] == {"operation": "create_order", "hub_id": "R123"}
        assert headers["X-API-Key"] == "key-123"

    @pytest.mark.asyncio
    async def test_collector_failure_never_raises(self):
        """Un fallo del colector no interrumpe el flujo."""
        settings = reporting_settings()

        with (
            patch("app.utils.notifications.get_settings", return_value=settings),
            patch("app.utils.notifications.httpx.AsyncClient") as client_cls,
        ):
            client = client_cls.return_value.__aenter__.return_value
            client.post = AsyncMock(side_effect=httpx.ConnectError("unreachable"))

            await report_exception(RuntimeError("boom"))
