"""
Notification utilities for reporting sync failures.

Every failed sync flow is logged and, when an error collector is configured,
forwarded to it so failures are visible outside the service logs.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import get_settings
from app.utils.error_handler import convert_to_app_exception, log_error

logger = logging.getLogger(__name__)


async def report_exception(exception: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Report a sync failure. Never raises.

    Args:
        exception: Exception that aborted the flow
        context: Flow name, hub ids and other identifying data
    """
    context = context or {}
    log_error(exception, context)

    settings = get_settings()
    if not settings.ERROR_REPORTING_ENABLED or not settings.ERROR_REPORTING_URL:
        return

    payload = {
        **convert_to_app_exception(exception, context).to_dict(),
        "context": context,
        "environment": settings.ENVIRONMENT,
        "app_name": settings.APP_NAME,
        "app_version": settings.APP_VERSION,
    }
    headers = {"Content-Type": "application/json"}
    if settings.ERROR_REPORTING_API_KEY:
        headers["X-API-Key"] = settings.ERROR_REPORTING_API_KEY

    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.post(settings.ERROR_REPORTING_URL, json=payload, headers=headers)
            if response.status_code >= 400:
                logger.warning(f"Error collector rejected report: HTTP {response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"Failed to send error report: {e}")
