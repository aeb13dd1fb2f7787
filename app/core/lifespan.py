"""
Gestión del ciclo de vida de la aplicación FastAPI.

No hay conexiones persistentes: cada request del Hub abre y cierra su propia
sesión con ShipStation. El startup configura logging y valida la
configuración.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import get_settings
from app.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    # === STARTUP ===
    setup_logging()
    logger.info(f"🚀 Iniciando {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")
    startup_verify_configuration()

    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")


def startup_verify_configuration() -> None:
    """Registra la configuración efectiva de ShipStation."""
    settings = get_settings()

    logger.info(
        f"ShipStation API: {settings.SHIPSTATION_API_URL} - "
        f"lookup: {settings.SHIPSTATION_LOOKUP_STRATEGY} - "
        f"poll: {settings.SHIPSTATION_POLL_MODE} - "
        f"timeout: {settings.SHIPSTATION_TIMEOUT_SECONDS}s"
    )

    # Las credenciales pueden llegar como parámetros del Hub
    if not settings.SHIPSTATION_USERNAME or not settings.SHIPSTATION_PASSWORD:
        logger.warning("⚠️ SHIPSTATION_USERNAME/PASSWORD no configurados; se usarán los parámetros de cada request")

    if settings.ERROR_REPORTING_ENABLED and not settings.ERROR_REPORTING_URL:
        logger.warning("⚠️ ERROR_REPORTING_ENABLED sin ERROR_REPORTING_URL; los errores solo se registrarán en logs")
