"""
Configuración centralizada de routers para la aplicación FastAPI.

Registra los endpoints raíz (información y health check) y el router de
webhooks del Hub hacia ShipStation.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI

from app.api.v1.endpoints.shipstation import router as shipstation_router
from app.core.config import get_settings

logger = logging.getLogger(__name__)

SHIPSTATION_PREFIX = "/api/v1/shipstation"


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        """
        Endpoint raíz que proporciona información básica de la API.

        Returns:
            Dict con información de la API
        """
        return {
            "message": settings.APP_NAME,
            "description": "Sincronización de órdenes y envíos entre el Hub y ShipStation",
            "version": settings.APP_VERSION,
            "status": "running",
            "documentation": "/docs" if (settings.DEBUG or settings.ENABLE_DOCS) else "disabled",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": "/health",
                "add_order": f"{SHIPSTATION_PREFIX}/add_order",
                "map_tracking": f"{SHIPSTATION_PREFIX}/map_tracking",
                "add_shipment": f"{SHIPSTATION_PREFIX}/add_shipment",
                "update_shipment": f"{SHIPSTATION_PREFIX}/update_shipment",
                "get_shipments": f"{SHIPSTATION_PREFIX}/get_shipments",
            },
        }


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea el endpoint de health check.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check():
        """
        Liveness del servicio. No consulta ShipStation: las credenciales
        pueden llegar en cada request del Hub.

        Returns:
            Dict con estado de salud
        """
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "shipstation": {
                "api_url": settings.SHIPSTATION_API_URL,
                "credentials_configured": bool(settings.SHIPSTATION_USERNAME and settings.SHIPSTATION_PASSWORD),
                "lookup_strategy": settings.SHIPSTATION_LOOKUP_STRATEGY,
                "poll_mode": settings.SHIPSTATION_POLL_MODE,
            },
        }


def configure_api_v1_routers(app: FastAPI) -> None:
    """
    Configura los routers de la API v1.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando routers de API v1...")

    app.include_router(
        shipstation_router,
        prefix=SHIPSTATION_PREFIX,
        tags=["ShipStation"],
        responses={500: {"description": "Sync flow failed"}},
    )
    logger.info("✅ Router de ShipStation configurado")


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers y endpoints de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    create_root_endpoints(app)
    create_health_endpoints(app)
    configure_api_v1_routers(app)
