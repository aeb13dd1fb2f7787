"""
ShipStation Hub Integration - FastAPI Application Entry Point

Servicio que sincroniza órdenes y envíos entre el Hub de integraciones y
ShipStation: crea y actualiza órdenes, asigna tracking y consulta los envíos
despachados.
"""

import logging

import uvicorn
from fastapi import FastAPI

from app.core.config import get_settings
from app.core.exception_handlers import configure_exception_handlers
from app.core.lifespan import lifespan
from app.core.routers import configure_all_routers

settings = get_settings()
logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    logger.info("🏗️ Creando aplicación FastAPI...")

    docs_enabled = settings.DEBUG or settings.ENABLE_DOCS
    app = FastAPI(
        title=settings.APP_NAME,
        description="Sincronización de órdenes y envíos entre el Hub y ShipStation",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    configure_exception_handlers(app)
    configure_all_routers(app)

    logger.info("✅ Aplicación FastAPI creada y configurada")
    return app


app = create_application()


if __name__ == "__main__":
    """
    Ejecutar la aplicación directamente para desarrollo.

    Para producción:
    uvicorn app.main:app --host 0.0.0.0 --port 8000
    """
    logger.info("🚀 Iniciando aplicación desde main.py...")

    uvicorn_config = {
        "app": "app.main:app",
        "host": settings.HOST,
        "port": settings.PORT,
        "reload": settings.DEBUG,
        "log_level": settings.LOG_LEVEL.lower(),
        "access_log": True,
    }

    if settings.DEBUG:
        uvicorn_config["reload_dirs"] = ["app"]

    try:
        uvicorn.run(**uvicorn_config)
    except KeyboardInterrupt:
        logger.info("🛑 Aplicación detenida por el usuario")
