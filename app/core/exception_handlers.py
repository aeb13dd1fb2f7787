"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Los flujos de sincronización convierten sus propios errores en respuestas del
Hub. Estos manejadores cubren lo que escapa de un endpoint (body inválido,
parámetros de configuración erróneos, errores inesperados) y responden con el
mismo sobre ``{request_id, summary}`` que espera el Hub.
"""

import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.utils.error_handler import AppException

logger = logging.getLogger(__name__)


def hub_error_response(summary: str, status_code: int = 500, request_id: Optional[Any] = None) -> JSONResponse:
    """
    Construye una respuesta de error con el sobre del Hub.

    Args:
        summary: Mensaje legible para el Hub
        status_code: Código HTTP
        request_id: request_id del Hub si se pudo leer

    Returns:
        JSONResponse: Respuesta JSON
    """
    return JSONResponse(status_code=status_code, content={"request_id": request_id, "summary": summary})


def _request_id_from_body(body: Any) -> Optional[Any]:
    if isinstance(body, dict):
        return body.get("request_id")
    return None


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Sobre del Hub con código 500
    """
    logger.error(f"App Exception: {exc.message} - Code: {exc.error_code} - URL: {request.url} - Details: {exc.details}")
    return hub_error_response(exc.message)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Manejador para bodies que no cumplen el sobre del Hub.

    El Hub interpreta cualquier código distinto de 200 como fallo, por lo que
    se responde 500 igual que en los flujos.
    """
    logger.warning(f"Invalid hub request: {exc.errors()} - URL: {request.url}")
    return hub_error_response(
        f"Invalid request: {exc.errors()}",
        request_id=_request_id_from_body(getattr(exc, "body", None)),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Manejador para HTTPException de Starlette (rutas inexistentes, métodos no permitidos).
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")
    return hub_error_response(str(exc.detail), exc.status_code)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: Sobre del Hub con código 500
    """
    logger.error(
        f"Unhandled Exception: {str(exc)} - "
        f"Type: {type(exc).__name__} - "
        f"URL: {request.url} - "
        f"Traceback: {traceback.format_exc()}"
    )

    summary = "Internal server error occurred"
    if get_settings().DEBUG or isinstance(exc, ValueError):
        summary = f"{type(exc).__name__}: {str(exc)}"

    return hub_error_response(summary)


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando manejadores de excepciones...")

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("✅ Manejadores de excepciones configurados correctamente")
