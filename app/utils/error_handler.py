"""
Sistema de manejo de errores personalizado.

Este módulo define las excepciones de la integración Hub-ShipStation
y utilidades para un manejo consistente de errores.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Errores de ShipStation
    SHIPSTATION_CONNECTION_FAILED = "SHIPSTATION_CONNECTION_FAILED"
    SHIPSTATION_API_ERROR = "SHIPSTATION_API_ERROR"
    SHIPSTATION_NOT_FOUND = "SHIPSTATION_NOT_FOUND"

    # Errores de sincronización
    SYNC_FAILED = "SYNC_FAILED"
    SYNC_MAPPING_ERROR = "SYNC_MAPPING_ERROR"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_retryable: bool = False,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
            is_retryable: Si la operación puede reintentarse
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_retryable = is_retryable
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        """String representation del error."""
        return self.message


class ValidationException(AppException):
    """
    Excepción para datos de entrada inválidos (dirección de envío ausente, payload mal formado).
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        expected_format: Optional[str] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            expected_format: Formato esperado
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.expected_format = expected_format

        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
                "expected_format": expected_format,
            }
        )


class LookupResolutionException(AppException):
    """
    Excepción cuando un transportista o servicio no existe en ShipStation (modo estricto).
    """

    def __init__(self, message: str, entity: str, name: Optional[str], **kwargs):
        """
        Inicializa la excepción de resolución.

        Args:
            message: Mensaje de error
            entity: Entidad consultada (ShippingProviders, ShippingServices)
            name: Nombre que no pudo resolverse
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.SYNC_MAPPING_ERROR,
            status_code=500,
            severity=ErrorSeverity.MEDIUM,
            **kwargs,
        )
        self.entity = entity
        self.name = name

        self.details.update({"entity": entity, "name": name})


class ShipStationAPIException(AppException):
    """
    Excepción para errores de la API de ShipStation (red, HTTP, formato de respuesta).
    """

    def __init__(
        self,
        message: str,
        api_response_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de ShipStation API.

        Args:
            message: Mensaje de error
            api_response_code: Código de respuesta de ShipStation
            endpoint: Endpoint que falló
            **kwargs: Argumentos adicionales para AppException
        """
        error_code = ErrorCode.SHIPSTATION_API_ERROR
        severity = ErrorSeverity.MEDIUM

        if api_response_code is None:
            error_code = ErrorCode.SHIPSTATION_CONNECTION_FAILED
            severity = ErrorSeverity.HIGH
        elif api_response_code == 404:
            error_code = ErrorCode.SHIPSTATION_NOT_FOUND
        elif api_response_code >= 500:
            severity = ErrorSeverity.HIGH

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=500,
            severity=severity,
            is_retryable=api_response_code is None or api_response_code >= 500,
            **kwargs,
        )

        self.api_response_code = api_response_code
        self.endpoint = endpoint

        self.details.update({"api_response_code": api_response_code, "endpoint": endpoint})


class SyncException(AppException):
    """
    Excepción para errores de sincronización.
    """

    def __init__(
        self,
        message: str,
        service: str,
        operation: str,
        retry_suggested: bool = False,
        **kwargs,
    ):
        """
        Inicializa la excepción de sincronización.

        Args:
            message: Mensaje de error
            service: Servicio involucrado (hub, shipstation)
            operation: Operación que falló
            retry_suggested: Si se sugiere reintentar
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.SYNC_FAILED,
            status_code=500,
            severity=ErrorSeverity.HIGH,
            is_retryable=retry_suggested,
            **kwargs,
        )

        self.service = service
        self.operation = operation

        self.details.update({"service": service, "operation": operation})


# === FUNCIONES DE UTILIDAD ===


def convert_to_app_exception(exception: Exception, context: Optional[Dict[str, Any]] = None) -> AppException:
    """
    Convierte una excepción estándar a AppException.

    Args:
        exception: Excepción a convertir
        context: Contexto adicional

    Returns:
        AppException: Excepción convertida
    """
    if isinstance(exception, AppException):
        if context:
            exception.details.update(context)
        return exception

    context = context or {}
    exception_type = type(exception).__name__

    return AppException(
        message=str(exception) or exception_type,
        details={"original_exception": exception_type, **context},
    )


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Loggea un error de manera consistente.

    Args:
        exception: Excepción a loggear
        context: Contexto adicional
        level: Nivel de logging
    """
    context = context or {}

    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        "traceback": "".join(traceback.format_exception(type(exception), exception, exception.__traceback__)),
        "context": context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
                "is_retryable": exception.is_retryable,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"

    logger.log(level, message, extra=log_data)
