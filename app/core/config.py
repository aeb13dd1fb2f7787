"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación usando Pydantic Settings para validación automática.
Los parámetros que el Hub envía en cada webhook tienen prioridad sobre
estos valores (ver ShipStationConfig).
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

LOOKUP_STRATEGIES = ("static", "remote")
POLL_MODES = ("modified", "created")


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Hub-ShipStation Integration"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", validation_alias="ENV")
    DEBUG: bool = Field(default=False)

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)
    LOG_LEVEL: str = Field(default="INFO")

    # === CONFIGURACIÓN DE SHIPSTATION ===
    SHIPSTATION_API_URL: str = Field(default="https://data.shipstation.com/1.1")
    SHIPSTATION_USERNAME: Optional[str] = Field(default=None)
    SHIPSTATION_PASSWORD: Optional[str] = Field(default=None)
    # Vacío = las órdenes quedan visibles en todas las tiendas
    SHIPSTATION_STORE_ID: Optional[str] = Field(default=None)
    SHIPSTATION_MARKETPLACE_ID: Optional[int] = Field(default=None)
    SHIPSTATION_LOOKUP_STRATEGY: str = Field(default="static")
    SHIPSTATION_POLL_MODE: str = Field(default="modified")
    # ShipStation guarda hora local (PDT) etiquetada como UTC
    SHIPSTATION_TIMESTAMP_OFFSET_HOURS: float = Field(default=-7.0)
    SHIPSTATION_TIMEOUT_SECONDS: float = Field(default=30.0)

    # === CONFIGURACIÓN DE REPORTE DE ERRORES ===
    ERROR_REPORTING_ENABLED: bool = Field(default=False)
    ERROR_REPORTING_URL: Optional[str] = Field(default=None)
    ERROR_REPORTING_API_KEY: Optional[str] = Field(default=None)

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_FILE_PATH: Optional[str] = Field(default=None)
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)
    LOG_FORMAT: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # === CONFIGURACIÓN DE DOCUMENTACIÓN ===
    ENABLE_DOCS: bool = Field(default=True)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("SHIPSTATION_LOOKUP_STRATEGY")
    @classmethod
    def validate_lookup_strategy(cls, v):
        """Valida la estrategia de resolución de transportistas."""
        if v.lower() not in LOOKUP_STRATEGIES:
            raise ValueError(f"SHIPSTATION_LOOKUP_STRATEGY debe ser uno de: {list(LOOKUP_STRATEGIES)}")
        return v.lower()

    @field_validator("SHIPSTATION_POLL_MODE")
    @classmethod
    def validate_poll_mode(cls, v):
        """Valida el modo de consulta de envíos."""
        if v.lower() not in POLL_MODES:
            raise ValueError(f"SHIPSTATION_POLL_MODE debe ser uno de: {list(POLL_MODES)}")
        return v.lower()

    @field_validator("SHIPSTATION_API_URL")
    @classmethod
    def validate_api_url(cls, v):
        """Normaliza la URL base de ShipStation."""
        if not v.startswith("https://") and not v.startswith("http://"):
            v = f"https://{v}"
        return v.rstrip("/")

    @field_validator("SHIPSTATION_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, v):
        """Valida que el timeout sea positivo."""
        if v <= 0:
            raise ValueError("SHIPSTATION_TIMEOUT_SECONDS debe ser mayor a 0")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene la configuración de la aplicación (cacheada).

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class ShipStationConfig:
    """
    Configuración efectiva de una solicitud del Hub.

    Combina los parámetros del webhook con los valores por defecto de Settings.
    """

    api_url: str
    username: Optional[str]
    password: Optional[str]
    store_id: Optional[str]
    marketplace_id: Optional[int]
    lookup_strategy: str
    poll_mode: str
    timestamp_offset_hours: float
    timeout_seconds: float
    since: Optional[str] = None

    @classmethod
    def from_parameters(
        cls, parameters: Optional[Mapping[str, Any]] = None, settings: Optional[Settings] = None
    ) -> "ShipStationConfig":
        """
        Construye la configuración a partir de los parámetros del Hub.

        Args:
            parameters: Parámetros recibidos en el webhook
            settings: Configuración base (get_settings() por defecto)

        Returns:
            ShipStationConfig: Configuración efectiva
        """
        settings = settings or get_settings()
        parameters = parameters or {}

        def pick(key: str, default: Any) -> Any:
            value = parameters.get(key)
            return default if _blank(value) else value

        store_id = pick("shipstation_store_id", settings.SHIPSTATION_STORE_ID)
        marketplace_id = pick("marketplace_id", settings.SHIPSTATION_MARKETPLACE_ID)
        lookup_strategy = str(pick("shipstation_lookup_strategy", settings.SHIPSTATION_LOOKUP_STRATEGY)).lower()
        poll_mode = str(pick("shipstation_poll_mode", settings.SHIPSTATION_POLL_MODE)).lower()

        if lookup_strategy not in LOOKUP_STRATEGIES:
            raise ValueError(f"Unknown lookup strategy: {lookup_strategy}")
        if poll_mode not in POLL_MODES:
            raise ValueError(f"Unknown poll mode: {poll_mode}")

        return cls(
            api_url=settings.SHIPSTATION_API_URL,
            username=pick("shipstation_username", settings.SHIPSTATION_USERNAME),
            password=pick("shipstation_password", settings.SHIPSTATION_PASSWORD),
            store_id=None if _blank(store_id) else str(store_id).strip(),
            marketplace_id=None if _blank(marketplace_id) else int(marketplace_id),
            lookup_strategy=lookup_strategy,
            poll_mode=poll_mode,
            timestamp_offset_hours=settings.SHIPSTATION_TIMESTAMP_OFFSET_HOURS,
            timeout_seconds=settings.SHIPSTATION_TIMEOUT_SECONDS,
            since=pick("since", None),
        )
