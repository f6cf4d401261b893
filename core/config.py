import os
from typing import List, Optional

from dotenv import load_dotenv

# Cargar variables de entorno desde .env
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpreta valores tipo 'true', '1', 'yes', 'si' como True."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "si", "sí", "on"}


class Settings:
    """
    Configuración de la aplicación leída desde el entorno (.env).

    OFFLINE_MODE activa el modo demo: la API trabaja contra un almacén en memoria
    sembrado con datos de ejemplo, en lugar de la base de datos. Se decide UNA vez
    al construir la aplicación; nunca se cambia a datos de ejemplo ante un error.
    """

    def __init__(
        self,
        DATABASE_URL: str = "sqlite:///./cdf_route_manager.db",
        OFFLINE_MODE: bool = False,
        SQL_ECHO: bool = False,
        LOG_LEVEL: str = "INFO",
        CORS_ORIGINS: Optional[List[str]] = None,
        PORT: int = 10000,
    ):
        self.DATABASE_URL = DATABASE_URL
        self.OFFLINE_MODE = OFFLINE_MODE
        self.SQL_ECHO = SQL_ECHO
        self.LOG_LEVEL = LOG_LEVEL.upper()
        self.CORS_ORIGINS = CORS_ORIGINS if CORS_ORIGINS is not None else ["*"]
        self.PORT = PORT

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./cdf_route_manager.db"),
            OFFLINE_MODE=_env_bool("OFFLINE_MODE"),
            SQL_ECHO=_env_bool("SQL_ECHO"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
            CORS_ORIGINS=[o.strip() for o in origins.split(",") if o.strip()] if origins else None,
            PORT=int(os.getenv("PORT", 10000)),
        )

    def __repr__(self) -> str:
        return (
            f"Settings(DATABASE_URL={self.DATABASE_URL!r}, OFFLINE_MODE={self.OFFLINE_MODE}, "
            f"LOG_LEVEL={self.LOG_LEVEL!r})"
        )


settings = Settings.from_env()
