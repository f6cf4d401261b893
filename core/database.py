import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Crea el motor de base de datos. SQLite en memoria comparte una sola conexión."""
    kwargs = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def create_db_and_tables(engine: Engine) -> None:
    """Crea todas las tablas definidas en los modelos si no existen."""
    # El paquete models importa TODOS los modelos al cargarse
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def ping_database(engine: Engine) -> bool:
    """
    Intenta una consulta simple para despertar la base de datos,
    especialmente útil para servicios que hibernan.
    """
    logger.info("Intentando 'ping' a la base de datos...")
    try:
        with Session(engine) as session:
            session.execute(text("SELECT 1"))
        logger.info("Ping exitoso: conexión establecida.")
        return True
    except SQLAlchemyError as e:
        logger.warning("Fallo el ping a la base de datos: %s", e)
        return False
