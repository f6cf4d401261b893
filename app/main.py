import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

# --- Importaciones de Módulos Core ---
from core.config import Settings, settings as default_settings
from core.database import build_engine, create_db_and_tables, ping_database
from core.errors import (
    ConflictError,
    CoreError,
    DuplicateFolioError,
    DuplicateInvoiceError,
    InvalidTransition,
    NotFoundError,
    OrderNotDeliveredError,
    PersistenceError,
    StockConflictError,
    ValidationError,
)
from core.logging_config import configure_logging
from repositories.memory import InMemoryGateway

# --- Importación de Routers ---
from routers import clients
from routers import inventory
from routers import invoices
from routers import orders
from routers import products
from routers import routes

logger = logging.getLogger(__name__)

# Código HTTP para cada tipo de error del núcleo
ERROR_STATUS = {
    ValidationError: 422,
    NotFoundError: 404,
    InvalidTransition: 409,
    ConflictError: 409,
    OrderNotDeliveredError: 409,
    DuplicateInvoiceError: 409,
    DuplicateFolioError: 409,
    StockConflictError: 409,
    PersistenceError: 503,
}


def status_for(exc: CoreError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Construye la aplicación.

    El modo offline/demo se decide aquí y solo aquí: con OFFLINE_MODE=true se
    crea un almacén en memoria con datos de ejemplo; si no, se usa la base de
    datos y cualquier falla se reporta como error (503).
    """
    app_settings = app_settings or default_settings
    configure_logging(app_settings.LOG_LEVEL)

    app = FastAPI(
        title="API CDF Route Manager",
        version="1.0.0",
        description="Backend de pedidos, estados de entrega y facturación para rutas de distribución.",
    )
    app.state.settings = app_settings
    app.state.offline_gateway = None
    app.state.engine = None

    if app_settings.OFFLINE_MODE:
        logger.info("OFFLINE_MODE activo: usando almacén en memoria con datos de demostración")
        app.state.offline_gateway = InMemoryGateway(seed=True)
    else:
        app.state.engine = build_engine(app_settings.DATABASE_URL, echo=app_settings.SQL_ECHO)

    # --- Evento de Inicio ---
    @app.on_event("startup")
    def startup():
        """Crea las tablas y hace 'ping' a la base de datos (solo en modo normal)."""
        if app.state.engine is None:
            return
        create_db_and_tables(app.state.engine)
        logger.info("Tablas verificadas.")
        ping_database(app.state.engine)

    # --- Manejo de errores del núcleo ---
    @app.exception_handler(CoreError)
    def handle_core_error(request: Request, exc: CoreError):
        return JSONResponse(status_code=status_for(exc), content=exc.to_dict())

    # --- Configuración de CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Inclusión de Routers (Rutas de la API) ---
    app.include_router(routes.router)
    app.include_router(clients.router)
    app.include_router(products.router)
    app.include_router(inventory.router)
    app.include_router(orders.router)
    app.include_router(invoices.router)

    # --- Ruta Raíz de Bienvenida ---
    @app.get("/", tags=["API Health"])
    def read_root():
        """Verifica que la API está en línea."""
        mode = "offline" if app.state.offline_gateway is not None else "database"
        return {"message": "API de CDF Route Manager en línea", "mode": mode}

    return app


app = create_app()


# --- Ejecución Local ---
if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=default_settings.PORT, reload=True)
