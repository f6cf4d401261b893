import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from app.main import create_app
from core.config import Settings
from core.database import build_engine, create_db_and_tables
from models.clients import Client
from models.products import Product
from models.routes import Route
from repositories.fixtures import load_fixtures
from repositories.memory import InMemoryGateway
from repositories.sql import SqlGateway


@pytest.fixture
def memory_gateway():
    """Almacén en memoria vacío."""
    return InMemoryGateway()


@pytest.fixture
def seeded_gateway():
    """Almacén en memoria con los datos de demostración."""
    return InMemoryGateway(seed=True)


@pytest.fixture
def sql_engine():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_gateway(sql_engine):
    """Almacén SQL sobre SQLite en memoria, con los datos de demostración."""
    with Session(sql_engine) as session:
        gateway = SqlGateway(session)
        load_fixtures(gateway)
        yield gateway


@pytest.fixture(params=["memory", "sql"])
def gateway(request):
    """Corre la prueba contra ambas implementaciones del almacén."""
    if request.param == "memory":
        yield InMemoryGateway(seed=True)
        return
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    with Session(engine) as session:
        sql = SqlGateway(session)
        load_fixtures(sql)
        yield sql
    engine.dispose()


@pytest.fixture
def offline_client():
    app = create_app(Settings(OFFLINE_MODE=True))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def sql_client():
    app = create_app(Settings(DATABASE_URL="sqlite://"))
    with TestClient(app) as client:
        yield client


def add_route(gateway, name="Ruta Prueba"):
    return gateway.routes.create(Route(name=name))


def add_client(gateway, name="Cliente Prueba", active=True, route_id=None):
    return gateway.clients.create(Client(name=name, active=active, route_id=route_id))


def add_product(gateway, sku="PRD-1", price=10.0, stock=10, active=True, name=None):
    return gateway.products.create(
        Product(name=name or f"Producto {sku}", sku=sku, price=price, stock=stock, active=active)
    )
