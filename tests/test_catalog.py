import pytest

from core.errors import NotFoundError, ValidationError
from services.catalog import CatalogStore, normalize_sku
from tests.conftest import add_product


@pytest.fixture
def catalog(seeded_gateway):
    return CatalogStore(seeded_gateway)


def test_search_clients_by_name_address_or_route(catalog):
    assert [c.name for c in catalog.search_clients("don juan")] == ["Abarrotes Don Juan"]
    assert {c.name for c in catalog.search_clients("col. centro")} == {
        "Tienda El Buen Precio",
        "Minisuper La Esquina",
    }
    assert [c.name for c in catalog.search_clients("industrial")] == ["Comercial Los Pinos"]


def test_blank_search_returns_all_active_clients(catalog, seeded_gateway):
    seeded_gateway.clients.update(1, {"active": False})

    clients = catalog.search_clients("  ")

    assert len(clients) == 4
    assert all(c.active for c in clients)


def test_search_products_by_name_sku_or_category(catalog):
    assert [p.sku for p in catalog.search_products("coca")] == ["CC-600"]
    assert [p.sku for p in catalog.search_products("lal-1")] == ["LAL-1L"]
    assert {p.sku for p in catalog.search_products("bebidas")} == {"CC-600", "BON-1L"}


def test_inactive_products_are_not_listed(catalog, seeded_gateway):
    seeded_gateway.products.update(1, {"active": False})
    assert "CC-600" not in [p.sku for p in catalog.list_active_products()]


def test_normalize_sku():
    assert normalize_sku("  cc-600 ") == "CC-600"


def test_validate_sku_normalizes_and_accepts_new_sku(catalog):
    assert catalog.validate_sku("new-01") == "NEW-01"


@pytest.mark.parametrize("sku", ["", "CC 600", "CC_600", "ÑU-1"])
def test_validate_sku_rejects_bad_format(catalog, sku):
    with pytest.raises(ValidationError):
        catalog.validate_sku(sku)


def test_validate_sku_rejects_duplicate_of_active_product(catalog):
    with pytest.raises(ValidationError) as excinfo:
        catalog.validate_sku("cc-600")
    assert excinfo.value.context["product_id"] == 1


def test_validate_sku_excludes_product_being_edited(catalog):
    assert catalog.validate_sku("CC-600", product_id=1) == "CC-600"


def test_sku_of_inactive_product_can_be_reused(catalog, seeded_gateway):
    seeded_gateway.products.update(1, {"active": False})
    product = catalog.create_product({"name": "Coca-Cola 600ml Retornable", "sku": "cc-600", "price": 14.0})
    assert product.sku == "CC-600"


def test_reactivating_product_checks_sku(catalog, seeded_gateway):
    seeded_gateway.products.update(1, {"active": False})
    catalog.create_product({"name": "Otro refresco", "sku": "CC-600", "price": 14.0})

    with pytest.raises(ValidationError):
        catalog.update_product(1, {"active": True})


def test_create_product_validates_price(catalog):
    with pytest.raises(ValidationError):
        catalog.create_product({"name": "Gratis", "sku": "FREE-1", "price": 0})


def test_create_client_requires_existing_route(catalog):
    with pytest.raises(ValidationError):
        catalog.create_client({"name": "Tienda Nueva", "route_id": 999})

    client = catalog.create_client({"name": "Tienda Nueva", "route_id": 1})
    assert client.id is not None


def test_route_names_must_be_unique(catalog):
    with pytest.raises(ValidationError):
        catalog.create_route({"name": "Ruta Norte Reparto"})


def test_missing_entities_raise_not_found(catalog):
    with pytest.raises(NotFoundError):
        catalog.get_client(999)
    with pytest.raises(NotFoundError):
        catalog.get_product(999)
    with pytest.raises(NotFoundError):
        catalog.get_route(999)


def test_validate_sku_on_sql_gateway(sql_gateway):
    catalog = CatalogStore(sql_gateway)
    add_product(sql_gateway, sku="XYZ-1")

    with pytest.raises(ValidationError):
        catalog.validate_sku("xyz-1")
    assert catalog.validate_sku("xyz-2") == "XYZ-2"


def test_deactivate_client_is_idempotent(gateway):
    catalog = CatalogStore(gateway)

    first = catalog.deactivate_client(5)
    second = catalog.deactivate_client(5)

    assert first.active is False and second.active is False
    assert 5 not in [c.id for c in catalog.search_clients()]
    with pytest.raises(NotFoundError):
        catalog.deactivate_client(999)


def test_deactivated_product_frees_its_sku(gateway):
    catalog = CatalogStore(gateway)

    catalog.deactivate_product(4)
    catalog.deactivate_product(4)

    assert "MAR-200" not in [p.sku for p in catalog.list_active_products()]
    assert catalog.validate_sku("mar-200") == "MAR-200"


def test_deactivated_route_keeps_its_clients(gateway):
    catalog = CatalogStore(gateway)

    route = catalog.deactivate_route(3)

    assert route.active is False
    assert 3 not in [r.id for r in gateway.routes.list()]
    assert 3 in [r.id for r in gateway.routes.list(include_inactive=True)]
    assert catalog.get_client(5).route_id == 3
    # El nombre de una ruta inactiva sigue apareciendo en la búsqueda de clientes
    assert [c.id for c in catalog.search_clients("industrial")] == [5]


def test_update_route(gateway):
    catalog = CatalogStore(gateway)

    route = catalog.update_route(1, {"description": "Centro histórico"})
    assert (route.name, route.description) == ("Ruta Centro Preventa", "Centro histórico")

    # Conservar su propio nombre no es un duplicado
    assert catalog.update_route(1, {"name": "Ruta Centro Preventa"}).name == "Ruta Centro Preventa"

    with pytest.raises(ValidationError):
        catalog.update_route(1, {"name": "Ruta Norte Reparto"})
    with pytest.raises(ValidationError):
        catalog.update_route(1, {"name": "  "})
    with pytest.raises(NotFoundError):
        catalog.update_route(999, {"description": "x"})


def test_assign_salesperson(gateway):
    catalog = CatalogStore(gateway)

    route = catalog.assign_salesperson(2, "  Marta Ruiz ")
    assert route.salesperson == "Marta Ruiz"
    assert gateway.routes.get(2).salesperson == "Marta Ruiz"

    with pytest.raises(ValidationError):
        catalog.assign_salesperson(2, " ")


def test_clients_by_route(gateway):
    catalog = CatalogStore(gateway)

    assert sorted(c.id for c in catalog.clients_by_route(1)) == [1, 2]

    catalog.deactivate_client(2)
    assert [c.id for c in catalog.clients_by_route(1)] == [1]

    new_route = catalog.create_route({"name": "Ruta Sur"})
    assert catalog.clients_by_route(new_route.id) == []
    with pytest.raises(NotFoundError):
        catalog.clients_by_route(999)
