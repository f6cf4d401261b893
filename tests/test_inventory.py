import pytest

from core.errors import NotFoundError, StockConflictError, ValidationError
from models.status import MovementType
from services import inventory

# Productos sembrados: 1 CC-600 (stock 150), 4 MAR-200 (stock 8, mínimo 15)
COCA_ID, GALLETAS_ID = 1, 4


@pytest.mark.parametrize(
    "new_quantity, expected_type, expected_quantity",
    [(180, MovementType.ENTRADA, 30), (100, MovementType.SALIDA, 50), (150, MovementType.AJUSTE, 0)],
)
def test_update_stock_infers_movement_type(gateway, new_quantity, expected_type, expected_quantity):
    movement = inventory.update_stock(gateway, COCA_ID, new_quantity, "Conteo físico", reference="INV-01")

    assert movement.id is not None
    assert movement.movement_type == expected_type
    assert movement.quantity == expected_quantity
    assert (movement.previous_quantity, movement.new_quantity) == (150, new_quantity)
    assert movement.reference == "INV-01"
    assert gateway.products.get(COCA_ID).stock == new_quantity


def test_update_stock_validates_input(gateway):
    with pytest.raises(ValidationError):
        inventory.update_stock(gateway, COCA_ID, -1, "Merma")
    with pytest.raises(ValidationError):
        inventory.update_stock(gateway, COCA_ID, 10, "   ")
    with pytest.raises(NotFoundError):
        inventory.update_stock(gateway, 999, 10, "Merma")

    assert gateway.inventory.movements() == []


def test_register_entry_and_exit(gateway):
    entry = inventory.register_movement(gateway, GALLETAS_ID, "entrada", 12, reason="Compra")
    exit_ = inventory.register_movement(gateway, GALLETAS_ID, MovementType.SALIDA, 5)

    assert (entry.previous_quantity, entry.new_quantity) == (8, 20)
    assert (exit_.previous_quantity, exit_.new_quantity) == (20, 15)
    assert gateway.products.get(GALLETAS_ID).stock == 15


def test_adjustment_sets_absolute_stock(gateway):
    movement = inventory.register_movement(gateway, GALLETAS_ID, MovementType.AJUSTE, 3, reason="Producto dañado")

    assert movement.movement_type == MovementType.AJUSTE
    assert (movement.quantity, movement.new_quantity) == (5, 3)
    assert gateway.products.get(GALLETAS_ID).stock == 3


def test_exit_larger_than_stock_is_rejected(gateway):
    with pytest.raises(ValidationError) as excinfo:
        inventory.register_movement(gateway, GALLETAS_ID, MovementType.SALIDA, 9)

    assert excinfo.value.context["stock"] == 8
    assert gateway.products.get(GALLETAS_ID).stock == 8
    assert gateway.inventory.movements(GALLETAS_ID) == []


@pytest.mark.parametrize(
    "movement_type, quantity",
    [("ENTRADA", 0), ("SALIDA", 0), ("AJUSTE", -1), ("TRANSFERENCIA", 5)],
)
def test_invalid_movements_are_rejected(gateway, movement_type, quantity):
    with pytest.raises(ValidationError):
        inventory.register_movement(gateway, COCA_ID, movement_type, quantity)


def test_stale_stock_is_rejected(gateway, monkeypatch):
    """Si otra petición cambia la existencia entre la lectura y la escritura, se rechaza."""
    real_get = gateway.products.get

    def get_then_change(product_id):
        product = real_get(product_id)
        snapshot = type(product).model_validate(product.model_dump())
        # Otro usuario registra una salida justo después de nuestra lectura
        gateway.products.update(product_id, {"stock": product.stock - 10})
        return snapshot

    monkeypatch.setattr(gateway.products, "get", get_then_change)

    with pytest.raises(StockConflictError) as excinfo:
        inventory.register_movement(gateway, COCA_ID, MovementType.ENTRADA, 5)

    assert (excinfo.value.context["expected"], excinfo.value.context["actual"]) == (150, 140)
    assert real_get(COCA_ID).stock == 140
    assert gateway.inventory.movements() == []


def test_movements_newest_first_and_filtered(gateway):
    inventory.register_movement(gateway, COCA_ID, MovementType.ENTRADA, 10)
    inventory.register_movement(gateway, GALLETAS_ID, MovementType.ENTRADA, 10)
    inventory.register_movement(gateway, COCA_ID, MovementType.SALIDA, 4)

    everything = inventory.list_movements(gateway)
    assert [m.product_id for m in everything] == [COCA_ID, GALLETAS_ID, COCA_ID]

    coca = inventory.list_movements(gateway, COCA_ID)
    assert [m.new_quantity for m in coca] == [156, 160]

    with pytest.raises(NotFoundError):
        inventory.list_movements(gateway, 999)


def test_low_stock_products(gateway):
    assert [p.sku for p in inventory.low_stock_products(gateway)] == ["MAR-200"]

    inventory.update_stock(gateway, COCA_ID, 5, "Merma")
    assert [p.sku for p in inventory.low_stock_products(gateway)] == ["CC-600", "MAR-200"]

    inventory.register_movement(gateway, GALLETAS_ID, MovementType.ENTRADA, 7)
    assert [p.sku for p in inventory.low_stock_products(gateway)] == ["CC-600"]


def test_low_stock_ignores_inactive_products(gateway):
    gateway.products.update(GALLETAS_ID, {"active": False})
    assert inventory.low_stock_products(gateway) == []
