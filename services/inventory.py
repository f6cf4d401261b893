"""
Existencias de productos y su bitácora de movimientos.

Cada cambio de existencia queda registrado con la cantidad anterior y la nueva.
El ajuste se aplica con compare-and-swap sobre la existencia leída; si otra
petición la cambió antes, se rechaza con StockConflictError.

Crear o confirmar pedidos no descuenta existencia; solo estas operaciones lo hacen.
"""

import logging
from typing import List, Optional, Union

from core.errors import NotFoundError, ValidationError
from models.inventory import InventoryMovement
from models.products import Product
from models.status import MovementType
from repositories.base import Gateway

logger = logging.getLogger(__name__)


def _get_product(gateway: Gateway, product_id: int) -> Product:
    product = gateway.products.get(product_id)
    if product is None:
        raise NotFoundError("Producto", product_id)
    return product


def _coerce_movement_type(value: Union[str, MovementType]) -> MovementType:
    try:
        return value if isinstance(value, MovementType) else MovementType(str(value).upper())
    except ValueError:
        raise ValidationError(
            f"Tipo de movimiento inválido: '{value}'.",
            field="movement_type",
            allowed=[t.value for t in MovementType],
        ) from None


def _apply(
    gateway: Gateway,
    product: Product,
    movement_type: MovementType,
    new_quantity: int,
    reason: Optional[str],
    reference: Optional[str],
) -> InventoryMovement:
    movement = InventoryMovement(
        product_id=product.id,
        movement_type=movement_type,
        quantity=abs(new_quantity - product.stock),
        previous_quantity=product.stock,
        new_quantity=new_quantity,
        reason=reason,
        reference=reference,
    )
    saved = gateway.inventory.change_stock(product.id, product.stock, movement)
    logger.info(
        "Existencia de %s: %s → %s (%s)",
        product.sku, saved.previous_quantity, saved.new_quantity, movement_type.value,
    )
    return saved


def update_stock(
    gateway: Gateway,
    product_id: int,
    new_quantity: int,
    reason: str,
    reference: Optional[str] = None,
) -> InventoryMovement:
    """
    Fija la existencia del producto. El tipo de movimiento se deduce:
    ENTRADA si sube, SALIDA si baja, AJUSTE si queda igual.
    """
    if new_quantity is None or new_quantity < 0:
        raise ValidationError("La existencia no puede ser negativa.", field="quantity", quantity=new_quantity)
    if not (reason or "").strip():
        raise ValidationError("Indica el motivo del cambio de existencia.", field="reason")

    product = _get_product(gateway, product_id)
    if new_quantity > product.stock:
        movement_type = MovementType.ENTRADA
    elif new_quantity < product.stock:
        movement_type = MovementType.SALIDA
    else:
        movement_type = MovementType.AJUSTE
    return _apply(gateway, product, movement_type, new_quantity, reason.strip(), reference)


def register_movement(
    gateway: Gateway,
    product_id: int,
    movement_type: Union[str, MovementType],
    quantity: int,
    reason: Optional[str] = None,
    reference: Optional[str] = None,
) -> InventoryMovement:
    """
    Registra una entrada, salida o ajuste y lo aplica a la existencia.

    ENTRADA y SALIDA mueven `quantity` unidades (al menos 1); AJUSTE fija la
    existencia en `quantity`. Una salida mayor a la existencia se rechaza.
    """
    movement_type = _coerce_movement_type(movement_type)
    product = _get_product(gateway, product_id)

    if movement_type == MovementType.AJUSTE:
        if quantity is None or quantity < 0:
            raise ValidationError("La existencia no puede ser negativa.", field="quantity", quantity=quantity)
        new_quantity = quantity
    else:
        if quantity is None or quantity < 1:
            raise ValidationError("La cantidad debe ser mayor a 0.", field="quantity", quantity=quantity)
        if movement_type == MovementType.ENTRADA:
            new_quantity = product.stock + quantity
        else:
            new_quantity = product.stock - quantity
            if new_quantity < 0:
                raise ValidationError(
                    f"Existencia insuficiente de '{product.name}': hay {product.stock}, se piden {quantity}.",
                    product_id=product_id,
                    stock=product.stock,
                    quantity=quantity,
                )

    return _apply(gateway, product, movement_type, new_quantity, reason, reference)


def list_movements(gateway: Gateway, product_id: Optional[int] = None) -> List[InventoryMovement]:
    if product_id is not None:
        _get_product(gateway, product_id)
    return gateway.inventory.movements(product_id)


def low_stock_products(gateway: Gateway) -> List[Product]:
    """Productos activos con existencia por debajo de su mínimo, los más escasos primero."""
    products = [p for p in gateway.products.list_active() if p.stock < p.min_stock]
    return sorted(products, key=lambda p: (p.stock, p.name))
