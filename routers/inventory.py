from fastapi import APIRouter, Query, status
from typing import List, Optional

from core.dependencies import GatewayDep
from schemas.inventory_schema import (
    InventoryMovementListResponse,
    InventoryMovementRead,
    MovementCreate,
    StockUpdate,
)
from schemas.pagination_schema import paginate
from schemas.products_schema import ProductRead
from services import inventory

router = APIRouter(
    prefix="/api/inventory",
    tags=["INVENTORY"],
)


# ======================================================================
# RUTAS DE LECTURA (GET)
# ======================================================================

# 1. GET → Productos con existencia por debajo del mínimo
@router.get("/low-stock", response_model=List[ProductRead])
def list_low_stock(gateway: GatewayDep):
    return inventory.low_stock_products(gateway)


# 2. GET → Bitácora de movimientos
@router.get("/movements", response_model=InventoryMovementListResponse)
def list_movements(
    gateway: GatewayDep,
    product_id: Optional[int] = Query(None, description="Filtrar por producto"),
    limit: int = Query(20, ge=1, le=100, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Desplazamiento"),
):
    """Movimientos más recientes primero."""
    return paginate(inventory.list_movements(gateway, product_id), limit, offset)


# ======================================================================
# RUTAS DE ESCRITURA
# ======================================================================

# 3. PUT → Fijar la existencia de un producto
@router.put("/{product_id}/stock", response_model=InventoryMovementRead)
def update_stock(product_id: int, stock_data: StockUpdate, gateway: GatewayDep):
    return inventory.update_stock(
        gateway, product_id, stock_data.quantity, stock_data.reason, stock_data.reference
    )


# 4. POST → Registrar entrada, salida o ajuste
@router.post(
    "/{product_id}/movements",
    response_model=InventoryMovementRead,
    status_code=status.HTTP_201_CREATED,
)
def register_movement(product_id: int, movement_data: MovementCreate, gateway: GatewayDep):
    return inventory.register_movement(
        gateway,
        product_id,
        movement_data.movement_type,
        movement_data.quantity,
        movement_data.reason,
        movement_data.reference,
    )
