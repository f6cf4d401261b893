from fastapi import APIRouter, Query, status
from dataclasses import asdict
from datetime import datetime
from typing import List, Optional

from core.dependencies import GatewayDep
from core.errors import NotFoundError
from models.orders import Order
from models.status import OrderStatus, TransitionDirection
from repositories.base import Gateway, OrderFilter
from schemas.orders_schema import (
    OrderCreate,
    OrderListResponse,
    OrderPreview,
    OrderReadFull,
    OrderStatsRead,
    OrderStatusHistoryRead,
)
from schemas.pagination_schema import paginate
from services import order_fsm
from services.order_builder import OrderWizard, WizardStep
from services.order_stats import order_statistics

router = APIRouter(
    prefix="/api/orders",
    tags=["ORDERS"],
)


def _run_wizard(gateway: Gateway, order_data: OrderCreate) -> OrderWizard:
    """Recorre los pasos del asistente con los datos recibidos y lo deja en confirmación."""
    wizard = OrderWizard(gateway)
    if order_data.client_id is not None:
        wizard.select_client(order_data.client_id)
    wizard.go_to(WizardStep.CART)
    for item in order_data.items:
        wizard.add_item(item.product_id, item.quantity)
    wizard.go_to(WizardStep.CONFIRM)
    return wizard


def _full_order(gateway: Gateway, order: Order) -> OrderReadFull:
    data = order.model_dump()
    data["lines"] = [line.model_dump() for line in gateway.orders.lines(order.id)]
    data["allowed_actions"] = [d.value for d in order_fsm.allowed_directions(order.status)]
    return OrderReadFull.model_validate(data)


def _get_order(gateway: Gateway, order_id: int) -> Order:
    order = gateway.orders.get(order_id)
    if order is None:
        raise NotFoundError("Pedido", order_id)
    return order

# ==========================================================
# GET → Listar pedidos con filtros y metadatos
# ==========================================================
@router.get("", response_model=OrderListResponse)
def list_orders(
    gateway: GatewayDep,
    client_id: Optional[int] = Query(None, description="Filtrar por cliente"),
    order_status: Optional[OrderStatus] = Query(None, alias="status", description="Filtrar por estado del pedido"),
    created_from: Optional[datetime] = Query(None, description="Desde fecha de creación"),
    created_to: Optional[datetime] = Query(None, description="Hasta fecha de creación"),
    limit: int = Query(20, ge=1, le=100, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Desplazamiento"),
):
    """Lista los pedidos con filtros, paginación y metadatos, más recientes primero."""
    filters = OrderFilter(
        client_id=client_id,
        status=order_status,
        created_from=created_from,
        created_to=created_to,
    )
    return paginate(gateway.orders.list(filters), limit, offset)

# ==========================================================
# GET → Estadísticas de pedidos
# ==========================================================
@router.get("/stats", response_model=OrderStatsRead)
def get_order_stats(gateway: GatewayDep):
    stats = order_statistics(gateway.orders.list())
    return OrderStatsRead(**asdict(stats))

# ==========================================================
# POST → Vista previa (paso de confirmación, sin guardar)
# ==========================================================
@router.post("/preview", response_model=OrderPreview)
def preview_order(order_data: OrderCreate, gateway: GatewayDep):
    """Calcula subtotal, IVA (16%) y total del carrito sin crear el pedido."""
    wizard = _run_wizard(gateway, order_data)
    summary = wizard.summary()
    return OrderPreview(
        client_id=summary.client.id,
        client_name=summary.client.name,
        lines=[
            {
                "product_id": line.product_id,
                "name": line.name,
                "sku": line.sku,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "stock": line.stock,
                "subtotal": line.subtotal,
            }
            for line in summary.lines
        ],
        item_count=summary.item_count,
        subtotal=summary.subtotal,
        tax=summary.tax,
        total=summary.total,
    )

# ==========================================================
# POST → Crear un pedido (confirmación del asistente)
# ==========================================================
@router.post("", response_model=OrderReadFull, status_code=status.HTTP_201_CREATED)
def create_order(order_data: OrderCreate, gateway: GatewayDep):
    """Crea el pedido en estado Pendiente con una copia inmutable de sus renglones."""
    wizard = _run_wizard(gateway, order_data)
    order_id = wizard.commit(notes=order_data.notes)
    return _full_order(gateway, _get_order(gateway, order_id))

# ==========================================================
# GET → Obtener un pedido específico
# ==========================================================
@router.get("/{order_id}", response_model=OrderReadFull)
def read_order(order_id: int, gateway: GatewayDep):
    """Obtiene un pedido con sus renglones y las acciones de estado disponibles."""
    return _full_order(gateway, _get_order(gateway, order_id))

# ==========================================================
# GET → Bitácora de estados
# ==========================================================
@router.get("/{order_id}/history", response_model=List[OrderStatusHistoryRead])
def read_order_history(order_id: int, gateway: GatewayDep):
    _get_order(gateway, order_id)
    return gateway.orders.history(order_id)

# ==========================================================
# POST → Cambiar estado (advance / revert / cancel)
# ==========================================================
@router.post("/{order_id}/{direction}", response_model=OrderReadFull)
def change_order_status(order_id: int, direction: TransitionDirection, gateway: GatewayDep):
    """
    Avanza, regresa o cancela el pedido según la tabla de transiciones.
    Responde 409 si la transición no es válida o si otro usuario cambió el pedido antes.
    """
    order = order_fsm.transition(gateway, order_id, direction)
    return _full_order(gateway, order)
