from sqlmodel import SQLModel, Field
from typing import List, Optional
from datetime import datetime

from models.status import OrderStatus
from schemas.order_items_schema import CartLineRead, OrderItemCreate, OrderLineRead
from schemas.pagination_schema import PageMetadata

# --- Esquemas de Creación (Input) ---

class OrderCreate(SQLModel):
    """Datos del asistente: cliente elegido + carrito. Se usa para la vista previa y para confirmar."""
    client_id: Optional[int] = None
    items: List[OrderItemCreate] = []
    notes: Optional[str] = Field(default=None, max_length=255)

# --- Esquemas de Lectura ---

class OrderRead(SQLModel):
    id: int
    order_number: Optional[str]
    client_id: int
    total: float
    status: OrderStatus
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

class OrderReadFull(OrderRead):
    lines: List[OrderLineRead] = []
    allowed_actions: List[str] = []

class OrderListResponse(SQLModel):
    data: List[OrderRead]
    metadata: PageMetadata

class OrderStatusHistoryRead(SQLModel):
    from_status: Optional[OrderStatus]
    to_status: OrderStatus
    changed_at: datetime

class OrderPreview(SQLModel):
    """Lo que muestra el paso de confirmación antes de guardar."""
    client_id: int
    client_name: str
    lines: List[CartLineRead]
    item_count: int
    subtotal: float
    tax: float
    total: float

class OrderStatsRead(SQLModel):
    total: int
    pending: int
    on_route: int
    delivered: int
    cancelled: int
    sales_total: float
    average_order: float
