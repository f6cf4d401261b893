from datetime import datetime
from typing import Optional, List, TYPE_CHECKING
from sqlmodel import Field, SQLModel, Relationship

from core.clock import utcnow
from models.status import OrderStatus


class Order(SQLModel, table=True):
    __tablename__ = "orders"
    
    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: Optional[str] = Field(default=None, max_length=20, index=True)
    
    # Claves Foráneas
    client_id: int = Field(foreign_key="clients.id", index=True)
    total: float = Field(ge=0, description="Total del pedido (IVA incluido)")
    status: OrderStatus = Field(default=OrderStatus.PENDIENTE, index=True)
    notes: Optional[str] = Field(default=None, max_length=255)
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)

    # Relaciones
    client: Optional["Client"] = Relationship(back_populates="orders")
    lines: List["OrderLine"] = Relationship(back_populates="order")
    history: List["OrderStatusHistory"] = Relationship(back_populates="order")
    invoices: List["Invoice"] = Relationship(back_populates="order")


class OrderStatusHistory(SQLModel, table=True):
    """Bitácora de cambios de estado de un pedido."""
    __tablename__ = "order_status_history"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True)
    from_status: Optional[OrderStatus] = Field(default=None)
    to_status: OrderStatus
    changed_at: datetime = Field(default_factory=utcnow)

    order: Optional[Order] = Relationship(back_populates="history")


def format_order_number(order_id: int) -> str:
    return f"PED-{order_id:06d}"


if TYPE_CHECKING:
    from models.clients import Client
    from models.order_items import OrderLine
    from models.invoices import Invoice
