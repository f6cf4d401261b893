from typing import Optional, TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship

if TYPE_CHECKING:
    from models.orders import Order


class OrderLine(SQLModel, table=True):
    """Renglón de un pedido: copia inmutable del producto al momento de confirmar."""
    __tablename__ = "order_lines"
    
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: Optional[int] = Field(default=None, foreign_key="orders.id", index=True)
    product_id: int = Field(foreign_key="products.id")
    product_name: str = Field(max_length=100)
    sku: str = Field(max_length=30)

    quantity: int = Field(gt=0, description="Cantidad del producto en el pedido")
    unit_price: float = Field(gt=0, description="Precio del producto al momento del pedido")
    subtotal: float = Field(ge=0)

    # Relaciones
    order: Optional["Order"] = Relationship(back_populates="lines")
