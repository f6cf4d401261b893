from sqlmodel import SQLModel, Field


class OrderItemCreate(SQLModel):
    product_id: int
    quantity: int = Field(default=1, ge=1, description="Se recorta al stock disponible")


class OrderLineRead(SQLModel):
    product_id: int
    product_name: str
    sku: str
    quantity: int
    unit_price: float
    subtotal: float


class CartLineRead(SQLModel):
    """Renglón del carrito en la vista previa (cantidad ya recortada al stock)."""
    product_id: int
    name: str
    sku: str
    unit_price: float
    quantity: int
    stock: int
    subtotal: float
