from sqlmodel import Field, SQLModel
from typing import Optional
from datetime import datetime

from core.clock import utcnow

class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, index=True)
    sku: str = Field(max_length=30, index=True, description="Clave única entre productos activos (mayúsculas)")
    category: Optional[str] = Field(default=None, max_length=50)
    price: float = Field(gt=0, description="Precio unitario (IVA incluido)")
    stock: int = Field(default=0, ge=0, description="Existencia disponible")
    min_stock: int = Field(default=0, ge=0)
    active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
