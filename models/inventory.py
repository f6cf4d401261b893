from datetime import datetime
from typing import Optional
from sqlmodel import Field, SQLModel

from core.clock import utcnow
from models.status import MovementType


class InventoryMovement(SQLModel, table=True):
    """Bitácora de cambios de existencia de un producto."""
    __tablename__ = "inventory_movements"

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    movement_type: MovementType
    quantity: int = Field(ge=0, description="Unidades movidas (valor absoluto)")
    previous_quantity: int = Field(ge=0)
    new_quantity: int = Field(ge=0)
    reason: Optional[str] = Field(default=None, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=50)
    created_at: datetime = Field(default_factory=utcnow)
