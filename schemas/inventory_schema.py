from sqlmodel import SQLModel, Field
from typing import List, Optional
from datetime import datetime

from models.status import MovementType
from schemas.pagination_schema import PageMetadata

# --- Esquemas de Entrada ---

class StockUpdate(SQLModel):
    """Fija la existencia de un producto (el tipo de movimiento se deduce)."""
    quantity: int = Field(ge=0)
    reason: str = Field(min_length=1, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=50)

class MovementCreate(SQLModel):
    movement_type: MovementType
    quantity: int = Field(ge=0, description="Unidades a mover; en AJUSTE, la existencia final")
    reason: Optional[str] = Field(default=None, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=50)

# --- Esquemas de Lectura ---

class InventoryMovementRead(SQLModel):
    id: int
    product_id: int
    movement_type: MovementType
    quantity: int
    previous_quantity: int
    new_quantity: int
    reason: Optional[str]
    reference: Optional[str]
    created_at: datetime

class InventoryMovementListResponse(SQLModel):
    data: List[InventoryMovementRead]
    metadata: PageMetadata
