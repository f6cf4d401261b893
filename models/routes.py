from datetime import datetime
from typing import Optional, List
from sqlmodel import Field, SQLModel, Relationship

from core.clock import utcnow

class Route(SQLModel, table=True):
    """Modelo para 'routes' (rutas de reparto/venta)."""
    __tablename__ = "routes"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=50, unique=True, nullable=False)
    description: Optional[str] = Field(default=None, max_length=100)
    salesperson: Optional[str] = Field(default=None, max_length=100, description="Vendedor asignado")
    active: bool = Field(default=True, nullable=False)

    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)

    # Relaciones
    clients: List["Client"] = Relationship(back_populates="route")

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.clients import Client
