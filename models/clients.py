from datetime import datetime
from typing import Optional, List
from sqlmodel import Field, SQLModel, Relationship

from core.clock import utcnow

class Client(SQLModel, table=True):
    __tablename__ = "clients"
    
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, nullable=False, index=True)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=100)
    active: bool = Field(default=True, nullable=False)
    
    # Clave Foránea
    route_id: Optional[int] = Field(default=None, foreign_key="routes.id")
    
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)

    # Relaciones
    route: Optional["Route"] = Relationship(back_populates="clients")
    orders: List["Order"] = Relationship(back_populates="client")

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.routes import Route
    from models.orders import Order
