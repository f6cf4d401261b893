from datetime import datetime
from typing import Optional
from sqlmodel import Field, SQLModel, Relationship

from core.clock import utcnow
from models.status import InvoiceStatus


class Invoice(SQLModel, table=True):
    """Modelo para 'invoices' (Facturas)."""
    __tablename__ = "invoices"
    
    id: Optional[int] = Field(default=None, primary_key=True)
    folio: str = Field(max_length=20, unique=True, nullable=False)
    series: str = Field(default="A", max_length=1)
    
    # Claves Foráneas
    order_id: int = Field(foreign_key="orders.id", index=True)
    client_id: int = Field(foreign_key="clients.id")
    # Igual a order_id mientras la factura no esté cancelada; NULL al cancelarse.
    # El índice único impide dos facturas vivas para el mismo pedido.
    active_order_id: Optional[int] = Field(default=None, unique=True)

    # Campos de Dinero
    subtotal: float = Field(ge=0)
    tax: float = Field(ge=0)
    total: float = Field(ge=0)

    payment_method: str = Field(default="01", max_length=2)
    payment_form: str = Field(default="01", max_length=2)
    cfdi_use: str = Field(default="G03", max_length=4)
    uuid_sat: Optional[str] = Field(default=None, max_length=36)
    status: InvoiceStatus = Field(default=InvoiceStatus.VIGENTE)
    notes: Optional[str] = Field(default=None, max_length=255)
    
    issued_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)

    # Relaciones
    order: "Order" = Relationship(back_populates="invoices")


class FolioSequence(SQLModel, table=True):
    """Contador de folios; se incrementa de forma atómica en la misma transacción que la factura."""
    __tablename__ = "folio_sequences"

    name: str = Field(primary_key=True, max_length=10)
    last_value: int = Field(default=0, ge=0)


from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.orders import Order


FOLIO_PREFIX = "FAC"


def format_folio(number: int) -> str:
    """1 → 'FAC-000001'."""
    return f"{FOLIO_PREFIX}-{number:06d}"


def parse_folio(folio: Optional[str]) -> int:
    """Extrae la parte numérica del folio ('FAC-000041' → 41). Sin dígitos → 0."""
    if not folio:
        return 0
    digits = "".join(ch for ch in folio if ch.isdigit())
    return int(digits) if digits else 0
