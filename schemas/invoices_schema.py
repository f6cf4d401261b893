from sqlmodel import SQLModel, Field
from typing import List, Optional
from datetime import datetime

from models.status import InvoiceStatus, PaymentMethod
from schemas.pagination_schema import PageMetadata

# ----------------------------------------------------------------------
# SCHEMAS DE LA FACTURA
# ----------------------------------------------------------------------

class InvoiceCreate(SQLModel):
    """Datos para facturar un pedido entregado."""
    order_id: int
    series: str = Field(default="A", max_length=1, description="Serie A, B o C")
    payment_method: PaymentMethod = Field(default=PaymentMethod.EFECTIVO, description="Clave del método de pago")
    notes: Optional[str] = Field(default=None, max_length=255)

class InvoiceRead(SQLModel):
    id: int
    folio: str
    series: str
    order_id: int
    client_id: int
    subtotal: float
    tax: float
    total: float
    payment_method: str
    payment_form: str
    cfdi_use: str
    uuid_sat: Optional[str]
    status: InvoiceStatus
    notes: Optional[str]
    issued_at: datetime
    updated_at: datetime

class PendingOrderRead(SQLModel):
    """Pedido entregado que todavía no se ha facturado."""
    id: int
    order_number: Optional[str]
    client_id: int
    client_name: str
    created_at: datetime
    total: float
    items_count: int

class InvoiceListResponse(SQLModel):
    data: List[InvoiceRead]
    metadata: PageMetadata
