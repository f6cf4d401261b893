from fastapi import APIRouter, Query, status
from typing import List

from core.dependencies import GatewayDep
from core.errors import NotFoundError
from schemas.invoices_schema import InvoiceCreate, InvoiceListResponse, InvoiceRead, PendingOrderRead
from schemas.pagination_schema import paginate
from services import invoicing

# Configuración del Router
router = APIRouter(tags=["INVOICES"], prefix="/api/invoices")


# ======================================================================
# RUTAS DE LECTURA (GET)
# ======================================================================

# 1. GET → Listar facturas
@router.get("", response_model=InvoiceListResponse, status_code=status.HTTP_200_OK)
def list_invoices(
    gateway: GatewayDep,
    limit: int = Query(20, ge=1, le=100, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Desplazamiento"),
):
    """Lista las facturas con paginación, más recientes primero."""
    return paginate(gateway.invoices.list(), limit, offset)


# 2. GET → Pedidos entregados sin facturar
@router.get("/pending-orders", response_model=List[PendingOrderRead])
def list_orders_pending_invoice(gateway: GatewayDep):
    """Pedidos en estado Entregado que todavía no tienen una factura vigente."""
    pending = []
    for order in invoicing.orders_pending_invoice(gateway):
        client = gateway.clients.get(order.client_id)
        pending.append(
            PendingOrderRead(
                id=order.id,
                order_number=order.order_number,
                client_id=order.client_id,
                client_name=client.name if client else "Cliente Desconocido",
                created_at=order.created_at,
                total=order.total,
                items_count=len(gateway.orders.lines(order.id)),
            )
        )
    return pending


# 3. GET → Leer Factura Específica
@router.get("/{invoice_id}", response_model=InvoiceRead)
def read_invoice(invoice_id: int, gateway: GatewayDep):
    invoice = gateway.invoices.get(invoice_id)
    if invoice is None:
        raise NotFoundError("Factura", invoice_id)
    return invoice


# ======================================================================
# RUTAS DE CREACIÓN (POST)
# ======================================================================

# 4. POST → Facturar un pedido entregado
@router.post("", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
def create_invoice(invoice_data: InvoiceCreate, gateway: GatewayDep):
    """
    Genera la factura de un pedido Entregado. El folio se asigna en secuencia
    (FAC-000001, FAC-000002, ...) y el total del pedido se desglosa en
    subtotal + IVA 16%.
    """
    return invoicing.derive_invoice(
        gateway,
        invoice_data.order_id,
        series=invoice_data.series,
        payment_method=invoice_data.payment_method,
        notes=invoice_data.notes,
    )


# ======================================================================
# RUTAS DE ACTUALIZACIÓN (PATCH)
# ======================================================================

# 5. PATCH → Cancelar Factura
@router.patch("/{invoice_id}/cancel", response_model=InvoiceRead, status_code=status.HTTP_200_OK)
def cancel_invoice(invoice_id: int, gateway: GatewayDep):
    """Cancela la factura (idempotente). El estado del pedido no cambia."""
    return invoicing.cancel_invoice(gateway, invoice_id)
