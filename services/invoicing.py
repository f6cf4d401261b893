"""
Emisión de facturas a partir de pedidos entregados.

Reglas:
  - Solo se factura un pedido en estado Entregado que no tenga ya una factura
    no cancelada (relación 1:1 con facturas vivas).
  - El total del pedido ya incluye IVA al 16%:
        subtotal = total / 1.16
        iva      = total - subtotal
    Ambos redondeados a 2 decimales.
  - El folio es secuencial y global: FAC-000001, FAC-000002, ...
    El número lo reserva el almacén de forma atómica.
  - Cancelar una factura no modifica el estado del pedido y deja al pedido
    disponible para facturarse de nuevo.

Los campos tipo CFDI (uuid_sat, uso_cfdi, forma de pago) son solo
informativos; no se genera ningún comprobante fiscal real.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional, Union

from core.clock import utcnow
from core.errors import DuplicateInvoiceError, NotFoundError, OrderNotDeliveredError, ValidationError
from models.invoices import Invoice, format_folio
from models.orders import Order
from models.status import INVOICE_SERIES, InvoiceStatus, OrderStatus, PaymentMethod
from repositories.base import Gateway, OrderFilter

logger = logging.getLogger(__name__)

TAX_RATE = 0.16
DEFAULT_PAYMENT_FORM = "01"  # Efectivo
DEFAULT_CFDI_USE = "G03"  # Gastos en general


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    tax: float
    total: float


def compute_totals(total: float) -> InvoiceTotals:
    """Desglosa un total con IVA incluido: 450.00 → 387.93 + 62.07."""
    subtotal = round(total / (1 + TAX_RATE), 2)
    tax = round(total - subtotal, 2)
    return InvoiceTotals(subtotal=subtotal, tax=tax, total=round(total, 2))


def _coerce_payment_method(value: Union[str, PaymentMethod]) -> PaymentMethod:
    try:
        return value if isinstance(value, PaymentMethod) else PaymentMethod(str(value))
    except ValueError:
        raise ValidationError(
            f"Método de pago inválido: '{value}'.",
            field="payment_method",
            allowed=[m.value for m in PaymentMethod],
        ) from None


def _validate_series(series: str) -> str:
    normalized = (series or "").strip().upper()
    if normalized not in INVOICE_SERIES:
        raise ValidationError(f"Serie inválida: '{series}'.", field="series", allowed=list(INVOICE_SERIES))
    return normalized


def derive_invoice(
    gateway: Gateway,
    order_id: int,
    series: str = "A",
    payment_method: Union[str, PaymentMethod] = PaymentMethod.EFECTIVO,
    notes: Optional[str] = None,
) -> Invoice:
    """Genera y guarda la factura (estado Vigente) de un pedido entregado."""
    series = _validate_series(series)
    method = _coerce_payment_method(payment_method)

    order = gateway.orders.get(order_id)
    if order is None:
        raise NotFoundError("Pedido", order_id)

    if order.status != OrderStatus.ENTREGADO:
        logger.warning("Pedido %s no facturable: estado %s", order_id, order.status.value)
        raise OrderNotDeliveredError(order_id, order.status)

    existing = gateway.invoices.find_by_order(order_id)
    if existing is not None:
        logger.warning("Pedido %s ya tiene la factura %s (%s)", order_id, existing.id, existing.folio)
        raise DuplicateInvoiceError(order_id, existing.id)

    totals = compute_totals(order.total)
    folio = format_folio(gateway.invoices.next_folio())

    invoice = Invoice(
        folio=folio,
        series=series,
        order_id=order.id,
        client_id=order.client_id,
        subtotal=totals.subtotal,
        tax=totals.tax,
        total=totals.total,
        payment_method=method.value,
        payment_form=DEFAULT_PAYMENT_FORM,
        cfdi_use=DEFAULT_CFDI_USE,
        uuid_sat=str(uuid.uuid4()),
        status=InvoiceStatus.VIGENTE,
        notes=notes,
        issued_at=utcnow(),
    )
    invoice_id = gateway.invoices.create(invoice)

    logger.info("Factura %s emitida para pedido %s (total %.2f)", folio, order_id, totals.total)
    return gateway.invoices.get(invoice_id)


def cancel_invoice(gateway: Gateway, invoice_id: int) -> Invoice:
    """Marca la factura como Cancelada. Idempotente; el pedido no se toca."""
    invoice = gateway.invoices.get(invoice_id)
    if invoice is None:
        raise NotFoundError("Factura", invoice_id)

    if invoice.status == InvoiceStatus.CANCELADA:
        return invoice

    cancelled = gateway.invoices.update_status(invoice_id, InvoiceStatus.CANCELADA)
    logger.info("Factura %s (%s) cancelada", invoice_id, cancelled.folio)
    return cancelled


def orders_pending_invoice(gateway: Gateway) -> List[Order]:
    """Pedidos entregados que aún no tienen una factura viva."""
    invoiced = {
        invoice.order_id
        for invoice in gateway.invoices.list()
        if invoice.status != InvoiceStatus.CANCELADA
    }
    delivered = gateway.orders.list(OrderFilter(status=OrderStatus.ENTREGADO))
    return [order for order in delivered if order.id not in invoiced]
