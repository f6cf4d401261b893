import threading

import pytest

from core.errors import (
    DuplicateFolioError,
    DuplicateInvoiceError,
    NotFoundError,
    OrderNotDeliveredError,
    ValidationError,
)
from models.invoices import Invoice, format_folio, parse_folio
from models.status import InvoiceStatus, OrderStatus, PaymentMethod
from services import invoicing, order_fsm

# Pedidos sembrados: 1 Pendiente, 2 Entregado (192.00), 3 En Ruta (187.50)
PENDING_ID, DELIVERED_ID, ON_ROUTE_ID = 1, 2, 3


def test_compute_totals_tax_included():
    totals = invoicing.compute_totals(450.0)
    assert (totals.subtotal, totals.tax, totals.total) == (387.93, 62.07, 450.0)


def test_compute_totals_parts_add_up():
    totals = invoicing.compute_totals(187.5)
    assert round(totals.subtotal + totals.tax, 2) == totals.total


def test_folio_helpers():
    assert format_folio(1) == "FAC-000001"
    assert parse_folio("FAC-000041") == 41
    assert parse_folio("SIN-NUMERO") == 0
    assert parse_folio(None) == 0


def test_first_invoice_gets_first_folio(gateway):
    invoice = invoicing.derive_invoice(gateway, DELIVERED_ID)

    assert invoice.folio == "FAC-000001"
    assert invoice.status == InvoiceStatus.VIGENTE
    assert invoice.order_id == DELIVERED_ID
    assert invoice.client_id == gateway.orders.get(DELIVERED_ID).client_id
    assert (invoice.subtotal, invoice.tax, invoice.total) == (165.52, 26.48, 192.0)
    assert invoice.payment_form == "01"
    assert invoice.cfdi_use == "G03"
    assert invoice.uuid_sat


def test_folios_are_sequential(gateway):
    order_fsm.advance(gateway, ON_ROUTE_ID)

    first = invoicing.derive_invoice(gateway, DELIVERED_ID)
    second = invoicing.derive_invoice(gateway, ON_ROUTE_ID, series="b", payment_method="03")

    assert (first.folio, second.folio) == ("FAC-000001", "FAC-000002")
    assert second.series == "B"
    assert second.payment_method == PaymentMethod.TRANSFERENCIA.value


def test_second_invoice_for_same_order_is_rejected(gateway):
    first = invoicing.derive_invoice(gateway, DELIVERED_ID)

    with pytest.raises(DuplicateInvoiceError) as excinfo:
        invoicing.derive_invoice(gateway, DELIVERED_ID)

    assert excinfo.value.invoice_id == first.id
    assert len(gateway.invoices.list()) == 1


@pytest.mark.parametrize("order_id", [PENDING_ID, ON_ROUTE_ID])
def test_undelivered_order_is_not_invoiced(gateway, order_id):
    with pytest.raises(OrderNotDeliveredError):
        invoicing.derive_invoice(gateway, order_id)
    assert gateway.invoices.list() == []


def test_reverted_delivery_cannot_be_invoiced(gateway):
    order_fsm.revert(gateway, DELIVERED_ID)

    with pytest.raises(OrderNotDeliveredError) as excinfo:
        invoicing.derive_invoice(gateway, DELIVERED_ID)
    assert excinfo.value.context["status"] == OrderStatus.EN_RUTA.value


def test_missing_order_raises_not_found(gateway):
    with pytest.raises(NotFoundError):
        invoicing.derive_invoice(gateway, 999)


def test_invalid_series_and_payment_method(gateway):
    with pytest.raises(ValidationError):
        invoicing.derive_invoice(gateway, DELIVERED_ID, series="Z")
    with pytest.raises(ValidationError):
        invoicing.derive_invoice(gateway, DELIVERED_ID, payment_method="99")


def test_cancel_is_idempotent_and_keeps_order_status(gateway):
    invoice = invoicing.derive_invoice(gateway, DELIVERED_ID)

    cancelled = invoicing.cancel_invoice(gateway, invoice.id)
    again = invoicing.cancel_invoice(gateway, invoice.id)

    assert cancelled.status == InvoiceStatus.CANCELADA
    assert again.status == InvoiceStatus.CANCELADA
    assert gateway.orders.get(DELIVERED_ID).status == OrderStatus.ENTREGADO


def test_cancelled_invoice_allows_reinvoicing(gateway):
    first = invoicing.derive_invoice(gateway, DELIVERED_ID)
    invoicing.cancel_invoice(gateway, first.id)

    second = invoicing.derive_invoice(gateway, DELIVERED_ID)

    assert second.folio == "FAC-000002"
    assert gateway.invoices.find_by_order(DELIVERED_ID).id == second.id


def test_cancel_missing_invoice(gateway):
    with pytest.raises(NotFoundError):
        invoicing.cancel_invoice(gateway, 999)


def test_orders_pending_invoice(gateway):
    assert [o.id for o in invoicing.orders_pending_invoice(gateway)] == [DELIVERED_ID]

    invoice = invoicing.derive_invoice(gateway, DELIVERED_ID)
    assert invoicing.orders_pending_invoice(gateway) == []

    invoicing.cancel_invoice(gateway, invoice.id)
    assert [o.id for o in invoicing.orders_pending_invoice(gateway)] == [DELIVERED_ID]


def test_sequence_continues_after_existing_folios(gateway):
    # Facturas previas (por ejemplo, migradas) sin pasar por la secuencia
    gateway.invoices.create(
        Invoice(
            folio="FAC-000041",
            order_id=PENDING_ID,
            client_id=1,
            subtotal=128.88,
            tax=20.62,
            total=149.5,
            status=InvoiceStatus.CANCELADA,
        )
    )

    invoice = invoicing.derive_invoice(gateway, DELIVERED_ID)

    assert invoice.folio == "FAC-000042"


def test_concurrent_invoicing_yields_single_live_invoice(seeded_gateway):
    results = []
    errors = []
    barrier = threading.Barrier(6)

    def worker():
        barrier.wait()
        try:
            results.append(invoicing.derive_invoice(seeded_gateway, DELIVERED_ID))
        except DuplicateInvoiceError as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 1
    assert len(errors) == 5
    live = [i for i in seeded_gateway.invoices.list() if i.status != InvoiceStatus.CANCELADA]
    assert len(live) == 1


def test_concurrent_folios_are_unique(seeded_gateway):
    folios = []
    lock = threading.Lock()

    def worker():
        for _ in range(25):
            number = seeded_gateway.invoices.next_folio()
            with lock:
                folios.append(number)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(folios) == list(range(1, 101))


def cancelled_invoice(folio, order_id=PENDING_ID):
    return Invoice(
        folio=folio,
        order_id=order_id,
        client_id=1,
        subtotal=0,
        tax=0,
        total=0,
        status=InvoiceStatus.CANCELADA,
    )


def test_last_folio_compares_numbers_not_text(gateway):
    gateway.invoices.create(cancelled_invoice("FAC-999999"))
    gateway.invoices.create(cancelled_invoice("FAC-1000000"))

    assert gateway.invoices.last_folio() == "FAC-1000000"
    assert invoicing.derive_invoice(gateway, DELIVERED_ID).folio == "FAC-1000001"


def test_folio_taken_outside_the_sequence_is_rejected(gateway):
    first = invoicing.derive_invoice(gateway, DELIVERED_ID)
    assert first.folio == "FAC-000001"
    # Factura cargada a mano con el folio que la secuencia entregará después
    gateway.invoices.create(cancelled_invoice("FAC-000002"))
    order_fsm.advance(gateway, ON_ROUTE_ID)

    with pytest.raises(DuplicateFolioError) as excinfo:
        invoicing.derive_invoice(gateway, ON_ROUTE_ID)

    assert excinfo.value.context["folio"] == "FAC-000002"
    assert gateway.invoices.find_by_order(ON_ROUTE_ID) is None
