from datetime import datetime, timedelta, timezone

from core.clock import as_utc, utcnow
from models.invoices import Invoice
from models.orders import Order
from repositories.base import OrderFilter
from services import invoicing, order_fsm
from services.order_builder import OrderWizard


def test_utcnow_is_timezone_aware():
    now = utcnow()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_as_utc_only_touches_naive_values():
    naive = datetime(2024, 5, 1, 12, 30)
    assert as_utc(naive) == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    offset = timezone(timedelta(hours=-6))
    aware = datetime(2024, 5, 1, 6, 30, tzinfo=offset)
    assert as_utc(aware) is aware
    assert as_utc(None) is None


def test_model_defaults_are_aware():
    assert Order(client_id=1).created_at.tzinfo is not None
    invoice = Invoice(folio="FAC-000001", order_id=1, client_id=1, subtotal=0, tax=0, total=0)
    assert invoice.issued_at.tzinfo is not None


def test_sql_gateway_writes_with_aware_timestamps(sql_gateway):
    wizard = OrderWizard(sql_gateway)
    wizard.select_client(1)
    wizard.add_item(1, 2)
    order_id = wizard.commit()

    order_fsm.advance(sql_gateway, order_id)
    order_fsm.advance(sql_gateway, order_id)
    invoice = invoicing.derive_invoice(sql_gateway, order_id)

    assert invoice.folio == "FAC-000001"
    assert [h.to_status for h in sql_gateway.orders.history(order_id)] == ["Pendiente", "En Ruta", "Entregado"]


def test_naive_date_filters_are_read_as_utc(gateway):
    yesterday = (utcnow() - timedelta(days=1)).replace(tzinfo=None)
    tomorrow = (utcnow() + timedelta(days=1)).replace(tzinfo=None)

    assert len(gateway.orders.list(OrderFilter(created_from=yesterday))) == 3
    assert len(gateway.orders.list(OrderFilter(created_from=yesterday, created_to=tomorrow))) == 3
    assert gateway.orders.list(OrderFilter(created_from=tomorrow)) == []
    assert OrderFilter(created_to=tomorrow).created_to.tzinfo is timezone.utc
