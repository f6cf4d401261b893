from dataclasses import dataclass
from typing import Iterable

from models.orders import Order
from models.status import OrderStatus


@dataclass(frozen=True)
class OrderStatistics:
    total: int
    pending: int
    on_route: int
    delivered: int
    cancelled: int
    sales_total: float
    average_order: float


def order_statistics(orders: Iterable[Order]) -> OrderStatistics:
    """Conteo por estado; las ventas solo consideran pedidos entregados."""
    orders = list(orders)
    by_status = {status: 0 for status in OrderStatus}
    for order in orders:
        by_status[order.status] += 1

    delivered = [o for o in orders if o.status == OrderStatus.ENTREGADO]
    sales_total = round(sum(o.total for o in delivered), 2)
    average = round(sales_total / len(delivered), 2) if delivered else 0.0

    return OrderStatistics(
        total=len(orders),
        pending=by_status[OrderStatus.PENDIENTE],
        on_route=by_status[OrderStatus.EN_RUTA],
        delivered=by_status[OrderStatus.ENTREGADO],
        cancelled=by_status[OrderStatus.CANCELADO],
        sales_total=sales_total,
        average_order=average,
    )
