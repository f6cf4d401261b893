"""
Máquina de estados del pedido.

    Pendiente ──avanzar──▶ En Ruta ──avanzar──▶ Entregado
        ▲                    │  ▲                   │
        └──────regresar──────┘  └─────regresar──────┘

    Pendiente / En Ruta ──cancelar──▶ Cancelado (final, no admite nada más)

- Entregado solo admite regresar a En Ruta (corrección de una entrega marcada por error).
- Desde Entregado no se puede cancelar.
- Cada cambio se aplica en el almacén con compare-and-swap sobre el estado
  esperado; si otra petición cambió el pedido antes, se rechaza como
  InvalidTransition (stale) en lugar de sobrescribir.
"""

import logging
from typing import Dict, List, Optional, Tuple, Union

from core.errors import ConflictError, InvalidTransition, NotFoundError
from models.orders import Order
from models.status import OrderStatus, TransitionDirection
from repositories.base import Gateway

logger = logging.getLogger(__name__)


# Tabla exhaustiva de transiciones: (estado actual, acción) → estado destino
_TRANSICIONES: Dict[Tuple[OrderStatus, TransitionDirection], OrderStatus] = {
    (OrderStatus.PENDIENTE, TransitionDirection.ADVANCE): OrderStatus.EN_RUTA,
    (OrderStatus.PENDIENTE, TransitionDirection.CANCEL): OrderStatus.CANCELADO,
    (OrderStatus.EN_RUTA, TransitionDirection.ADVANCE): OrderStatus.ENTREGADO,
    (OrderStatus.EN_RUTA, TransitionDirection.REVERT): OrderStatus.PENDIENTE,
    (OrderStatus.EN_RUTA, TransitionDirection.CANCEL): OrderStatus.CANCELADO,
    (OrderStatus.ENTREGADO, TransitionDirection.REVERT): OrderStatus.EN_RUTA,
}

TERMINAL_STATES = frozenset({OrderStatus.ENTREGADO, OrderStatus.CANCELADO})


def _coerce_status(value: Union[str, OrderStatus]) -> OrderStatus:
    """Convierte cadenas o enums en OrderStatus; lanza ValueError si es inválido."""
    if isinstance(value, OrderStatus):
        return value
    return OrderStatus(str(value))


def _coerce_direction(value: Union[str, TransitionDirection]) -> TransitionDirection:
    if isinstance(value, TransitionDirection):
        return value
    return TransitionDirection(str(value))


def target_status(
    current: Union[str, OrderStatus],
    direction: Union[str, TransitionDirection],
    order_id: Optional[int] = None,
) -> OrderStatus:
    """Estado destino de aplicar `direction` sobre `current`, o InvalidTransition."""
    estado = _coerce_status(current)
    try:
        accion = _coerce_direction(direction)
    except ValueError:
        raise InvalidTransition(order_id, estado.value, direction) from None

    destino = _TRANSICIONES.get((estado, accion))
    if destino is None:
        raise InvalidTransition(order_id, estado.value, accion.value)
    return destino


def allowed_directions(current: Union[str, OrderStatus]) -> List[TransitionDirection]:
    estado = _coerce_status(current)
    return [accion for accion in TransitionDirection if (estado, accion) in _TRANSICIONES]


def is_terminal(status: Union[str, OrderStatus]) -> bool:
    """Entregado y Cancelado no avanzan más (Entregado aún admite regresar)."""
    return _coerce_status(status) in TERMINAL_STATES


def transition(gateway: Gateway, order_id: int, direction: Union[str, TransitionDirection]) -> Order:
    """
    Aplica una acción sobre el estado del pedido y devuelve el pedido actualizado.

    Lanza NotFoundError si el pedido no existe e InvalidTransition si la acción
    no es legal o si el pedido cambió de estado de forma concurrente.
    """
    order = gateway.orders.get(order_id)
    if order is None:
        raise NotFoundError("Pedido", order_id)

    current = order.status
    try:
        destino = target_status(current, direction, order_id=order_id)
    except InvalidTransition:
        logger.warning(
            "Transición rechazada para pedido %s: %s → %s",
            order_id, current.value, getattr(direction, "value", direction),
        )
        raise

    try:
        updated = gateway.orders.update_status(order_id, destino, expected_current=current)
    except ConflictError as e:
        logger.warning(
            "Pedido %s cambió de estado concurrentemente (esperado %s, actual %s)",
            order_id, e.expected, e.actual,
        )
        raise InvalidTransition(order_id, e.actual, destino.value, stale=True) from e

    logger.info("Pedido %s: %s → %s", order_id, current.value, destino.value)
    return updated


def advance(gateway: Gateway, order_id: int) -> Order:
    return transition(gateway, order_id, TransitionDirection.ADVANCE)


def revert(gateway: Gateway, order_id: int) -> Order:
    return transition(gateway, order_id, TransitionDirection.REVERT)


def cancel(gateway: Gateway, order_id: int) -> Order:
    return transition(gateway, order_id, TransitionDirection.CANCEL)
