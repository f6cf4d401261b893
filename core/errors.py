"""
Taxonomía de errores del núcleo de pedidos y facturación.

Todos los errores llevan un mensaje legible y un diccionario `context` con los
datos estructurados (ids, estados) que la capa de presentación necesita para
traducirlos a un mensaje para el usuario.
"""

from enum import Enum
from typing import Any, Dict, Optional


def _label(value: Any) -> Any:
    """Valor legible de un estado (los enums se muestran por su valor)."""
    if isinstance(value, Enum):
        return value.value
    return None if value is None else str(value)


class CoreError(Exception):
    """Base de todos los errores de negocio y de persistencia."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        data = {"detail": self.message, "error": type(self).__name__}
        data.update(self.context)
        return data


class ValidationError(CoreError):
    """Entrada incompleta o mal formada (carrito vacío, sin cliente, cantidad inválida...)."""


class NotFoundError(CoreError):
    """La entidad solicitada no existe."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} con id={entity_id} no encontrado.", entity=entity, id=entity_id)


class ConflictError(CoreError):
    """El almacén rechazó una escritura condicional (compare-and-swap perdido)."""

    def __init__(self, order_id: int, expected: Any, actual: Any):
        super().__init__(
            f"El pedido {order_id} ya no está en '{_label(expected)}' (estado actual: '{_label(actual)}').",
            order_id=order_id,
            expected=_label(expected),
            actual=_label(actual),
        )
        self.order_id = order_id
        self.expected = expected
        self.actual = actual


class InvalidTransition(CoreError):
    """Transición de estado ilegal, o perdida frente a otra petición concurrente."""

    def __init__(self, order_id: Optional[int], current: Any, requested: Any, stale: bool = False):
        if stale:
            message = (
                f"El pedido {order_id} cambió de estado mientras se procesaba la solicitud "
                f"('{_label(current)}' → '{_label(requested)}')."
            )
        else:
            message = f"Transición no permitida para el pedido {order_id}: '{_label(current)}' → '{_label(requested)}'."
        super().__init__(
            message,
            order_id=order_id,
            current=_label(current),
            requested=_label(requested),
            stale=stale,
        )
        self.order_id = order_id
        self.current = current
        self.requested = requested
        self.stale = stale


class OrderNotDeliveredError(CoreError):
    """Solo se facturan pedidos en estado Entregado."""

    def __init__(self, order_id: int, status: Any):
        super().__init__(
            f"El pedido {order_id} no ha sido entregado (estado '{_label(status)}'). Debe estar Entregado para facturar.",
            order_id=order_id,
            status=_label(status),
        )
        self.order_id = order_id
        self.status = status


class DuplicateInvoiceError(CoreError):
    """Ya existe una factura no cancelada para el pedido."""

    def __init__(self, order_id: int, invoice_id: Optional[int] = None):
        super().__init__(
            f"Ya existe una factura activa para el pedido {order_id}.",
            order_id=order_id,
            invoice_id=invoice_id,
        )
        self.order_id = order_id
        self.invoice_id = invoice_id


class DuplicateFolioError(CoreError):
    """El folio asignado ya existe (factura registrada fuera de la secuencia)."""

    def __init__(self, folio: str):
        super().__init__(f"El folio {folio} ya existe.", folio=folio)
        self.folio = folio


class StockConflictError(CoreError):
    """La existencia del producto cambió entre la lectura y el ajuste."""

    def __init__(self, product_id: int, expected: int, actual: int):
        super().__init__(
            f"La existencia del producto {product_id} cambió (esperada {expected}, actual {actual}). Intenta de nuevo.",
            product_id=product_id,
            expected=expected,
            actual=actual,
        )
        self.product_id = product_id
        self.expected = expected
        self.actual = actual


class PersistenceError(CoreError):
    """El almacén no está disponible o rechazó la escritura por motivos ajenos al negocio."""
