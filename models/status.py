from enum import Enum


class OrderStatus(str, Enum):
    """Estados del ciclo de vida de un pedido."""
    PENDIENTE = "Pendiente"
    EN_RUTA = "En Ruta"
    ENTREGADO = "Entregado"
    CANCELADO = "Cancelado"


class InvoiceStatus(str, Enum):
    VIGENTE = "Vigente"
    CANCELADA = "Cancelada"
    PENDIENTE = "Pendiente"


class TransitionDirection(str, Enum):
    """Acciones que el usuario puede pedir sobre el estado de un pedido."""
    ADVANCE = "advance"
    REVERT = "revert"
    CANCEL = "cancel"


class MovementType(str, Enum):
    """Tipo de movimiento de inventario."""
    ENTRADA = "ENTRADA"
    SALIDA = "SALIDA"
    AJUSTE = "AJUSTE"


class PaymentMethod(str, Enum):
    """Claves de método de pago usadas en las facturas (estilo catálogo SAT)."""
    EFECTIVO = "01"
    CHEQUE = "02"
    TRANSFERENCIA = "03"
    TARJETA_CREDITO = "04"
    TARJETA_DEBITO = "28"

    @property
    def label(self) -> str:
        return PAYMENT_METHOD_LABELS[self]


PAYMENT_METHOD_LABELS = {
    PaymentMethod.EFECTIVO: "Efectivo",
    PaymentMethod.CHEQUE: "Cheque",
    PaymentMethod.TRANSFERENCIA: "Transferencia",
    PaymentMethod.TARJETA_CREDITO: "Tarjeta de Crédito",
    PaymentMethod.TARJETA_DEBITO: "Tarjeta de Débito",
}

INVOICE_SERIES = ("A", "B", "C")
