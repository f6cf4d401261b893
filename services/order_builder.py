"""
Asistente para crear un pedido en tres pasos estrictamente ordenados:

    1. CLIENT   - elegir cliente            (sale cuando hay cliente)
    2. CART     - armar el carrito          (sale cuando el carrito no está vacío)
    3. CONFIRM  - revisar subtotal/IVA/total y confirmar

Solo `commit()` tiene efectos fuera del asistente: guarda el pedido en estado
Pendiente, limpia el carrito y vuelve al primer paso. Si el almacén falla se
propaga PersistenceError; nunca se simula un pedido exitoso.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from core.clock import utcnow
from core.errors import ValidationError
from models.clients import Client
from models.order_items import OrderLine
from models.orders import Order
from models.status import OrderStatus
from repositories.base import Gateway
from services.cart import Cart, CartLine
from services.catalog import CatalogStore
from services.invoicing import compute_totals

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    CLIENT = 1
    CART = 2
    CONFIRM = 3


@dataclass
class OrderSummary:
    """Lo que se muestra en el paso de confirmación."""
    client: Optional[Client]
    lines: List[CartLine] = field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    item_count: int = 0


class OrderWizard:
    def __init__(self, gateway: Gateway):
        self.gateway = gateway
        self.catalog = CatalogStore(gateway)
        self.cart = Cart()
        self.client: Optional[Client] = None
        self.step = WizardStep.CLIENT

    # --------------------------------------------------------------
    # Navegación
    # --------------------------------------------------------------

    def _exit_condition_met(self, step: WizardStep) -> bool:
        if step == WizardStep.CLIENT:
            return self.client is not None
        if step == WizardStep.CART:
            return not self.cart.is_empty
        return True

    def _require_exit(self, step: WizardStep) -> None:
        if not self._exit_condition_met(step):
            if step == WizardStep.CLIENT:
                raise ValidationError("Selecciona un cliente para continuar.", step=step.name)
            raise ValidationError("Agrega al menos un producto al carrito.", step=step.name)

    def next_step(self) -> WizardStep:
        if self.step == WizardStep.CONFIRM:
            return self.step
        self._require_exit(self.step)
        self.step = WizardStep(self.step + 1)
        return self.step

    def previous_step(self) -> WizardStep:
        if self.step > WizardStep.CLIENT:
            self.step = WizardStep(self.step - 1)
        return self.step

    def go_to(self, step: WizardStep) -> WizardStep:
        """Permite saltar hacia atrás libremente; hacia adelante solo si los pasos previos están completos."""
        step = WizardStep(step)
        for previous in WizardStep:
            if previous >= step:
                break
            self._require_exit(previous)
        self.step = step
        return self.step

    # --------------------------------------------------------------
    # Paso 1: cliente
    # --------------------------------------------------------------

    def search_clients(self, term: Optional[str] = None) -> List[Client]:
        return self.catalog.search_clients(term)

    def select_client(self, client_id: int) -> Client:
        client = self.catalog.get_client(client_id)
        if not client.active:
            raise ValidationError(f"El cliente '{client.name}' no está activo.", client_id=client_id)
        self.client = client
        return client

    # --------------------------------------------------------------
    # Paso 2: carrito
    # --------------------------------------------------------------

    def add_item(self, product_id: int, quantity: int = 1) -> CartLine:
        product = self.catalog.get_product(product_id)
        return self.cart.add_item(product, quantity)

    def remove_item(self, product_id: int) -> None:
        self.cart.remove_item(product_id)

    def update_quantity(self, product_id: int, quantity: int) -> None:
        self.cart.update_quantity(product_id, quantity)

    # --------------------------------------------------------------
    # Paso 3: confirmación
    # --------------------------------------------------------------

    def summary(self) -> OrderSummary:
        totals = compute_totals(self.cart.total)
        return OrderSummary(
            client=self.client,
            lines=self.cart.lines,
            subtotal=totals.subtotal,
            tax=totals.tax,
            total=totals.total,
            item_count=self.cart.item_count,
        )

    def _validate_for_commit(self) -> None:
        errors = []
        if self.client is None:
            errors.append("El pedido debe tener un cliente.")
        if self.cart.is_empty:
            errors.append("El pedido debe tener al menos un producto.")
        for index, line in enumerate(self.cart.lines, start=1):
            if line.quantity < 1:
                errors.append(f"Producto {index}: la cantidad debe ser mayor a 0.")
            if line.unit_price <= 0:
                errors.append(f"Producto {index}: el precio unitario debe ser mayor a 0.")
        if errors:
            raise ValidationError("Datos incompletos para crear el pedido.", errors=errors)

    def commit(self, notes: Optional[str] = None) -> int:
        """Guarda el pedido y devuelve su id."""
        self._validate_for_commit()

        # El cliente pudo haberse desactivado mientras se armaba el carrito.
        client = self.catalog.get_client(self.client.id)
        if not client.active:
            raise ValidationError(f"El cliente '{client.name}' no está activo.", client_id=client.id)

        lines = [
            OrderLine(
                product_id=line.product_id,
                product_name=line.name,
                sku=line.sku,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line.subtotal,
            )
            for line in self.cart.lines
        ]
        order = Order(
            client_id=client.id,
            total=round(sum(line.subtotal for line in lines), 2),
            status=OrderStatus.PENDIENTE,
            notes=notes,
            created_at=utcnow(),
            updated_at=utcnow(),
        )
        order_id = self.gateway.orders.create(order, lines)

        logger.info(
            "Pedido %s creado para cliente %s: %s renglones, total %.2f",
            order_id, client.id, len(lines), order.total,
        )
        self.cancel()
        return order_id

    def cancel(self) -> None:
        """Descarta cliente y carrito y regresa al primer paso."""
        self.cart.clear()
        self.client = None
        self.step = WizardStep.CLIENT
