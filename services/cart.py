"""
Carrito de un pedido en armado.

Vive solo en memoria durante la sesión del asistente de pedidos: no se
persiste ni se comparte entre peticiones, así que no necesita bloqueos.

Contrato de cantidades: una cantidad mayor al stock NO es un error; se recorta
al stock disponible (agregar 15 piezas de un producto con stock 10 deja 10 en
el carrito). Una cantidad menor a 1 al agregar sí es un error, y un producto
sin existencia o inactivo no se puede agregar.
"""

from dataclasses import dataclass
from typing import Dict, List

from core.errors import ValidationError
from models.products import Product


@dataclass
class CartLine:
    product_id: int
    name: str
    sku: str
    unit_price: float  # precio congelado al momento de agregarlo
    quantity: int
    stock: int

    @property
    def subtotal(self) -> float:
        return round(self.unit_price * self.quantity, 2)


class Cart:
    def __init__(self):
        self._lines: Dict[int, CartLine] = {}

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    @property
    def total(self) -> float:
        return round(sum(line.subtotal for line in self._lines.values()), 2)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def contains(self, product_id: int) -> bool:
        return product_id in self._lines

    def quantity_of(self, product_id: int) -> int:
        line = self._lines.get(product_id)
        return line.quantity if line else 0

    def add_item(self, product: Product, quantity: int = 1) -> CartLine:
        """Agrega el producto o incrementa su cantidad, sin superar el stock."""
        if quantity is None or quantity < 1:
            raise ValidationError("La cantidad debe ser mayor a 0.", product_id=product.id, quantity=quantity)
        if not product.active:
            raise ValidationError(f"El producto '{product.name}' no está activo.", product_id=product.id)
        if product.stock <= 0:
            raise ValidationError(f"El producto '{product.name}' no tiene existencia.", product_id=product.id)

        line = self._lines.get(product.id)
        if line is None:
            line = CartLine(
                product_id=product.id,
                name=product.name,
                sku=product.sku,
                unit_price=product.price,
                quantity=0,
                stock=product.stock,
            )
            self._lines[product.id] = line
        else:
            # El stock se refresca con la lectura más reciente; el precio queda congelado.
            line.stock = product.stock

        line.quantity = min(line.quantity + quantity, line.stock)
        return line

    def remove_item(self, product_id: int) -> None:
        self._lines.pop(product_id, None)

    def update_quantity(self, product_id: int, quantity: int) -> None:
        """Sobrescribe la cantidad; 0 o menos elimina el renglón."""
        if quantity <= 0:
            self.remove_item(product_id)
            return
        line = self._lines.get(product_id)
        if line is not None:
            line.quantity = min(quantity, line.stock)

    def clear(self) -> None:
        self._lines.clear()
