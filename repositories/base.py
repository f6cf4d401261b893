"""
Contrato abstracto del almacén (Persistence Gateway).

El núcleo de pedidos y facturación solo habla con estas interfaces. Hay dos
implementaciones: `repositories.sql.SqlGateway` (SQLModel) y
`repositories.memory.InMemoryGateway` (diccionarios en memoria, usada en pruebas
y en el modo offline/demo).

Cualquier operación puede fallar con `PersistenceError`; las búsquedas por id
devuelven `None` cuando no existe el registro, y es el servicio quien decide si
eso es un `NotFoundError`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.clock import as_utc
from models.clients import Client
from models.inventory import InventoryMovement
from models.invoices import Invoice
from models.order_items import OrderLine
from models.orders import Order, OrderStatusHistory
from models.products import Product
from models.routes import Route
from models.status import InvoiceStatus, OrderStatus


@dataclass
class OrderFilter:
    client_id: Optional[int] = None
    status: Optional[OrderStatus] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None

    def __post_init__(self):
        self.created_from = as_utc(self.created_from)
        self.created_to = as_utc(self.created_to)


class RouteRepository(ABC):
    @abstractmethod
    def get(self, route_id: int) -> Optional[Route]: ...

    @abstractmethod
    def list(self, include_inactive: bool = False) -> List[Route]: ...

    @abstractmethod
    def create(self, route: Route) -> Route: ...

    @abstractmethod
    def update(self, route_id: int, data: Dict[str, Any]) -> Route: ...


class ClientRepository(ABC):
    @abstractmethod
    def get(self, client_id: int) -> Optional[Client]: ...

    @abstractmethod
    def list(self, include_inactive: bool = False, route_id: Optional[int] = None) -> List[Client]: ...

    @abstractmethod
    def create(self, client: Client) -> Client: ...

    @abstractmethod
    def update(self, client_id: int, data: Dict[str, Any]) -> Client: ...


class ProductRepository(ABC):
    @abstractmethod
    def get(self, product_id: int) -> Optional[Product]: ...

    @abstractmethod
    def list_active(self) -> List[Product]: ...

    @abstractmethod
    def find_active_by_sku(self, sku: str) -> List[Product]: ...

    @abstractmethod
    def create(self, product: Product) -> Product: ...

    @abstractmethod
    def update(self, product_id: int, data: Dict[str, Any]) -> Product: ...


class OrderRepository(ABC):
    @abstractmethod
    def create(self, order: Order, lines: List[OrderLine]) -> int:
        """Guarda el pedido, sus renglones y la entrada inicial de la bitácora en una sola operación."""

    @abstractmethod
    def get(self, order_id: int) -> Optional[Order]: ...

    @abstractmethod
    def list(self, filters: Optional[OrderFilter] = None) -> List[Order]: ...

    @abstractmethod
    def lines(self, order_id: int) -> List[OrderLine]: ...

    @abstractmethod
    def history(self, order_id: int) -> List[OrderStatusHistory]: ...

    @abstractmethod
    def update_status(self, order_id: int, status: OrderStatus, expected_current: OrderStatus) -> Order:
        """
        Compare-and-swap del estado: solo cambia si el estado actual es `expected_current`.
        Registra el cambio en la bitácora. Lanza `ConflictError` si el estado ya no coincide.
        """


class InvoiceRepository(ABC):
    @abstractmethod
    def create(self, invoice: Invoice) -> int:
        """Guarda la factura. Lanza `DuplicateInvoiceError` si el pedido ya tiene una factura viva."""

    @abstractmethod
    def get(self, invoice_id: int) -> Optional[Invoice]: ...

    @abstractmethod
    def list(self) -> List[Invoice]: ...

    @abstractmethod
    def last_folio(self) -> Optional[str]: ...

    @abstractmethod
    def next_folio(self) -> int:
        """Reserva de forma atómica el siguiente número de folio."""

    @abstractmethod
    def find_by_order(self, order_id: int) -> Optional[Invoice]:
        """Factura no cancelada del pedido, si existe."""

    @abstractmethod
    def update_status(self, invoice_id: int, status: InvoiceStatus) -> Invoice: ...


class InventoryRepository(ABC):
    @abstractmethod
    def change_stock(self, product_id: int, expected_stock: int, movement: InventoryMovement) -> InventoryMovement:
        """
        Compare-and-swap de la existencia: fija `stock = movement.new_quantity` solo
        si la existencia actual es `expected_stock`, y registra el movimiento en la
        misma operación. Lanza `StockConflictError` si la existencia ya no coincide.
        """

    @abstractmethod
    def movements(self, product_id: Optional[int] = None) -> List[InventoryMovement]:
        """Movimientos más recientes primero."""


class Gateway(ABC):
    """Agrupa los repositorios por entidad."""

    routes: RouteRepository
    clients: ClientRepository
    products: ProductRepository
    orders: OrderRepository
    invoices: InvoiceRepository
    inventory: InventoryRepository
