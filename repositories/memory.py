"""
Almacén en memoria.

Se usa en las pruebas y en el modo offline/demo (OFFLINE_MODE=true). Es una
instancia explícita que se inyecta; no hay estado global de módulo. Todas las
operaciones se serializan con un candado, así que el compare-and-swap de estado
y la reserva de folios son atómicos también aquí.

Los objetos se copian al entrar y al salir para que nadie pueda modificar el
almacén por referencia (igual que ocurriría con una base de datos).
"""

import threading
from typing import Any, Dict, List, Optional, TypeVar

from sqlmodel import SQLModel

from core.clock import as_utc, utcnow
from core.errors import (
    ConflictError,
    DuplicateFolioError,
    DuplicateInvoiceError,
    NotFoundError,
    StockConflictError,
    ValidationError,
)
from models.clients import Client
from models.inventory import InventoryMovement
from models.invoices import Invoice, parse_folio
from models.order_items import OrderLine
from models.orders import Order, OrderStatusHistory, format_order_number
from models.products import Product
from models.routes import Route
from models.status import InvoiceStatus, OrderStatus
from repositories.base import (
    ClientRepository,
    Gateway,
    InventoryRepository,
    InvoiceRepository,
    OrderFilter,
    OrderRepository,
    ProductRepository,
    RouteRepository,
)

T = TypeVar("T", bound=SQLModel)


def _copy(obj: T) -> T:
    return type(obj).model_validate(obj.model_dump())


class InMemoryStore:
    """Tablas en memoria con sus contadores de id."""

    def __init__(self):
        self.lock = threading.RLock()
        self.tables: Dict[str, Dict[int, SQLModel]] = {
            "routes": {},
            "clients": {},
            "products": {},
            "orders": {},
            "order_lines": {},
            "order_status_history": {},
            "invoices": {},
            "inventory_movements": {},
        }
        self._ids: Dict[str, int] = {name: 0 for name in self.tables}
        self.folio_sequence: Optional[int] = None

    def next_id(self, table: str) -> int:
        self._ids[table] += 1
        return self._ids[table]

    def insert(self, table: str, obj: T) -> T:
        stored = _copy(obj)
        if stored.id is None:
            stored.id = self.next_id(table)
        else:
            self._ids[table] = max(self._ids[table], stored.id)
        self.tables[table][stored.id] = stored
        return stored

    def get(self, table: str, obj_id: int):
        obj = self.tables[table].get(obj_id)
        return _copy(obj) if obj is not None else None

    def all(self, table: str) -> list:
        return [_copy(obj) for obj in self.tables[table].values()]


class _MemoryRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store


class MemoryRouteRepository(_MemoryRepository, RouteRepository):
    def get(self, route_id: int) -> Optional[Route]:
        with self.store.lock:
            return self.store.get("routes", route_id)

    def list(self, include_inactive: bool = False) -> List[Route]:
        with self.store.lock:
            routes = self.store.all("routes")
        if not include_inactive:
            routes = [r for r in routes if r.active]
        return sorted(routes, key=lambda r: r.name)

    def create(self, route: Route) -> Route:
        with self.store.lock:
            if any(r.name == route.name for r in self.store.tables["routes"].values()):
                raise ValidationError(f"Ya existe una ruta con el nombre '{route.name}'.", field="name")
            return _copy(self.store.insert("routes", route))

    def update(self, route_id: int, data: Dict[str, Any]) -> Route:
        with self.store.lock:
            route_db = self.store.tables["routes"].get(route_id)
            if route_db is None:
                raise NotFoundError("Ruta", route_id)
            new_name = data.get("name")
            if new_name and any(
                r.name == new_name and r.id != route_id for r in self.store.tables["routes"].values()
            ):
                raise ValidationError(f"Ya existe una ruta con el nombre '{new_name}'.", field="name")
            route_db.sqlmodel_update(data)
            route_db.updated_at = utcnow()
            return _copy(route_db)


class MemoryClientRepository(_MemoryRepository, ClientRepository):
    def get(self, client_id: int) -> Optional[Client]:
        with self.store.lock:
            return self.store.get("clients", client_id)

    def list(self, include_inactive: bool = False, route_id: Optional[int] = None) -> List[Client]:
        with self.store.lock:
            clients = self.store.all("clients")
        if not include_inactive:
            clients = [c for c in clients if c.active]
        if route_id is not None:
            clients = [c for c in clients if c.route_id == route_id]
        return sorted(clients, key=lambda c: c.name)

    def create(self, client: Client) -> Client:
        with self.store.lock:
            return _copy(self.store.insert("clients", client))

    def update(self, client_id: int, data: Dict[str, Any]) -> Client:
        with self.store.lock:
            client_db = self.store.tables["clients"].get(client_id)
            if client_db is None:
                raise NotFoundError("Cliente", client_id)
            client_db.sqlmodel_update(data)
            client_db.updated_at = utcnow()
            return _copy(client_db)


class MemoryProductRepository(_MemoryRepository, ProductRepository):
    def get(self, product_id: int) -> Optional[Product]:
        with self.store.lock:
            return self.store.get("products", product_id)

    def list_active(self) -> List[Product]:
        with self.store.lock:
            products = [p for p in self.store.all("products") if p.active]
        return sorted(products, key=lambda p: p.name)

    def find_active_by_sku(self, sku: str) -> List[Product]:
        with self.store.lock:
            return [p for p in self.store.all("products") if p.active and p.sku == sku]

    def create(self, product: Product) -> Product:
        with self.store.lock:
            return _copy(self.store.insert("products", product))

    def update(self, product_id: int, data: Dict[str, Any]) -> Product:
        with self.store.lock:
            product_db = self.store.tables["products"].get(product_id)
            if product_db is None:
                raise NotFoundError("Producto", product_id)
            product_db.sqlmodel_update(data)
            product_db.updated_at = utcnow()
            return _copy(product_db)


class MemoryOrderRepository(_MemoryRepository, OrderRepository):
    def create(self, order: Order, lines: List[OrderLine]) -> int:
        with self.store.lock:
            stored = self.store.insert("orders", order)
            stored.order_number = format_order_number(stored.id)
            for line in lines:
                line_copy = _copy(line)
                line_copy.order_id = stored.id
                line_copy.id = None
                self.store.insert("order_lines", line_copy)
            self.store.insert(
                "order_status_history",
                OrderStatusHistory(
                    order_id=stored.id,
                    from_status=None,
                    to_status=stored.status,
                    changed_at=stored.created_at or utcnow(),
                ),
            )
            return stored.id

    def get(self, order_id: int) -> Optional[Order]:
        with self.store.lock:
            return self.store.get("orders", order_id)

    def list(self, filters: Optional[OrderFilter] = None) -> List[Order]:
        with self.store.lock:
            orders = self.store.all("orders")
        if filters:
            if filters.client_id is not None:
                orders = [o for o in orders if o.client_id == filters.client_id]
            if filters.status is not None:
                orders = [o for o in orders if o.status == filters.status]
            if filters.created_from:
                orders = [o for o in orders if as_utc(o.created_at) >= filters.created_from]
            if filters.created_to:
                orders = [o for o in orders if as_utc(o.created_at) <= filters.created_to]
        return sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True)

    def lines(self, order_id: int) -> List[OrderLine]:
        with self.store.lock:
            return [line for line in self.store.all("order_lines") if line.order_id == order_id]

    def history(self, order_id: int) -> List[OrderStatusHistory]:
        with self.store.lock:
            return [h for h in self.store.all("order_status_history") if h.order_id == order_id]

    def update_status(self, order_id: int, status: OrderStatus, expected_current: OrderStatus) -> Order:
        with self.store.lock:
            order_db = self.store.tables["orders"].get(order_id)
            if order_db is None:
                raise NotFoundError("Pedido", order_id)
            if order_db.status != expected_current:
                raise ConflictError(order_id, expected_current, order_db.status)

            now = utcnow()
            order_db.status = status
            order_db.updated_at = now
            self.store.insert(
                "order_status_history",
                OrderStatusHistory(order_id=order_id, from_status=expected_current, to_status=status, changed_at=now),
            )
            return _copy(order_db)


class MemoryInvoiceRepository(_MemoryRepository, InvoiceRepository):
    def _live_invoice(self, order_id: int) -> Optional[Invoice]:
        for invoice in self.store.tables["invoices"].values():
            if invoice.order_id == order_id and invoice.status != InvoiceStatus.CANCELADA:
                return invoice
        return None

    def create(self, invoice: Invoice) -> int:
        with self.store.lock:
            if invoice.status != InvoiceStatus.CANCELADA:
                existing = self._live_invoice(invoice.order_id)
                if existing is not None:
                    raise DuplicateInvoiceError(invoice.order_id, existing.id)
                invoice.active_order_id = invoice.order_id
            if any(i.folio == invoice.folio for i in self.store.tables["invoices"].values()):
                raise DuplicateFolioError(invoice.folio)
            return self.store.insert("invoices", invoice).id

    def get(self, invoice_id: int) -> Optional[Invoice]:
        with self.store.lock:
            return self.store.get("invoices", invoice_id)

    def list(self) -> List[Invoice]:
        with self.store.lock:
            return sorted(self.store.all("invoices"), key=lambda i: i.id, reverse=True)

    def last_folio(self) -> Optional[str]:
        with self.store.lock:
            folios = [i.folio for i in self.store.tables["invoices"].values()]
        return max(folios, key=parse_folio) if folios else None

    def next_folio(self) -> int:
        with self.store.lock:
            if self.store.folio_sequence is None:
                self.store.folio_sequence = parse_folio(self.last_folio())
            self.store.folio_sequence += 1
            return self.store.folio_sequence

    def find_by_order(self, order_id: int) -> Optional[Invoice]:
        with self.store.lock:
            invoice = self._live_invoice(order_id)
            return _copy(invoice) if invoice is not None else None

    def update_status(self, invoice_id: int, status: InvoiceStatus) -> Invoice:
        with self.store.lock:
            invoice_db = self.store.tables["invoices"].get(invoice_id)
            if invoice_db is None:
                raise NotFoundError("Factura", invoice_id)
            invoice_db.status = status
            invoice_db.active_order_id = None if status == InvoiceStatus.CANCELADA else invoice_db.order_id
            invoice_db.updated_at = utcnow()
            return _copy(invoice_db)


class MemoryInventoryRepository(_MemoryRepository, InventoryRepository):
    def change_stock(self, product_id: int, expected_stock: int, movement: InventoryMovement) -> InventoryMovement:
        with self.store.lock:
            product_db = self.store.tables["products"].get(product_id)
            if product_db is None:
                raise NotFoundError("Producto", product_id)
            if product_db.stock != expected_stock:
                raise StockConflictError(product_id, expected_stock, product_db.stock)

            product_db.stock = movement.new_quantity
            product_db.updated_at = utcnow()
            movement = _copy(movement)
            movement.product_id = product_id
            return _copy(self.store.insert("inventory_movements", movement))

    def movements(self, product_id: Optional[int] = None) -> List[InventoryMovement]:
        with self.store.lock:
            movements = self.store.all("inventory_movements")
        if product_id is not None:
            movements = [m for m in movements if m.product_id == product_id]
        return sorted(movements, key=lambda m: (m.created_at, m.id), reverse=True)


class InMemoryGateway(Gateway):
    """
    Almacén en memoria. Con `seed=True` se carga con los datos de demostración
    de `repositories.fixtures`.
    """

    def __init__(self, seed: bool = False):
        self.store = InMemoryStore()
        self.routes = MemoryRouteRepository(self.store)
        self.clients = MemoryClientRepository(self.store)
        self.products = MemoryProductRepository(self.store)
        self.orders = MemoryOrderRepository(self.store)
        self.invoices = MemoryInvoiceRepository(self.store)
        self.inventory = MemoryInventoryRepository(self.store)

        if seed:
            from repositories.fixtures import load_fixtures

            load_fixtures(self)
