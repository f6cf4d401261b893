"""
Implementación del almacén sobre SQLModel.

Reglas de concurrencia:
  - El cambio de estado de un pedido es un compare-and-swap:
    UPDATE orders SET status=:nuevo WHERE id=:id AND status=:esperado.
    Si no se afectó ninguna fila, otra petición ganó la carrera → ConflictError.
  - El folio se obtiene incrementando una fila de `folio_sequences` dentro de la
    misma transacción que inserta la factura (la fila queda bloqueada hasta el
    commit), y `invoices.folio` es único.
  - `invoices.active_order_id` es único: la base de datos rechaza una segunda
    factura viva para el mismo pedido aunque dos peticiones pasen la validación
    a la vez.
"""

import functools
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from core.clock import utcnow
from core.errors import (
    ConflictError,
    CoreError,
    DuplicateFolioError,
    DuplicateInvoiceError,
    NotFoundError,
    PersistenceError,
    StockConflictError,
)
from models.clients import Client
from models.inventory import InventoryMovement
from models.invoices import FOLIO_PREFIX, FolioSequence, Invoice, parse_folio
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

logger = logging.getLogger(__name__)


def db_errors(func):
    """Convierte cualquier error de SQLAlchemy en PersistenceError (haciendo rollback)."""

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except CoreError:
            raise
        except SQLAlchemyError as e:
            logger.exception("Error de base de datos en %s", func.__qualname__)
            self.session.rollback()
            raise PersistenceError(f"Error de base de datos: {e.__class__.__name__}", operation=func.__name__) from e

    return wrapper


class _SqlRepository:
    def __init__(self, session: Session):
        self.session = session

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj


class SqlRouteRepository(_SqlRepository, RouteRepository):
    @db_errors
    def get(self, route_id: int) -> Optional[Route]:
        return self.session.get(Route, route_id)

    @db_errors
    def list(self, include_inactive: bool = False) -> List[Route]:
        query = select(Route)
        if not include_inactive:
            query = query.where(Route.active == True)  # noqa: E712
        return list(self.session.exec(query.order_by(Route.name)).all())

    @db_errors
    def create(self, route: Route) -> Route:
        return self._save(route)

    @db_errors
    def update(self, route_id: int, data: Dict[str, Any]) -> Route:
        route_db = self.session.get(Route, route_id)
        if route_db is None:
            raise NotFoundError("Ruta", route_id)
        route_db.sqlmodel_update(data)
        route_db.updated_at = utcnow()
        return self._save(route_db)


class SqlClientRepository(_SqlRepository, ClientRepository):
    @db_errors
    def get(self, client_id: int) -> Optional[Client]:
        return self.session.get(Client, client_id)

    @db_errors
    def list(self, include_inactive: bool = False, route_id: Optional[int] = None) -> List[Client]:
        query = select(Client)
        if not include_inactive:
            query = query.where(Client.active == True)  # noqa: E712
        if route_id is not None:
            query = query.where(Client.route_id == route_id)
        return list(self.session.exec(query.order_by(Client.name)).all())

    @db_errors
    def create(self, client: Client) -> Client:
        return self._save(client)

    @db_errors
    def update(self, client_id: int, data: Dict[str, Any]) -> Client:
        client_db = self.session.get(Client, client_id)
        if client_db is None:
            raise NotFoundError("Cliente", client_id)
        client_db.sqlmodel_update(data)
        client_db.updated_at = utcnow()
        return self._save(client_db)


class SqlProductRepository(_SqlRepository, ProductRepository):
    @db_errors
    def get(self, product_id: int) -> Optional[Product]:
        return self.session.get(Product, product_id)

    @db_errors
    def list_active(self) -> List[Product]:
        query = select(Product).where(Product.active == True).order_by(Product.name)  # noqa: E712
        return list(self.session.exec(query).all())

    @db_errors
    def find_active_by_sku(self, sku: str) -> List[Product]:
        query = select(Product).where(Product.sku == sku).where(Product.active == True)  # noqa: E712
        return list(self.session.exec(query).all())

    @db_errors
    def create(self, product: Product) -> Product:
        return self._save(product)

    @db_errors
    def update(self, product_id: int, data: Dict[str, Any]) -> Product:
        product_db = self.session.get(Product, product_id)
        if product_db is None:
            raise NotFoundError("Producto", product_id)
        product_db.sqlmodel_update(data)
        product_db.updated_at = utcnow()
        return self._save(product_db)


class SqlOrderRepository(_SqlRepository, OrderRepository):
    @db_errors
    def create(self, order: Order, lines: List[OrderLine]) -> int:
        self.session.add(order)
        self.session.flush()  # Para obtener el ID antes de los renglones

        order.order_number = format_order_number(order.id)
        for line in lines:
            line.order_id = order.id
            self.session.add(line)

        self.session.add(
            OrderStatusHistory(
                order_id=order.id,
                from_status=None,
                to_status=order.status,
                changed_at=order.created_at or utcnow(),
            )
        )
        self.session.commit()
        self.session.refresh(order)
        return order.id

    @db_errors
    def get(self, order_id: int) -> Optional[Order]:
        return self.session.get(Order, order_id)

    @db_errors
    def list(self, filters: Optional[OrderFilter] = None) -> List[Order]:
        query = select(Order)
        if filters:
            if filters.client_id is not None:
                query = query.where(Order.client_id == filters.client_id)
            if filters.status is not None:
                query = query.where(Order.status == filters.status)
            if filters.created_from:
                query = query.where(col(Order.created_at) >= filters.created_from)
            if filters.created_to:
                query = query.where(col(Order.created_at) <= filters.created_to)
        query = query.order_by(col(Order.created_at).desc(), col(Order.id).desc())
        return list(self.session.exec(query).all())

    @db_errors
    def lines(self, order_id: int) -> List[OrderLine]:
        query = select(OrderLine).where(OrderLine.order_id == order_id).order_by(OrderLine.id)
        return list(self.session.exec(query).all())

    @db_errors
    def history(self, order_id: int) -> List[OrderStatusHistory]:
        query = (
            select(OrderStatusHistory)
            .where(OrderStatusHistory.order_id == order_id)
            .order_by(OrderStatusHistory.id)
        )
        return list(self.session.exec(query).all())

    @db_errors
    def update_status(self, order_id: int, status: OrderStatus, expected_current: OrderStatus) -> Order:
        now = utcnow()
        result = self.session.execute(
            update(Order)
            .where(Order.id == order_id)
            .where(Order.status == expected_current)
            .values(status=status, updated_at=now)
        )

        if result.rowcount == 0:
            self.session.rollback()
            current = self.session.get(Order, order_id)
            if current is None:
                raise NotFoundError("Pedido", order_id)
            raise ConflictError(order_id, expected_current, current.status)

        self.session.add(
            OrderStatusHistory(order_id=order_id, from_status=expected_current, to_status=status, changed_at=now)
        )
        self.session.commit()

        order = self.session.get(Order, order_id)
        self.session.refresh(order)
        return order


class SqlInvoiceRepository(_SqlRepository, InvoiceRepository):
    @db_errors
    def create(self, invoice: Invoice) -> int:
        if invoice.status != InvoiceStatus.CANCELADA:
            invoice.active_order_id = invoice.order_id
        self.session.add(invoice)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            existing = self.find_by_order(invoice.order_id)
            if existing is not None:
                raise DuplicateInvoiceError(invoice.order_id, existing.id) from e
            if self._folio_exists(invoice.folio):
                raise DuplicateFolioError(invoice.folio) from e
            raise
        self.session.refresh(invoice)
        return invoice.id

    @db_errors
    def get(self, invoice_id: int) -> Optional[Invoice]:
        return self.session.get(Invoice, invoice_id)

    @db_errors
    def list(self) -> List[Invoice]:
        return list(self.session.exec(select(Invoice).order_by(col(Invoice.id).desc())).all())

    def _folio_exists(self, folio: str) -> bool:
        return self.session.exec(select(Invoice.id).where(Invoice.folio == folio)).first() is not None

    @db_errors
    def last_folio(self) -> Optional[str]:
        # Orden numérico, no alfabético: FAC-1000000 va después de FAC-999999
        folios = self.session.exec(select(Invoice.folio)).all()
        return max(folios, key=parse_folio) if folios else None

    @db_errors
    def next_folio(self) -> int:
        """
        Incrementa la secuencia SIN hacer commit: el número queda reservado (y la
        fila bloqueada) hasta que `create` confirme la transacción de la factura.
        """
        increment = (
            update(FolioSequence)
            .where(FolioSequence.name == FOLIO_PREFIX)
            .values(last_value=FolioSequence.last_value + 1)
        )
        result = self.session.execute(increment)

        if result.rowcount == 0:
            # Primera factura con esta secuencia: arrancar desde el folio más alto existente.
            seed = parse_folio(self.last_folio())
            try:
                with self.session.begin_nested():
                    self.session.add(FolioSequence(name=FOLIO_PREFIX, last_value=seed + 1))
            except IntegrityError:
                # Otra petición creó la secuencia primero
                self.session.execute(increment)

        sequence = self.session.exec(
            select(FolioSequence).where(FolioSequence.name == FOLIO_PREFIX)
        ).one()
        self.session.refresh(sequence)
        return sequence.last_value

    @db_errors
    def find_by_order(self, order_id: int) -> Optional[Invoice]:
        query = (
            select(Invoice)
            .where(Invoice.order_id == order_id)
            .where(Invoice.status != InvoiceStatus.CANCELADA)
        )
        return self.session.exec(query).first()

    @db_errors
    def update_status(self, invoice_id: int, status: InvoiceStatus) -> Invoice:
        invoice_db = self.session.get(Invoice, invoice_id)
        if invoice_db is None:
            raise NotFoundError("Factura", invoice_id)
        invoice_db.status = status
        invoice_db.active_order_id = None if status == InvoiceStatus.CANCELADA else invoice_db.order_id
        invoice_db.updated_at = utcnow()
        return self._save(invoice_db)


class SqlInventoryRepository(_SqlRepository, InventoryRepository):
    @db_errors
    def change_stock(self, product_id: int, expected_stock: int, movement: InventoryMovement) -> InventoryMovement:
        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .where(Product.stock == expected_stock)
            .values(stock=movement.new_quantity, updated_at=utcnow())
        )

        if result.rowcount == 0:
            self.session.rollback()
            current = self.session.get(Product, product_id)
            if current is None:
                raise NotFoundError("Producto", product_id)
            raise StockConflictError(product_id, expected_stock, current.stock)

        movement.product_id = product_id
        return self._save(movement)

    @db_errors
    def movements(self, product_id: Optional[int] = None) -> List[InventoryMovement]:
        query = select(InventoryMovement)
        if product_id is not None:
            query = query.where(InventoryMovement.product_id == product_id)
        query = query.order_by(col(InventoryMovement.created_at).desc(), col(InventoryMovement.id).desc())
        return list(self.session.exec(query).all())


class SqlGateway(Gateway):
    """Almacén respaldado por una sesión de SQLModel (una por petición)."""

    def __init__(self, session: Session):
        self.session = session
        self.routes = SqlRouteRepository(session)
        self.clients = SqlClientRepository(session)
        self.products = SqlProductRepository(session)
        self.orders = SqlOrderRepository(session)
        self.invoices = SqlInvoiceRepository(session)
        self.inventory = SqlInventoryRepository(session)
