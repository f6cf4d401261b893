"""
Catálogo de solo lectura para el armado de pedidos (clientes, productos, rutas)
más las altas/ediciones administrativas con sus validaciones.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from core.errors import NotFoundError, ValidationError
from models.clients import Client
from models.products import Product
from models.routes import Route
from repositories.base import Gateway

logger = logging.getLogger(__name__)

SKU_RE = re.compile(r"^[A-Z0-9-]+$")


def normalize_sku(sku: str) -> str:
    return (sku or "").strip().upper()


def _matches(term: str, *values: Optional[str]) -> bool:
    """Coincidencia parcial sin distinguir mayúsculas/minúsculas."""
    needle = term.lower()
    return any(needle in (value or "").lower() for value in values)


class CatalogStore:
    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    # --------------------------------------------------------------
    # Lecturas
    # --------------------------------------------------------------

    def get_client(self, client_id: int) -> Client:
        client = self.gateway.clients.get(client_id)
        if client is None:
            raise NotFoundError("Cliente", client_id)
        return client

    def get_product(self, product_id: int) -> Product:
        product = self.gateway.products.get(product_id)
        if product is None:
            raise NotFoundError("Producto", product_id)
        return product

    def get_route(self, route_id: int) -> Route:
        route = self.gateway.routes.get(route_id)
        if route is None:
            raise NotFoundError("Ruta", route_id)
        return route

    def list_active_products(self) -> List[Product]:
        return self.gateway.products.list_active()

    def route_names(self) -> Dict[int, str]:
        return {route.id: route.name for route in self.gateway.routes.list(include_inactive=True)}

    def search_clients(self, term: Optional[str] = None) -> List[Client]:
        """Clientes activos cuyo nombre, dirección o nombre de ruta contiene `term`."""
        clients = self.gateway.clients.list()
        if not term or not term.strip():
            return clients
        term = term.strip()
        routes = self.route_names()
        return [
            client for client in clients
            if _matches(term, client.name, client.address, routes.get(client.route_id))
        ]

    def search_products(self, term: Optional[str] = None) -> List[Product]:
        """Productos activos cuyo nombre, SKU o categoría contiene `term`."""
        products = self.list_active_products()
        if not term or not term.strip():
            return products
        term = term.strip()
        return [p for p in products if _matches(term, p.name, p.sku, p.category)]

    # --------------------------------------------------------------
    # Validaciones
    # --------------------------------------------------------------

    def validate_sku(self, sku: str, product_id: Optional[int] = None) -> str:
        """
        Normaliza el SKU a mayúsculas y verifica formato y unicidad entre los
        productos ACTIVOS (excluyendo al propio producto cuando se edita).
        """
        normalized = normalize_sku(sku)
        if not normalized or not SKU_RE.match(normalized):
            raise ValidationError(
                f"SKU inválido: '{sku}'. Solo se permiten letras, números y guiones.", field="sku", sku=sku
            )

        duplicates = [p for p in self.gateway.products.find_active_by_sku(normalized) if p.id != product_id]
        if duplicates:
            raise ValidationError(
                f"El SKU '{normalized}' ya está en uso por otro producto activo.",
                field="sku",
                sku=normalized,
                product_id=duplicates[0].id,
            )
        return normalized

    def _validate_product_fields(self, data: Dict[str, Any]) -> None:
        if "price" in data and (data["price"] is None or data["price"] <= 0):
            raise ValidationError("El precio debe ser mayor a 0.", field="price")
        if "stock" in data and (data["stock"] is None or data["stock"] < 0):
            raise ValidationError("El stock no puede ser negativo.", field="stock")
        if "name" in data and not (data["name"] or "").strip():
            raise ValidationError("El nombre del producto es obligatorio.", field="name")

    def _validate_route_ref(self, data: Dict[str, Any]) -> None:
        route_id = data.get("route_id")
        if route_id is not None and self.gateway.routes.get(route_id) is None:
            raise ValidationError(f"La ruta {route_id} no existe.", field="route_id", route_id=route_id)

    # --------------------------------------------------------------
    # Escrituras administrativas
    # --------------------------------------------------------------

    def create_product(self, data: Dict[str, Any]) -> Product:
        data = dict(data)
        self._validate_product_fields(data)
        data["sku"] = self.validate_sku(data.get("sku", ""))
        product = self.gateway.products.create(Product(**data))
        logger.info("Producto creado: %s (%s)", product.id, product.sku)
        return product

    def update_product(self, product_id: int, data: Dict[str, Any]) -> Product:
        self.get_product(product_id)
        data = dict(data)
        self._validate_product_fields(data)
        reactivating = data.get("active") is True
        if "sku" in data or reactivating:
            sku = data.get("sku") or self.get_product(product_id).sku
            data["sku"] = self.validate_sku(sku, product_id=product_id)
        return self.gateway.products.update(product_id, data)

    def create_client(self, data: Dict[str, Any]) -> Client:
        if not (data.get("name") or "").strip():
            raise ValidationError("El nombre del cliente es obligatorio.", field="name")
        self._validate_route_ref(data)
        client = self.gateway.clients.create(Client(**data))
        logger.info("Cliente creado: %s (%s)", client.id, client.name)
        return client

    def update_client(self, client_id: int, data: Dict[str, Any]) -> Client:
        self.get_client(client_id)
        if "name" in data and not (data["name"] or "").strip():
            raise ValidationError("El nombre del cliente es obligatorio.", field="name")
        self._validate_route_ref(data)
        return self.gateway.clients.update(client_id, data)

    def _validate_route_name(self, name: Optional[str], route_id: Optional[int] = None) -> None:
        if not (name or "").strip():
            raise ValidationError("El nombre de la ruta es obligatorio.", field="name")
        taken = [
            r for r in self.gateway.routes.list(include_inactive=True)
            if r.name == name and r.id != route_id
        ]
        if taken:
            raise ValidationError(f"Ya existe una ruta con el nombre '{name}'.", field="name")

    def create_route(self, data: Dict[str, Any]) -> Route:
        self._validate_route_name(data.get("name"))
        return self.gateway.routes.create(Route(**data))

    def update_route(self, route_id: int, data: Dict[str, Any]) -> Route:
        self.get_route(route_id)
        if "name" in data:
            self._validate_route_name(data["name"], route_id=route_id)
        return self.gateway.routes.update(route_id, data)

    def assign_salesperson(self, route_id: int, salesperson: str) -> Route:
        if not (salesperson or "").strip():
            raise ValidationError("El nombre del vendedor es obligatorio.", field="salesperson")
        route = self.update_route(route_id, {"salesperson": salesperson.strip()})
        logger.info("Ruta %s asignada a %s", route_id, route.salesperson)
        return route

    def clients_by_route(self, route_id: int) -> List[Client]:
        """Clientes activos asignados a la ruta."""
        self.get_route(route_id)
        return self.gateway.clients.list(route_id=route_id)

    # --------------------------------------------------------------
    # Eliminación suave (active = False)
    # --------------------------------------------------------------

    def deactivate_client(self, client_id: int) -> Client:
        client = self.get_client(client_id)
        if not client.active:
            return client
        logger.info("Cliente %s desactivado", client_id)
        return self.gateway.clients.update(client_id, {"active": False})

    def deactivate_product(self, product_id: int) -> Product:
        product = self.get_product(product_id)
        if not product.active:
            return product
        logger.info("Producto %s (%s) desactivado", product_id, product.sku)
        return self.gateway.products.update(product_id, {"active": False})

    def deactivate_route(self, route_id: int) -> Route:
        """Los clientes conservan su ruta; solo deja de ofrecerse en los listados."""
        route = self.get_route(route_id)
        if not route.active:
            return route
        logger.info("Ruta %s desactivada", route_id)
        return self.gateway.routes.update(route_id, {"active": False})
