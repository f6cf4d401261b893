"""
Datos de demostración para el modo offline (OFFLINE_MODE=true).

Se cargan en una instancia concreta de `InMemoryGateway`; no existe ninguna
lista global que se modifique al importar el módulo.
"""

from core.clock import utcnow
from models.clients import Client
from models.order_items import OrderLine
from models.orders import Order
from models.products import Product
from models.routes import Route
from models.status import OrderStatus

ROUTES = [
    {"name": "Ruta Centro Preventa", "description": "Ruta de preventa para zona centro de la ciudad", "salesperson": "Carlos Mendoza"},
    {"name": "Ruta Norte Reparto", "description": "Ruta de reparto para zona norte", "salesperson": "Ana García"},
    {"name": "Ruta Industrial Convencional", "description": "Ruta convencional para zona industrial", "salesperson": "Luis Rodríguez"},
]

CLIENTS = [
    {"name": "Tienda El Buen Precio", "address": "Av. Principal 123, Col. Centro", "phone": "555-0101", "email": "contacto@elbuenprecio.com", "route": 0},
    {"name": "Súper Mercado Familiar", "address": "Calle Reforma 456, Col. Norte", "phone": "555-0102", "email": "ventas@superfamiliar.com", "route": 0},
    {"name": "Abarrotes Don Juan", "address": "Av. Insurgentes 789, Col. Sur", "phone": "555-0103", "email": "donjuan@abarrotes.com", "route": 1},
    {"name": "Minisuper La Esquina", "address": "Calle Juárez 321, Col. Centro", "phone": "555-0104", "email": "laesquina@minisuper.com", "route": 1},
    {"name": "Comercial Los Pinos", "address": "Blvd. Tecnológico 654, Col. Industrial", "phone": "555-0105", "email": "ventas@lospinos.com", "route": 2},
]

PRODUCTS = [
    {"name": "Coca-Cola 600ml", "sku": "CC-600", "category": "Bebidas", "price": 15.5, "stock": 150, "min_stock": 20},
    {"name": "Sabritas Original 45g", "sku": "SAB-45", "category": "Botanas", "price": 18.0, "stock": 200, "min_stock": 30},
    {"name": "Agua Bonafont 1L", "sku": "BON-1L", "category": "Bebidas", "price": 12.0, "stock": 300, "min_stock": 50},
    {"name": "Galletas Marías 200g", "sku": "MAR-200", "category": "Galletas", "price": 22.5, "stock": 8, "min_stock": 15},
    {"name": "Leche Lala 1L", "sku": "LAL-1L", "category": "Lácteos", "price": 24.0, "stock": 120, "min_stock": 25},
]

# (índice de cliente, [(índice de producto, cantidad)], estado final, notas)
ORDERS = [
    (0, [(0, 5), (1, 4)], OrderStatus.PENDIENTE, "Entrega en horario matutino"),
    (1, [(4, 8)], OrderStatus.ENTREGADO, "Cliente satisfecho"),
    (2, [(2, 10), (3, 3)], OrderStatus.EN_RUTA, None),
]

_PATH_TO = {
    OrderStatus.PENDIENTE: [],
    OrderStatus.EN_RUTA: [OrderStatus.EN_RUTA],
    OrderStatus.ENTREGADO: [OrderStatus.EN_RUTA, OrderStatus.ENTREGADO],
    OrderStatus.CANCELADO: [OrderStatus.CANCELADO],
}


def load_fixtures(gateway) -> None:
    """Siembra rutas, clientes, productos y algunos pedidos de ejemplo."""
    routes = [gateway.routes.create(Route(**data)) for data in ROUTES]

    clients = []
    for data in CLIENTS:
        data = dict(data)
        route = routes[data.pop("route")]
        clients.append(gateway.clients.create(Client(route_id=route.id, **data)))

    products = [gateway.products.create(Product(**data)) for data in PRODUCTS]

    for client_index, items, final_status, notes in ORDERS:
        lines = []
        for product_index, quantity in items:
            product = products[product_index]
            lines.append(
                OrderLine(
                    product_id=product.id,
                    product_name=product.name,
                    sku=product.sku,
                    quantity=quantity,
                    unit_price=product.price,
                    subtotal=round(product.price * quantity, 2),
                )
            )
        order = Order(
            client_id=clients[client_index].id,
            total=round(sum(line.subtotal for line in lines), 2),
            status=OrderStatus.PENDIENTE,
            notes=notes,
            created_at=utcnow(),
        )
        order_id = gateway.orders.create(order, lines)

        current = OrderStatus.PENDIENTE
        for target in _PATH_TO[final_status]:
            gateway.orders.update_status(order_id, target, current)
            current = target
