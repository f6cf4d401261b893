# Importar todos los modelos para que SQLAlchemy pueda resolver las relaciones
# declaradas por nombre antes de instanciar cualquiera de ellos.
from models.routes import Route
from models.clients import Client
from models.products import Product
from models.orders import Order, OrderStatusHistory
from models.order_items import OrderLine
from models.invoices import Invoice, FolioSequence
from models.inventory import InventoryMovement
