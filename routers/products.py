from fastapi import APIRouter, Query, status
from typing import Optional

from core.dependencies import GatewayDep
from core.errors import ValidationError
from schemas.pagination_schema import paginate
from schemas.products_schema import (
    ProductCreate,
    ProductListResponse,
    ProductRead,
    ProductUpdate,
    SkuValidationResponse,
)
from services.catalog import CatalogStore

# --- Configuración del Router ---
router = APIRouter(
    prefix="/api/products", 
    tags=["PRODUCTS"], 
)

# ======================================================================
# ENDPOINT 1: LISTAR Y BUSCAR PRODUCTOS ACTIVOS
# ======================================================================

@router.get("", response_model=ProductListResponse, summary="Listar y buscar productos activos")
def list_products(
    gateway: GatewayDep,
    search: Optional[str] = Query(default=None, description="Buscar por nombre, SKU o categoría (parcial)."),
    limit: int = Query(20, ge=1, le=100, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Desplazamiento"),
):
    return paginate(CatalogStore(gateway).search_products(search), limit, offset)

# ======================================================================
# ENDPOINT 2: VALIDAR SKU (antes de guardar el formulario)
# ======================================================================

@router.get("/validate-sku", response_model=SkuValidationResponse)
def validate_sku(
    gateway: GatewayDep,
    sku: str = Query(..., description="SKU a validar"),
    product_id: Optional[int] = Query(default=None, description="ID del producto que se edita (se excluye)"),
):
    """Indica si el SKU tiene formato válido y no lo usa otro producto activo."""
    try:
        normalized = CatalogStore(gateway).validate_sku(sku, product_id=product_id)
    except ValidationError as e:
        return SkuValidationResponse(sku=sku.strip().upper(), valid=False, message=e.message)
    return SkuValidationResponse(sku=normalized, valid=True)

# ======================================================================
# ENDPOINT 3: OBTENER UN PRODUCTO
# ======================================================================

@router.get("/{product_id}", response_model=ProductRead)
def read_product(product_id: int, gateway: GatewayDep):
    return CatalogStore(gateway).get_product(product_id)

# ======================================================================
# ENDPOINT 4: CREAR PRODUCTO
# ======================================================================

@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(product_data: ProductCreate, gateway: GatewayDep):
    """Crea un producto validando la unicidad del SKU entre productos activos."""
    return CatalogStore(gateway).create_product(product_data.model_dump())

# ======================================================================
# ENDPOINT 5: ACTUALIZAR PRODUCTO
# ======================================================================

@router.patch("/{product_id}", response_model=ProductRead)
def update_product(product_id: int, product_data: ProductUpdate, gateway: GatewayDep):
    data_to_update = product_data.model_dump(exclude_unset=True)
    return CatalogStore(gateway).update_product(product_id, data_to_update)

# ======================================================================
# ENDPOINT 6: ELIMINACIÓN SUAVE
# ======================================================================

@router.delete("/{product_id}", status_code=status.HTTP_200_OK, response_model=dict)
def soft_delete_product(product_id: int, gateway: GatewayDep):
    """
    Marca el producto como inactivo: deja de ofrecerse en el catálogo y su SKU
    queda libre para otro producto activo. Los pedidos ya guardados no cambian.
    """
    product = CatalogStore(gateway).deactivate_product(product_id)
    return {"message": f"Producto {product.name} (SKU: {product.sku}) desactivado exitosamente."}
