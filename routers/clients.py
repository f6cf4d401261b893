from fastapi import APIRouter, status, Query
from typing import Optional

from core.dependencies import GatewayDep
from schemas.clients_schema import ClientCreate, ClientListResponse, ClientRead, ClientUpdate
from schemas.pagination_schema import paginate
from services.catalog import CatalogStore

# Configuración del Router con prefijo
router = APIRouter(
    prefix="/api/clients", 
    tags=["CLIENTS"], 
) 


# 1. Obtener lista de clientes (GET)
@router.get("", response_model=ClientListResponse, summary="Listar y buscar clientes activos")
def list_clients(
    gateway: GatewayDep,
    search: Optional[str] = Query(default=None, description="Buscar por nombre, dirección o nombre de ruta (parcialmente)."),
    limit: int = Query(20, ge=1, le=100, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Desplazamiento"),
):
    """
    Devuelve los clientes activos. El filtro `search` es el mismo que usa el
    primer paso del asistente de pedidos.
    """
    return paginate(CatalogStore(gateway).search_clients(search), limit, offset)


# 2. Obtener un cliente en particular (GET)
@router.get("/{client_id}", response_model=ClientRead)
def read_client(client_id: int, gateway: GatewayDep):
    """Obtiene un cliente específico por su ID."""
    return CatalogStore(gateway).get_client(client_id)


# 3. Crear un nuevo cliente (POST)
@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
def create_client(client_data: ClientCreate, gateway: GatewayDep):
    """Crea un nuevo cliente; si se indica ruta, debe existir."""
    return CatalogStore(gateway).create_client(client_data.model_dump())


# 4. Actualizar parcialmente un cliente (PATCH)
@router.patch("/{client_id}", response_model=ClientRead)
def update_client(client_id: int, client_data: ClientUpdate, gateway: GatewayDep):
    data_to_update = client_data.model_dump(exclude_unset=True)
    return CatalogStore(gateway).update_client(client_id, data_to_update)


# 5. Eliminación Suave (DELETE)
@router.delete("/{client_id}", status_code=status.HTTP_200_OK, response_model=dict)
def soft_delete_client(client_id: int, gateway: GatewayDep):
    """
    Marca el cliente como inactivo. Sus pedidos se conservan; deja de aparecer
    en la búsqueda del asistente. Se reactiva con PATCH active=true.
    """
    client = CatalogStore(gateway).deactivate_client(client_id)
    return {"message": f"Cliente {client.name} (ID: {client_id}) desactivado exitosamente."}
