from fastapi import APIRouter, Query, status
from typing import List

from core.dependencies import GatewayDep
from schemas.clients_schema import ClientRead
from schemas.routes_schema import RouteCreate, RouteRead, RouteUpdate, SalespersonAssign
from services.catalog import CatalogStore

router = APIRouter(
    prefix="/api/routes",
    tags=["ROUTES"],
)


# 1. Listar rutas (GET)
@router.get("", response_model=List[RouteRead])
def list_routes(
    gateway: GatewayDep,
    include_inactive: bool = Query(False, description="Incluir rutas desactivadas"),
):
    """Obtiene las rutas ordenadas por nombre."""
    return gateway.routes.list(include_inactive=include_inactive)


# 2. Obtener una ruta (GET)
@router.get("/{route_id}", response_model=RouteRead)
def read_route(route_id: int, gateway: GatewayDep):
    return CatalogStore(gateway).get_route(route_id)


# 3. Clientes de una ruta (GET)
@router.get("/{route_id}/clients", response_model=List[ClientRead])
def read_route_clients(route_id: int, gateway: GatewayDep):
    """Clientes activos asignados a la ruta."""
    return CatalogStore(gateway).clients_by_route(route_id)


# 4. Crear una ruta (POST)
@router.post("", response_model=RouteRead, status_code=status.HTTP_201_CREATED)
def create_route(route_data: RouteCreate, gateway: GatewayDep):
    """Crea una nueva ruta; el nombre debe ser único."""
    return CatalogStore(gateway).create_route(route_data.model_dump())


# 5. Actualizar una ruta (PATCH)
@router.patch("/{route_id}", response_model=RouteRead)
def update_route(route_id: int, route_data: RouteUpdate, gateway: GatewayDep):
    data_to_update = route_data.model_dump(exclude_unset=True)
    return CatalogStore(gateway).update_route(route_id, data_to_update)


# 6. Asignar vendedor (PATCH)
@router.patch("/{route_id}/salesperson", response_model=RouteRead)
def assign_salesperson(route_id: int, assignment: SalespersonAssign, gateway: GatewayDep):
    return CatalogStore(gateway).assign_salesperson(route_id, assignment.salesperson)


# 7. Eliminación Suave (DELETE)
@router.delete("/{route_id}", status_code=status.HTTP_200_OK, response_model=dict)
def soft_delete_route(route_id: int, gateway: GatewayDep):
    """Desactiva la ruta; sus clientes conservan la asignación."""
    route = CatalogStore(gateway).deactivate_route(route_id)
    return {"message": f"Ruta {route.name} (ID: {route_id}) desactivada exitosamente."}
