from typing import Annotated, Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from repositories.base import Gateway
from repositories.sql import SqlGateway


def get_gateway(request: Request) -> Iterator[Gateway]:
    """
    Entrega el almacén de la petición.

    En modo offline se usa el almacén en memoria creado al construir la app;
    en modo normal, una sesión de base de datos nueva por petición.
    """
    offline_gateway = getattr(request.app.state, "offline_gateway", None)
    if offline_gateway is not None:
        yield offline_gateway
        return

    with Session(request.app.state.engine) as session:
        yield SqlGateway(session)


GatewayDep = Annotated[Gateway, Depends(get_gateway)]
