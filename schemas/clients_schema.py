from sqlmodel import SQLModel, Field
from pydantic import EmailStr
from typing import List, Optional
from datetime import datetime

from schemas.pagination_schema import PageMetadata

class ClientBase(SQLModel):
    name: str = Field(max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=200)
    email: Optional[EmailStr] = Field(default=None, max_length=100)
    route_id: Optional[int] = None

class ClientCreate(ClientBase):
    pass

class ClientUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=200)
    email: Optional[EmailStr] = None
    route_id: Optional[int] = None
    active: Optional[bool] = None

class ClientRead(ClientBase):
    id: int
    email: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: datetime

# Esquema para listar con paginación
class ClientListResponse(SQLModel):
    data: List[ClientRead]
    metadata: PageMetadata
