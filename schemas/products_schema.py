from sqlmodel import SQLModel, Field
from typing import List, Optional
from datetime import datetime

from schemas.pagination_schema import PageMetadata


class ProductBase(SQLModel):
    name: str = Field(max_length=100)
    sku: str = Field(max_length=30, description="Letras, números y guiones; se guarda en mayúsculas")
    category: Optional[str] = Field(default=None, max_length=50)
    price: float = Field(gt=0)
    stock: int = Field(default=0, ge=0)
    min_stock: int = Field(default=0, ge=0)


class ProductCreate(ProductBase):
    pass

class ProductUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=100)
    sku: Optional[str] = Field(default=None, max_length=30)
    category: Optional[str] = Field(default=None, max_length=50)
    price: Optional[float] = Field(default=None, gt=0)
    stock: Optional[int] = Field(default=None, ge=0)
    min_stock: Optional[int] = Field(default=None, ge=0)
    active: Optional[bool] = None

class ProductRead(ProductBase):
    id: int
    active: bool
    created_at: datetime
    updated_at: datetime

class SkuValidationResponse(SQLModel):
    sku: str
    valid: bool
    message: Optional[str] = None

# Esquema para listar con paginación
class ProductListResponse(SQLModel):
    data: List[ProductRead]
    metadata: PageMetadata
