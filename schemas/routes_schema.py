from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

class RouteBase(SQLModel):
    name: str = Field(max_length=50)
    description: Optional[str] = Field(default=None, max_length=100)
    salesperson: Optional[str] = Field(default=None, max_length=100)

class RouteCreate(RouteBase):
    pass

class RouteRead(RouteBase):
    id: int
    active: bool
    created_at: datetime
    updated_at: datetime

class RouteUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = Field(default=None, max_length=100)
    salesperson: Optional[str] = Field(default=None, max_length=100)
    active: Optional[bool] = None

class SalespersonAssign(SQLModel):
    salesperson: str = Field(min_length=1, max_length=100)
