from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price_base: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = None
    stock: int = Field(default=0, ge=0)

class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price_base: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0)

class ProductResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price_base: Decimal
    image_url: Optional[str]
    stock: int
    is_active: bool

    class Config:
        from_attributes = True
