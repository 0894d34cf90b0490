"""Product models for the storefront"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class ProductCategory(str, Enum):
    FERTILIZERS = "Fertilizers"
    PESTICIDES = "Pesticides"
    SEEDS = "Seeds"
    TOOLS = "Tools"
    IRRIGATION = "Irrigation"
    ORGANIC = "Organic Products"


class Product(BaseModel):
    """Product in the catalog"""
    id: str
    seller_id: str
    seller_name: str
    seller_pincode: Optional[str] = None
    name: str
    description: str = ""
    category: ProductCategory
    price: float = Field(ge=0)
    unit: str = "unit"
    stock: int = Field(ge=0, default=0)
    images: list[str] = []
    covered_pincodes: list[str] = []
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


class ProductSearchResponse(BaseModel):
    """Response from product search"""
    products: list[Product]
    total: int
    limit: int
    offset: int


class SellerCoverageRequest(BaseModel):
    """Request to recompute a seller's delivery area from their base PIN code"""
    pincode: str
    radius_km: Optional[float] = Field(default=None, gt=0, le=100)


class SellerCoverageResponse(BaseModel):
    """Delivery area applied to every product of a seller"""
    seller_id: str
    pincode: str
    radius_km: float
    covered_pincodes: list[str]
    products_updated: int
