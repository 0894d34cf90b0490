"""Stock models for the storefront"""

from pydantic import BaseModel, Field
from typing import Optional


class StockDelta(BaseModel):
    """Signed stock change: positive removes stock, negative restores it"""
    product_id: str
    quantity_change: int


class LowStockAlert(BaseModel):
    """Seller-facing warning raised when stock drops to the threshold"""
    product_id: str
    product_name: str
    current_stock: int
    threshold: int
    seller_id: Optional[str] = None


class StockLevelResponse(BaseModel):
    """Last known stock for a product (None when not yet known locally)"""
    product_id: str
    stock: Optional[int] = None
    in_stock: bool


class RestockRequest(BaseModel):
    """Request to set a product's stock"""
    stock: int = Field(ge=0)
