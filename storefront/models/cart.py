"""Cart models for the storefront"""

from pydantic import BaseModel, Field
from typing import Optional

from .product import Product


class CartEntry(BaseModel):
    """One product line in the buyer's cart"""
    product_id: str
    # Snapshot taken when the product was added
    product: Product
    quantity: int = Field(gt=0)

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity


class AddToCartRequest(BaseModel):
    """Request to add item to cart"""
    product_id: str
    quantity: int = Field(default=1, gt=0)


class UpdateCartItemRequest(BaseModel):
    """Request to update cart item quantity (zero or less removes it)"""
    quantity: int


class CartResponse(BaseModel):
    """Cart API response"""
    items: list[CartEntry] = []
    total_amount: float = 0.0
    total_items: int = 0
    currency: str = "INR"
    message: Optional[str] = None
