"""Cart API routes for the storefront"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends

from ..core.container import Services, get_services
from ..errors import CartError, CartNotInitialized
from ..models.cart import AddToCartRequest, UpdateCartItemRequest, CartResponse

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def cart_response(services: Services, message: Optional[str] = None) -> CartResponse:
    cart = services.cart
    return CartResponse(
        items=cart.items,
        total_amount=cart.total_amount,
        total_items=cart.total_items,
        currency=services.settings.currency,
        message=message,
    )


@router.get("", response_model=CartResponse)
async def get_cart(services: Services = Depends(get_services)):
    """Get the cart with live stock"""
    return cart_response(services)


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    services: Services = Depends(get_services),
):
    """Add an item to the cart"""
    product = await services.products.get_product(request.product_id)
    if not product or not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found")

    try:
        services.cart.add_to_cart(product, request.quantity)
    except CartNotInitialized as e:
        raise HTTPException(status_code=503, detail=str(e))
    except CartError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return cart_response(services, f"Added {request.quantity}x {product.name} to cart")


@router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    request: UpdateCartItemRequest,
    services: Services = Depends(get_services),
):
    """Update item quantity in cart (zero or less removes it)"""
    if request.quantity > 0 and not services.cart.is_in_cart(product_id):
        raise HTTPException(status_code=404, detail="Item not in cart")

    try:
        services.cart.update_quantity(product_id, request.quantity)
    except CartNotInitialized as e:
        raise HTTPException(status_code=503, detail=str(e))

    return cart_response(services, "Cart updated")


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: str,
    services: Services = Depends(get_services),
):
    """Remove an item from the cart"""
    try:
        services.cart.remove_from_cart(product_id)
    except CartNotInitialized as e:
        raise HTTPException(status_code=503, detail=str(e))
    return cart_response(services, "Item removed")


@router.delete("", response_model=CartResponse)
async def clear_cart(services: Services = Depends(get_services)):
    """Clear all items from cart"""
    try:
        services.cart.clear_cart()
    except CartNotInitialized as e:
        raise HTTPException(status_code=503, detail=str(e))
    return cart_response(services, "Cart cleared")
