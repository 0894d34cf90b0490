"""Product API routes for the storefront"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Query, Depends

from ..core.container import Services, get_services
from ..models.product import Product, ProductCategory, ProductSearchResponse

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductSearchResponse)
async def search_products(
    query: Optional[str] = Query(None, description="Search query"),
    category: Optional[ProductCategory] = Query(None, description="Filter by category"),
    seller_id: Optional[str] = Query(None, description="Filter by seller"),
    pincode: Optional[str] = Query(None, description="Only products deliverable to this PIN code"),
    in_stock_only: bool = Query(True, description="Only show in-stock items"),
    limit: int = Query(20, ge=1, le=100, description="Max results"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    services: Services = Depends(get_services),
):
    """Search products in the catalog"""
    products, total = await services.products.search_products(
        query=query,
        category=category,
        seller_id=seller_id,
        pincode=pincode,
        in_stock_only=in_stock_only,
        limit=limit,
        offset=offset,
    )

    return ProductSearchResponse(
        products=products,
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/categories", response_model=list[str])
async def list_categories():
    """List all product categories"""
    return [c.value for c in ProductCategory]


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    services: Services = Depends(get_services),
):
    """Get a product by ID"""
    product = await services.products.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
