"""Stock API routes for sellers"""

from fastapi import APIRouter, HTTPException, Depends

from ..core.container import Services, get_services
from ..models.stock import LowStockAlert, RestockRequest, StockLevelResponse

router = APIRouter(prefix="/api/stock", tags=["Stock"])


@router.get("/alerts", response_model=list[LowStockAlert])
async def list_low_stock_alerts(services: Services = Depends(get_services)):
    """Active low stock alerts"""
    return services.stock.low_stock_alerts


@router.delete("/alerts/{product_id}")
async def dismiss_low_stock_alert(
    product_id: str,
    services: Services = Depends(get_services),
):
    """Dismiss a low stock alert"""
    if not services.stock.dismiss_low_stock_alert(product_id):
        raise HTTPException(status_code=404, detail="No alert for this product")
    return {"dismissed": product_id}


@router.get("/{product_id}", response_model=StockLevelResponse)
async def get_stock_level(
    product_id: str,
    services: Services = Depends(get_services),
):
    """Last known stock from the live cache"""
    cache = services.stock_cache
    return StockLevelResponse(
        product_id=product_id,
        stock=cache.get_stock(product_id),
        in_stock=cache.is_in_stock(product_id),
    )


@router.put("/{product_id}", response_model=StockLevelResponse)
async def restock_product(
    product_id: str,
    request: RestockRequest,
    services: Services = Depends(get_services),
):
    """Set a product's stock"""
    product = await services.products.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    if not await services.stock.update_stock(product_id, request.stock):
        raise HTTPException(status_code=503, detail="Stock could not be updated, try again later")

    return StockLevelResponse(
        product_id=product_id,
        stock=request.stock,
        in_stock=request.stock > 0,
    )
