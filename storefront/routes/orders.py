"""Order API routes for sellers and delivery partners"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Depends

from ..core.container import Services, get_services
from ..errors import InvalidStatusTransition, OrderError, OrderNotFound
from ..models.checkout import Order, OrderStatus, StatusUpdateRequest, UPIPaymentResponse
from ..utils.order_id import is_valid_order_id
from ..utils.upi import UPIPaymentData, generate_upi_url, validate_upi_id

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("", response_model=list[Order])
async def list_orders(
    seller_id: Optional[str] = Query(None, description="Filter by seller"),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=200),
    services: Services = Depends(get_services),
):
    """List recent orders"""
    return await services.orders.list_orders(seller_id=seller_id, status=status, limit=limit)


@router.get("/scan/{order_id}", response_model=Order)
async def scan_order(
    order_id: str,
    services: Services = Depends(get_services),
):
    """Look up an order from its scanned code"""
    if not is_valid_order_id(order_id):
        raise HTTPException(status_code=400, detail="Invalid order code")

    order = await services.orders.find_by_order_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("/{doc_id}", response_model=Order)
async def get_order(
    doc_id: str,
    services: Services = Depends(get_services),
):
    """Get order details"""
    order = await services.orders.get_order(doc_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.patch("/{doc_id}/status", response_model=Order)
async def update_order_status(
    doc_id: str,
    request: StatusUpdateRequest,
    services: Services = Depends(get_services),
):
    """Move an order along its lifecycle"""
    try:
        return await services.orders.update_status(doc_id, request.status, request.reason)
    except OrderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except OrderError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{doc_id}/upi", response_model=UPIPaymentResponse)
async def get_upi_payment(
    doc_id: str,
    upi_id: str = Query(..., description="Payee UPI handle"),
    payee_name: str = Query("Delivery Partner", description="Name shown to the payer"),
    services: Services = Depends(get_services),
):
    """Build the UPI payload the customer scans to pay on delivery"""
    if not validate_upi_id(upi_id):
        raise HTTPException(status_code=400, detail="Invalid UPI ID")

    order = await services.orders.get_order(doc_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    upi_url = generate_upi_url(
        UPIPaymentData(
            upi_id=upi_id,
            amount=order.total_amount,
            transaction_note=f"Payment for order {order.order_id}",
            merchant_name=payee_name,
            currency=services.settings.currency,
        )
    )
    return UPIPaymentResponse(order_id=order.order_id, amount=order.total_amount, upi_url=upi_url)
