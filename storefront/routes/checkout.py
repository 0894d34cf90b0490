"""Checkout API routes for the storefront"""

import logging
from fastapi import APIRouter, HTTPException, Depends

from ..core.container import Services, get_services
from ..errors import CheckoutValidationError, CartError
from ..models.checkout import CheckoutRequest, CheckoutResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutResult)
async def checkout(
    request: CheckoutRequest,
    services: Services = Depends(get_services),
):
    """
    Place one cash-on-delivery order per seller in the cart.

    Validation failures return 400 before anything is written. Order or
    stock failures return a result with success=false and one outcome per
    seller; sellers that succeeded keep their orders.
    """
    try:
        result = await services.checkout.checkout(request.customer)
    except (CheckoutValidationError, CartError) as e:
        logger.info(f"Checkout rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return result
