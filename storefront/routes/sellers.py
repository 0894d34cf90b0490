"""Seller API routes: delivery area"""

import logging

from fastapi import APIRouter, HTTPException, Depends

from ..core.container import Services, get_services
from ..models.product import SellerCoverageRequest, SellerCoverageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sellers", tags=["Sellers"])


@router.put("/{seller_id}/coverage", response_model=SellerCoverageResponse)
async def set_seller_coverage(
    seller_id: str,
    request: SellerCoverageRequest,
    services: Services = Depends(get_services),
):
    """
    Recompute a seller's delivery area from their base PIN code.

    Every product of the seller gets the PIN codes within the radius as
    its coverage, which checkout validates against.
    """
    pincode = request.pincode.strip()
    radius_km = request.radius_km or services.settings.delivery_radius_km

    if not await services.pincodes.is_pincode_valid(pincode):
        raise HTTPException(status_code=400, detail=f"Invalid PIN code {pincode}")

    covered = await services.pincodes.generate_covered_pincodes(pincode, radius_km)
    updated = await services.products.set_seller_coverage(seller_id, pincode, covered)
    if not updated:
        raise HTTPException(status_code=404, detail="Seller has no products")

    return SellerCoverageResponse(
        seller_id=seller_id,
        pincode=pincode,
        radius_km=radius_km,
        covered_pincodes=covered,
        products_updated=updated,
    )
