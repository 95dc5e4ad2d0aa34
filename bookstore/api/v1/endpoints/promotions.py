"""API endpoints for promotions: admin CRUD, checkout pricing and redemption."""
from typing import List, Optional

from fastapi import APIRouter, status

from bookstore.api.deps import Engine, Promotions
from bookstore.schemas.base import MessageResponse
from bookstore.schemas.promotion import (
    PromotionCreate,
    PromotionUpdate,
    PromotionResponse,
    PromotionCheckRequest,
    PriceQuoteResponse,
    RedemptionResponse,
)

router = APIRouter()


# ==================== Admin ====================

@router.get("", response_model=List[PromotionResponse])
async def list_promotions(service: Promotions):
    """List all promotions, newest window first."""
    return await service.list_promotions()


@router.get("/available", response_model=List[PromotionResponse])
async def list_available_promotions(
    service: Promotions,
    total_price: Optional[str] = None,
):
    """Promotions usable today for an order of ``total_price``."""
    return await service.list_available(total_price)


@router.post("", response_model=PromotionResponse, status_code=status.HTTP_201_CREATED)
async def create_promotion(promo_in: PromotionCreate, service: Promotions):
    """Create a promotion. The code is generated (KM01, KM02, ...) when omitted."""
    return await service.create_promotion(promo_in)


@router.put("/{promotion_id}", response_model=PromotionResponse)
async def update_promotion(promotion_id: int, promo_in: PromotionUpdate, service: Promotions):
    return await service.update_promotion(promotion_id, promo_in)


@router.delete("/{promotion_id}", response_model=MessageResponse)
async def delete_promotion(promotion_id: int, service: Promotions):
    await service.delete_promotion(promotion_id)
    return MessageResponse(message="Xóa khuyến mãi thành công")


# ==================== Checkout ====================

@router.post("/check", response_model=PriceQuoteResponse)
async def check_promotion(request: PromotionCheckRequest, engine: Engine):
    """
    Price an order with a promotion code.
    Read-only: nothing is redeemed until /{promotion_id}/redeem is called.
    """
    quote = await engine.validate_and_price(
        request.code,
        request.total_amount,
        book_ids=request.book_ids,
    )
    return PriceQuoteResponse(**quote.to_dict())


@router.post("/{promotion_id}/redeem", response_model=RedemptionResponse)
async def redeem_promotion(promotion_id: int, engine: Engine):
    """Record one use of the promotion (fails with 409 once the cap is reached)."""
    promotion = await engine.commit_redemption(promotion_id)
    return RedemptionResponse(
        message="Áp dụng mã khuyến mãi thành công",
        promotion_id=promotion.id,
        promotion_code=promotion.promotion_code,
        used_quantity=promotion.used_quantity,
        quantity=promotion.quantity,
    )
