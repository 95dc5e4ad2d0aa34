"""Pydantic schemas for promotions and promotion-code pricing."""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, List

from pydantic import BaseModel, Field

from bookstore.schemas.base import BaseResponseSchema, BaseCreateSchema


# ==================== Promotion Schemas ====================

class PromotionBase(BaseCreateSchema):
    """Fields an administrator fills in on the promotion form."""
    name: Optional[str] = None
    type: Optional[str] = Field(None, description="percent | fixed")
    discount_value: Optional[Decimal] = None

    # Calendar dates as yyyy-mm-dd (longer ISO strings are cut to the date part)
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    min_price: Optional[Decimal] = None
    quantity: Optional[int] = Field(None, description="Redemption cap, null = unlimited")
    book_ids: List[int] = Field(default_factory=list, description="Empty = store-wide")


class PromotionCreate(PromotionBase):
    """Schema for creating a promotion. The code is generated when omitted."""
    promotion_code: Optional[str] = Field(None, max_length=30)


class PromotionUpdate(PromotionBase):
    """Schema for updating a promotion (full replacement of editable fields)."""
    used_quantity: Optional[int] = None


class PromotionResponse(BaseResponseSchema):
    """Response schema for Promotion."""
    id: int
    promotion_code: str
    name: str
    type: str
    discount_value: Decimal
    start_date: date
    end_date: date
    min_price: Decimal
    quantity: Optional[int] = None
    used_quantity: int
    remaining_quantity: Optional[int] = None
    book_ids: List[int] = []
    created_at: datetime
    updated_at: datetime


# ==================== Pricing Schemas ====================

class PromotionCheckRequest(BaseModel):
    """Request to price an order with a promotion code."""
    code: Optional[str] = None
    total_amount: Any = None
    book_ids: Optional[List[int]] = None


class PriceQuoteResponse(BaseModel):
    """Outcome of pricing an order with a promotion code."""
    approved: bool
    message: str
    promotion_id: int
    promotion_code: str
    name: str
    type: str
    discount_value: Decimal
    order_total: Decimal
    discount_amount: Decimal
    final_amount: Decimal


class RedemptionResponse(BaseModel):
    """Counter state after a committed redemption."""
    message: str
    promotion_id: int
    promotion_code: str
    used_quantity: int
    quantity: Optional[int] = None
