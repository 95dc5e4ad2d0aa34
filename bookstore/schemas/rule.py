"""Pydantic schemas for the operational rules record."""
from typing import Any

from bookstore.schemas.base import BaseResponseSchema, BaseCreateSchema


class RuleUpdate(BaseCreateSchema):
    """All four fields are required; RuleService reports every bad one."""
    min_import_quantity: Any = None
    min_stock_before_import: Any = None
    min_stock_after_sale: Any = None
    max_promotion_duration: Any = None


class RuleResponse(BaseResponseSchema):
    min_import_quantity: int
    min_stock_before_import: int
    min_stock_after_sale: int
    max_promotion_duration: int
