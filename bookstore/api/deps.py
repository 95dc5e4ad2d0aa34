from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.database import get_db
from bookstore.repositories import PromotionRepository, ReportRepository, RuleRepository
from bookstore.services import PromotionEngine, PromotionService, RevenueAggregator, RuleService


# Type alias for database session dependency
DB = Annotated[AsyncSession, Depends(get_db)]


def get_rule_service(db: DB) -> RuleService:
    return RuleService(RuleRepository(db))


def get_promotion_engine(db: DB) -> PromotionEngine:
    return PromotionEngine(PromotionRepository(db))


def get_promotion_service(db: DB) -> PromotionService:
    return PromotionService(PromotionRepository(db), RuleService(RuleRepository(db)))


def get_revenue_aggregator(db: DB) -> RevenueAggregator:
    return RevenueAggregator(ReportRepository(db))


Rules = Annotated[RuleService, Depends(get_rule_service)]
Engine = Annotated[PromotionEngine, Depends(get_promotion_engine)]
Promotions = Annotated[PromotionService, Depends(get_promotion_service)]
Revenue = Annotated[RevenueAggregator, Depends(get_revenue_aggregator)]
