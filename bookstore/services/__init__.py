# Services module
from bookstore.services.promotion_engine import (
    PromotionEngine,
    PriceQuote,
    compute_discount,
    validate_duration_against_rules,
)
from bookstore.services.promotion_service import PromotionService
from bookstore.services.revenue_aggregator import RevenueAggregator, dense_series
from bookstore.services.rule_service import RuleService, validate_rules

__all__ = [
    "PromotionEngine",
    "PriceQuote",
    "compute_discount",
    "validate_duration_against_rules",
    "PromotionService",
    "RevenueAggregator",
    "dense_series",
    "RuleService",
    "validate_rules",
]
