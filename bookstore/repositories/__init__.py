# Repositories module
from bookstore.repositories.interfaces import PromotionStore, RevenueStore, RuleStore
from bookstore.repositories.promotion_repository import PromotionRepository
from bookstore.repositories.report_repository import ReportRepository
from bookstore.repositories.rule_repository import RuleRepository

__all__ = [
    "PromotionStore",
    "RevenueStore",
    "RuleStore",
    "PromotionRepository",
    "ReportRepository",
    "RuleRepository",
]
