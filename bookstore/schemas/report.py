"""Pydantic schemas for revenue reports (dashboard charts)."""
from enum import Enum
from typing import List

from pydantic import BaseModel


class SalesChannel(str, Enum):
    """Which sales documents a report reads."""
    OFFLINE = "offline"  # counter invoices
    ONLINE = "online"    # storefront orders
    ALL = "all"          # both, summed per period


class RevenuePoint(BaseModel):
    """One entry of a dense series: a month (1-12) or a day of the month."""
    period: int
    total_revenue: float = 0.0
    total_sold: int = 0


class YearlyRevenueResponse(BaseModel):
    year: int
    channel: SalesChannel
    monthly: List[RevenuePoint]


class DailyRevenueResponse(BaseModel):
    month: int
    year: int
    channel: SalesChannel
    daily: List[RevenuePoint]


class MonthlyTotalResponse(BaseModel):
    month: int
    year: int
    channel: SalesChannel
    total_revenue: float = 0.0
    total_sold: int = 0


class TopSeller(BaseModel):
    book_id: int
    title: str
    total_sold: int


class TopSellersResponse(BaseModel):
    month: int
    year: int
    channel: SalesChannel
    items: List[TopSeller]
