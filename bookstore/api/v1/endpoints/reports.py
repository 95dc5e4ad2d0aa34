"""
Revenue report endpoints for the dashboard charts.

All series are dense: every month (or every day of the month) is present,
with zeros where nothing was sold.
"""
from typing import Optional

from fastapi import APIRouter

from bookstore.api.deps import Revenue
from bookstore.schemas.report import (
    SalesChannel,
    YearlyRevenueResponse,
    DailyRevenueResponse,
    MonthlyTotalResponse,
    TopSellersResponse,
)

router = APIRouter()


@router.get("/revenue/yearly", response_model=YearlyRevenueResponse)
async def get_yearly_revenue(
    aggregator: Revenue,
    year: Optional[str] = None,
    channel: Optional[str] = None,
):
    """Revenue per month for a year (always 12 points)."""
    monthly = await aggregator.yearly_series(year, channel)
    return YearlyRevenueResponse(
        year=int(year),
        channel=channel or SalesChannel.ALL,
        monthly=monthly,
    )


@router.get("/revenue/daily", response_model=DailyRevenueResponse)
async def get_daily_revenue(
    aggregator: Revenue,
    month: Optional[str] = None,
    year: Optional[str] = None,
    channel: Optional[str] = None,
):
    """Revenue per day for a month (28 to 31 points)."""
    daily = await aggregator.daily_series(month, year, channel)
    return DailyRevenueResponse(
        month=int(month),
        year=int(year),
        channel=channel or SalesChannel.ALL,
        daily=daily,
    )


@router.get("/revenue/monthly-total", response_model=MonthlyTotalResponse)
async def get_monthly_total(
    aggregator: Revenue,
    month: Optional[str] = None,
    year: Optional[str] = None,
    channel: Optional[str] = None,
):
    totals = await aggregator.monthly_total(month, year, channel)
    return MonthlyTotalResponse(
        month=int(month),
        year=int(year),
        channel=channel or SalesChannel.ALL,
        **totals,
    )


@router.get("/top-sellers", response_model=TopSellersResponse)
async def get_top_sellers(
    aggregator: Revenue,
    month: Optional[str] = None,
    year: Optional[str] = None,
    limit: Optional[str] = None,
    channel: Optional[str] = None,
):
    """Best-selling books of the month."""
    items = await aggregator.top_sellers(month, year, limit, channel)
    return TopSellersResponse(
        month=int(month),
        year=int(year),
        channel=channel or SalesChannel.ALL,
        items=items,
    )
