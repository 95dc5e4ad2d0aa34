"""
Revenue Aggregator for the dashboard charts.

The store returns one row per period that had sales. The charts need a
point for every period, so the aggregator fills the gaps with zeros:
- yearly: 12 months, January to December
- daily: every calendar day of the month (28/29/30/31)

Parameters are validated before the store is queried.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from bookstore.config import settings
from bookstore.core.dates import days_in_month
from bookstore.core.exceptions import InvalidParameterError, MissingParameterError, storage_errors
from bookstore.repositories.interfaces import RevenueStore
from bookstore.schemas.report import SalesChannel


logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidParameterError(f"Tham số không hợp lệ: {field}", {"field": field, "value": value})
    try:
        return int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(
            f"Tham số không hợp lệ: {field}",
            {"field": field, "value": value},
        ) from exc


# MAX_YEAR: the next January 1st must still be a valid datetime
MIN_YEAR, MAX_YEAR = 1, 9998


def _parse_year(value: Any) -> int:
    year = _as_int(value, "year")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidParameterError(
            f"Năm không hợp lệ: {year}",
            {"field": "year", "value": year},
        )
    return year


def _parse_month_year(month: Any, year: Any):
    if _is_blank(month) or _is_blank(year):
        raise MissingParameterError(
            "Thiếu tham số tháng hoặc năm",
            {"month": month, "year": year},
        )
    month_number = _as_int(month, "month")
    year_number = _parse_year(year)
    days_in_month(month_number, year_number)  # rejects month outside 1..12
    return month_number, year_number


def _parse_channel(channel: Any) -> SalesChannel:
    if channel is None or channel == "":
        return SalesChannel.ALL
    try:
        return SalesChannel(channel)
    except ValueError as exc:
        raise InvalidParameterError(
            f"Kênh bán hàng không hợp lệ: {channel}",
            {"field": "channel", "value": channel},
        ) from exc


def dense_series(rows: Iterable[Optional[Mapping[str, Any]]], periods: int) -> List[Dict[str, Any]]:
    """
    Spread sparse ``{period, total_revenue, total_sold}`` rows over 1..periods.

    Empty or null rows and periods outside the range are ignored; two rows
    for the same period are added together.
    """
    series = [
        {"period": period, "total_revenue": 0.0, "total_sold": 0}
        for period in range(1, periods + 1)
    ]

    for row in rows:
        if not row or row.get("period") is None:
            continue
        period = int(row["period"])
        if not 1 <= period <= periods:
            continue

        point = series[period - 1]
        point["total_revenue"] += float(row.get("total_revenue") or 0)
        point["total_sold"] += int(row.get("total_sold") or 0)

    return series


class RevenueAggregator:
    """Dense revenue series and best-seller ranking over a RevenueStore."""

    def __init__(self, store: RevenueStore):
        self.store = store

    async def yearly_series(self, year: Any, channel: Any = SalesChannel.ALL) -> List[Dict[str, Any]]:
        """Revenue per month of ``year``: always 12 points."""
        if _is_blank(year):
            raise MissingParameterError("Thiếu tham số năm", {"year": year})
        year_number = _parse_year(year)
        sales_channel = _parse_channel(channel)

        with storage_errors("yearly_series"):
            rows = await self.store.revenue_by_month(year_number, sales_channel)

        return dense_series(rows, 12)

    async def daily_series(
        self, month: Any, year: Any, channel: Any = SalesChannel.ALL
    ) -> List[Dict[str, Any]]:
        """Revenue per day of ``month``/``year``: one point per calendar day."""
        month_number, year_number = _parse_month_year(month, year)
        sales_channel = _parse_channel(channel)

        with storage_errors("daily_series"):
            rows = await self.store.revenue_by_day(month_number, year_number, sales_channel)

        return dense_series(rows, days_in_month(month_number, year_number))

    async def monthly_total(
        self, month: Any, year: Any, channel: Any = SalesChannel.ALL
    ) -> Dict[str, Any]:
        month_number, year_number = _parse_month_year(month, year)
        sales_channel = _parse_channel(channel)

        with storage_errors("monthly_total"):
            row = await self.store.total_for_month(month_number, year_number, sales_channel)

        row = row or {}
        return {
            "total_revenue": float(row.get("total_revenue") or 0),
            "total_sold": int(row.get("total_sold") or 0),
        }

    async def top_sellers(
        self,
        month: Any,
        year: Any,
        limit: Any = None,
        channel: Any = SalesChannel.ALL,
    ) -> List[Dict[str, Any]]:
        """Best-selling books of the month, in the order the store ranks them."""
        month_number, year_number = _parse_month_year(month, year)
        sales_channel = _parse_channel(channel)

        if _is_blank(limit):
            limit_number = settings.TOP_SELLERS_DEFAULT_LIMIT
        else:
            limit_number = _as_int(limit, "limit")
            if not 1 <= limit_number <= settings.TOP_SELLERS_MAX_LIMIT:
                raise InvalidParameterError(
                    f"Số lượng phải từ 1 đến {settings.TOP_SELLERS_MAX_LIMIT}",
                    {"field": "limit", "value": limit_number},
                )

        with storage_errors("top_sellers"):
            rows = await self.store.top_sold_books(month_number, year_number, limit_number, sales_channel)

        return [
            {
                "book_id": row["book_id"],
                "title": row["title"],
                "total_sold": int(row["total_sold"] or 0),
            }
            for row in rows
        ]
