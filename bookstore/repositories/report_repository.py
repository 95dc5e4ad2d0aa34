"""
Revenue queries over the sales documents.

Offline sales are invoice lines, online sales are order lines. Every query
first builds a flat "sales lines" subquery for the requested channel
(UNION ALL of both sources for ``all``) and then aggregates it once, so
the combined channel sums both sources per period.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, extract, union_all, desc
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.models.book import Book
from bookstore.models.sales import Invoice, InvoiceDetail, Order, OrderDetail
from bookstore.schemas.report import SalesChannel


def _month_bounds(month: int, year: int):
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


class ReportRepository:
    """Grouped revenue and best-seller queries (implements RevenueStore)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _source_lines(
        detail, parent_key, document, date_column,
        start: datetime, end: datetime, unit: Optional[str],
    ):
        columns = [
            detail.book_id.label("book_id"),
            (detail.quantity * detail.unit_price).label("amount"),
            detail.quantity.label("quantity"),
        ]
        if unit:
            columns.insert(0, extract(unit, date_column).label("period"))

        return (
            select(*columns)
            .join(document, document.id == parent_key)
            .where(date_column >= start, date_column < end)
        )

    def _sales_lines(
        self,
        channel: SalesChannel,
        start: datetime,
        end: datetime,
        unit: Optional[str] = None,
    ):
        selects = []
        if channel in (SalesChannel.OFFLINE, SalesChannel.ALL):
            selects.append(
                self._source_lines(
                    InvoiceDetail, InvoiceDetail.invoice_id, Invoice, Invoice.created_at,
                    start, end, unit,
                )
            )
        if channel in (SalesChannel.ONLINE, SalesChannel.ALL):
            selects.append(
                self._source_lines(
                    OrderDetail, OrderDetail.order_id, Order, Order.order_date,
                    start, end, unit,
                )
            )

        if len(selects) == 1:
            return selects[0].subquery("sales_lines")
        return union_all(*selects).subquery("sales_lines")

    async def _period_rows(self, lines) -> List[Dict[str, Any]]:
        result = await self.db.execute(
            select(
                lines.c.period,
                func.sum(lines.c.amount).label("total_revenue"),
                func.sum(lines.c.quantity).label("total_sold"),
            )
            .group_by(lines.c.period)
            .order_by(lines.c.period)
        )
        return [dict(row) for row in result.mappings().all()]

    async def revenue_by_month(self, year: int, channel: SalesChannel) -> List[Dict[str, Any]]:
        lines = self._sales_lines(
            channel, datetime(year, 1, 1), datetime(year + 1, 1, 1), unit="month"
        )
        return await self._period_rows(lines)

    async def revenue_by_day(
        self, month: int, year: int, channel: SalesChannel
    ) -> List[Dict[str, Any]]:
        start, end = _month_bounds(month, year)
        lines = self._sales_lines(channel, start, end, unit="day")
        return await self._period_rows(lines)

    async def total_for_month(
        self, month: int, year: int, channel: SalesChannel
    ) -> Dict[str, Any]:
        start, end = _month_bounds(month, year)
        lines = self._sales_lines(channel, start, end)

        result = await self.db.execute(
            select(
                func.sum(lines.c.amount).label("total_revenue"),
                func.sum(lines.c.quantity).label("total_sold"),
            )
        )
        return dict(result.mappings().one())

    async def top_sold_books(
        self, month: int, year: int, limit: int, channel: SalesChannel
    ) -> List[Dict[str, Any]]:
        start, end = _month_bounds(month, year)
        lines = self._sales_lines(channel, start, end)

        result = await self.db.execute(
            select(
                lines.c.book_id,
                Book.title,
                func.sum(lines.c.quantity).label("total_sold"),
            )
            .select_from(lines)
            .join(Book, Book.id == lines.c.book_id)
            .group_by(lines.c.book_id, Book.title)
            .order_by(desc("total_sold"), lines.c.book_id)
            .limit(limit)
        )
        return [dict(row) for row in result.mappings().all()]
