"""
Storage contracts the services depend on.

Services only talk to these protocols. The SQLAlchemy repositories in this
package implement them for production; tests substitute in-memory stores.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from bookstore.models.promotion import Promotion
from bookstore.models.rule import Rule
from bookstore.schemas.report import SalesChannel


@runtime_checkable
class PromotionStore(Protocol):
    """Persistence for promotions and their redemption counter."""

    async def get_by_code(self, code: str) -> Optional[Promotion]:
        """Promotion with this code (case-insensitive), or None."""
        ...

    async def get_by_id(self, promotion_id: int) -> Optional[Promotion]:
        """Promotion by primary key, freshly read from storage."""
        ...

    async def list_all(self) -> List[Promotion]:
        ...

    async def list_available(self, order_total: Decimal, today: date) -> List[Promotion]:
        """Promotions in window today, not exhausted, with min_price <= order_total."""
        ...

    async def next_code(self) -> str:
        """Next free sequential code (KM01, KM02, ...)."""
        ...

    async def missing_book_ids(self, book_ids: Sequence[int]) -> List[int]:
        """Ids from ``book_ids`` with no matching book."""
        ...

    async def create(self, fields: Dict[str, Any], book_ids: Sequence[int]) -> Promotion:
        ...

    async def update(
        self, promotion_id: int, fields: Dict[str, Any], book_ids: Sequence[int]
    ) -> Optional[Promotion]:
        """Apply ``fields``; None when the promotion does not exist."""
        ...

    async def delete(self, promotion_id: int) -> bool:
        """True when a row was removed."""
        ...

    async def increment_usage(self, promotion_id: int) -> bool:
        """
        Atomically add one redemption.

        Must be a single check-and-increment: succeeds only while
        ``quantity`` is null or ``used_quantity < quantity``. Returns False
        when nothing was incremented.
        """
        ...

    async def raise_usage(self, promotion_id: int, used_quantity: int) -> bool:
        """
        Set ``used_quantity`` in one conditional statement that never lowers
        the stored counter nor passes ``quantity``. False when nothing changed.
        """
        ...


@runtime_checkable
class RevenueStore(Protocol):
    """Aggregated sales queries. Rows are mappings with keys
    ``period``, ``total_revenue`` and ``total_sold``; periods without sales
    are simply absent."""

    async def revenue_by_month(
        self, year: int, channel: SalesChannel
    ) -> Sequence[Mapping[str, Any]]:
        ...

    async def revenue_by_day(
        self, month: int, year: int, channel: SalesChannel
    ) -> Sequence[Mapping[str, Any]]:
        ...

    async def total_for_month(
        self, month: int, year: int, channel: SalesChannel
    ) -> Mapping[str, Any]:
        """Single ``{total_revenue, total_sold}`` summary (values may be None)."""
        ...

    async def top_sold_books(
        self, month: int, year: int, limit: int, channel: SalesChannel
    ) -> Sequence[Mapping[str, Any]]:
        """Rows ``{book_id, title, total_sold}`` ordered best-first."""
        ...


@runtime_checkable
class RuleStore(Protocol):
    """The singleton rules record."""

    async def get_rules(self) -> Optional[Rule]:
        ...

    async def update_rules(self, fields: Dict[str, int]) -> Optional[Rule]:
        """Write all fields at once; None when there is no rules row."""
        ...
