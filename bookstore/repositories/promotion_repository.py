"""SQLAlchemy implementation of PromotionStore."""
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, update, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.models.book import Book
from bookstore.models.promotion import Promotion


CODE_PREFIX = "KM"


class PromotionRepository:
    """Promotion persistence on an AsyncSession (one per request)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_code(self, code: str) -> Optional[Promotion]:
        result = await self.db.execute(
            select(Promotion).where(func.upper(Promotion.promotion_code) == code.strip().upper())
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, promotion_id: int) -> Optional[Promotion]:
        result = await self.db.execute(
            select(Promotion)
            .where(Promotion.id == promotion_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Promotion]:
        result = await self.db.execute(
            select(Promotion).order_by(Promotion.start_date.desc(), Promotion.id.desc())
        )
        return list(result.scalars().all())

    async def list_available(self, order_total: Decimal, today: date) -> List[Promotion]:
        result = await self.db.execute(
            select(Promotion)
            .where(
                and_(
                    Promotion.start_date <= today,
                    Promotion.end_date >= today,
                    or_(
                        Promotion.quantity.is_(None),
                        Promotion.used_quantity < Promotion.quantity,
                    ),
                    Promotion.min_price <= order_total,
                )
            )
            .order_by(Promotion.end_date, Promotion.id)
        )
        return list(result.scalars().all())

    async def next_code(self) -> str:
        # Longest code first so that KM100 sorts after KM99
        result = await self.db.execute(
            select(Promotion.promotion_code)
            .where(Promotion.promotion_code.like(f"{CODE_PREFIX}%"))
            .order_by(func.length(Promotion.promotion_code).desc(), Promotion.promotion_code.desc())
            .limit(1)
        )
        last_code = result.scalar_one_or_none()

        next_number = 1
        if last_code:
            numeric_part = last_code[len(CODE_PREFIX):]
            if numeric_part.isdigit():
                next_number = int(numeric_part) + 1

        return f"{CODE_PREFIX}{next_number:02d}"

    async def missing_book_ids(self, book_ids: Sequence[int]) -> List[int]:
        wanted = set(book_ids)
        if not wanted:
            return []
        result = await self.db.execute(select(Book.id).where(Book.id.in_(wanted)))
        found = set(result.scalars().all())
        return sorted(wanted - found)

    async def _load_books(self, book_ids: Sequence[int]) -> List[Book]:
        if not book_ids:
            return []
        result = await self.db.execute(select(Book).where(Book.id.in_(set(book_ids))))
        return list(result.scalars().all())

    async def create(self, fields: Dict[str, Any], book_ids: Sequence[int]) -> Promotion:
        promotion = Promotion(**fields)
        promotion.books = await self._load_books(book_ids)

        self.db.add(promotion)
        await self.db.flush()
        return promotion

    async def update(
        self, promotion_id: int, fields: Dict[str, Any], book_ids: Sequence[int]
    ) -> Optional[Promotion]:
        promotion = await self.get_by_id(promotion_id)
        if promotion is None:
            return None

        for field, value in fields.items():
            setattr(promotion, field, value)
        promotion.books = await self._load_books(book_ids)

        await self.db.flush()
        return promotion

    async def delete(self, promotion_id: int) -> bool:
        promotion = await self.db.get(Promotion, promotion_id)
        if promotion is None:
            return False

        await self.db.delete(promotion)
        await self.db.flush()
        return True

    async def increment_usage(self, promotion_id: int) -> bool:
        """Conditional UPDATE: the cap check and the increment are one statement."""
        result = await self.db.execute(
            update(Promotion)
            .where(
                Promotion.id == promotion_id,
                or_(
                    Promotion.quantity.is_(None),
                    Promotion.used_quantity < Promotion.quantity,
                ),
            )
            .values(
                used_quantity=Promotion.used_quantity + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def raise_usage(self, promotion_id: int, used_quantity: int) -> bool:
        """Set the counter to ``used_quantity`` unless it already moved past it."""
        result = await self.db.execute(
            update(Promotion)
            .where(
                Promotion.id == promotion_id,
                Promotion.used_quantity <= used_quantity,
                or_(
                    Promotion.quantity.is_(None),
                    Promotion.quantity >= used_quantity,
                ),
            )
            .values(
                used_quantity=used_quantity,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
