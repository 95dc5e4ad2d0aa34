"""Promotion model: code-based discounts with a date window and a usage cap."""
from datetime import datetime, date, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional, List

from sqlalchemy import (
    String, DateTime, Date, ForeignKey, Integer, Numeric, Table, Column,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore.database import Base

if TYPE_CHECKING:
    from bookstore.models.book import Book


class PromotionType(str, Enum):
    """How discount_value is interpreted."""
    PERCENT = "percent"  # discount_value is a percentage of the order total
    FIXED = "fixed"      # discount_value is a money amount


# Books a promotion is restricted to (no rows = store-wide)
promotion_books = Table(
    "promotion_books",
    Base.metadata,
    Column("promotion_id", ForeignKey("promotions.id", ondelete="CASCADE"), primary_key=True),
    Column("book_id", ForeignKey("books.id", ondelete="CASCADE"), primary_key=True),
)


class Promotion(Base):
    """
    Promotion code redeemable at checkout.

    used_quantity only moves up, through PromotionRepository.increment_usage
    or PromotionRepository.raise_usage.
    """
    __tablename__ = "promotions"
    __table_args__ = (
        CheckConstraint("used_quantity >= 0", name="ck_promotions_used_quantity_non_negative"),
        CheckConstraint(
            "quantity IS NULL OR used_quantity <= quantity",
            name="ck_promotions_used_within_quantity",
        ),
        CheckConstraint("start_date <= end_date", name="ck_promotions_window"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    promotion_code: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        index=True,
        comment="KM01, KM02, ..."
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PromotionType.PERCENT.value,
        comment="percent, fixed"
    )
    discount_value: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=0,
    )

    # Validity window, inclusive on both ends
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    min_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=0,
        comment="Minimum order subtotal to redeem"
    )

    # Usage cap
    quantity: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Total redemptions allowed (null = unlimited)"
    )
    used_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    books: Mapped[List["Book"]] = relationship(
        "Book",
        secondary=promotion_books,
        lazy="selectin",
    )

    @property
    def book_ids(self) -> List[int]:
        return sorted(book.id for book in self.books)

    @property
    def is_unlimited(self) -> bool:
        return self.quantity is None

    @property
    def remaining_quantity(self) -> Optional[int]:
        if self.quantity is None:
            return None
        return max(self.quantity - self.used_quantity, 0)

    def __repr__(self) -> str:
        return f"<Promotion(code='{self.promotion_code}', type='{self.type}', value={self.discount_value})>"
