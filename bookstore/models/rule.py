"""Operational rules: the singleton record of store-wide constants."""
from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bookstore.database import Base


DEFAULT_RULES = {
    "min_import_quantity": 150,
    "min_stock_before_import": 300,
    "min_stock_after_sale": 20,
    "max_promotion_duration": 30,
}


class Rule(Base):
    """Single-row table (id = 1) holding the administrator-set constants."""
    __tablename__ = "rules"
    __table_args__ = (
        CheckConstraint("min_import_quantity >= 0", name="ck_rules_min_import_quantity"),
        CheckConstraint("min_stock_before_import >= 0", name="ck_rules_min_stock_before_import"),
        CheckConstraint("min_stock_after_sale >= 0", name="ck_rules_min_stock_after_sale"),
        CheckConstraint("max_promotion_duration >= 1", name="ck_rules_max_promotion_duration"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    min_import_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    min_stock_before_import: Mapped[int] = mapped_column(Integer, nullable=False)
    min_stock_after_sale: Mapped[int] = mapped_column(Integer, nullable=False)
    max_promotion_duration: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Maximum promotion window in days"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Rule(max_promotion_duration={self.max_promotion_duration})>"
