"""
Promotion Engine.

Prices an order against a promotion code and records redemptions:
1. Code lookup (case-insensitive)
2. Validity window (calendar dates in the store time zone)
3. Usage cap
4. Minimum order value
5. Book scope (when the cart contents are known)
6. Discount computation (percent or fixed, never above the order total)

Pricing is read-only and can be called as often as the cart changes.
Redemption is a separate, atomic step done once the order is placed.
"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Optional

from bookstore.config import settings
from bookstore.core.dates import DateInput, days_between_inclusive, parse_calendar_date, store_today
from bookstore.core.exceptions import (
    BelowMinimumError,
    DurationExceededError,
    ExhaustedError,
    ExpiredError,
    InvalidParameterError,
    MissingParameterError,
    NotApplicableError,
    NotFoundError,
    storage_errors,
)
from bookstore.models.promotion import Promotion, PromotionType
from bookstore.repositories.interfaces import PromotionStore


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def format_money(amount: Decimal) -> str:
    """200000 -> '200.000 VNĐ' (dot thousands separator)."""
    return f"{int(amount):,}".replace(",", ".") + f" {settings.CURRENCY_LABEL}"


def to_decimal(value: Any, field: str) -> Decimal:
    """Coerce a money input (str, int, float, Decimal) to Decimal."""
    if isinstance(value, bool):
        raise InvalidParameterError(f"Giá trị không hợp lệ: {field}", {"field": field, "value": value})
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidParameterError(
            f"Giá trị không hợp lệ: {field}",
            {"field": field, "value": value},
        ) from exc

    if not amount.is_finite():
        raise InvalidParameterError(f"Giá trị không hợp lệ: {field}", {"field": field, "value": str(value)})
    return amount


def compute_discount(promotion_type: str, discount_value: Decimal, order_total: Decimal) -> Decimal:
    """
    Discount amount for an order, always within [0, order_total].

    Percent values above 100 (legacy rows) clamp to the whole order total;
    fixed discounts never exceed it either.
    """
    if promotion_type == PromotionType.PERCENT.value:
        discount = (order_total * discount_value / 100).quantize(CENT, rounding=ROUND_HALF_UP)
    elif promotion_type == PromotionType.FIXED.value:
        discount = discount_value
    else:
        raise InvalidParameterError(
            f"Loại khuyến mãi không hợp lệ: {promotion_type}",
            {"field": "type", "value": promotion_type},
        )

    return min(max(discount, ZERO), order_total)


def validate_duration_against_rules(
    start_date: DateInput,
    end_date: DateInput,
    max_duration_days: int,
) -> int:
    """
    Check a promotion window against the maximum duration rule.

    Both ends count, so 2024-01-01..2024-01-30 is 30 days. Returns the
    number of days on success.
    """
    days = days_between_inclusive(start_date, end_date)
    if days < 1:
        raise InvalidParameterError(
            "Ngày kết thúc phải lớn hơn ngày bắt đầu",
            {"start_date": str(start_date), "end_date": str(end_date)},
        )
    if days > max_duration_days:
        raise DurationExceededError(
            f"Thời gian áp dụng khuyến mãi tối đa là {max_duration_days} ngày.",
            {"days": days, "max_promotion_duration": max_duration_days},
        )
    return days


class PriceQuote:
    """Approved pricing of an order with a promotion."""

    def __init__(
        self,
        promotion: Promotion,
        order_total: Decimal,
        discount_amount: Decimal,
        reason: str = "Áp dụng mã khuyến mãi thành công",
    ):
        self.approved = True
        self.promotion = promotion
        self.order_total = order_total
        self.discount_amount = discount_amount
        self.final_amount = order_total - discount_amount
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        return {
            "approved": self.approved,
            "message": self.reason,
            "promotion_id": self.promotion.id,
            "promotion_code": self.promotion.promotion_code,
            "name": self.promotion.name,
            "type": self.promotion.type,
            "discount_value": self.promotion.discount_value,
            "order_total": self.order_total,
            "discount_amount": self.discount_amount,
            "final_amount": self.final_amount,
        }


class PromotionEngine:
    """Promotion-code pricing and redemption over a PromotionStore."""

    def __init__(self, store: PromotionStore):
        self.store = store

    async def validate_and_price(
        self,
        code: Optional[str],
        order_total: Any,
        today: Optional[DateInput] = None,
        book_ids: Optional[Iterable[int]] = None,
    ) -> PriceQuote:
        """
        Price ``order_total`` with promotion ``code``.

        The first failing check raises its typed error; nothing is written.
        ``today`` defaults to the current date in the store time zone.
        """
        if code is None or not str(code).strip() or order_total is None or order_total == "":
            raise MissingParameterError(
                "Vui lòng cung cấp mã khuyến mãi và tổng tiền hóa đơn",
                {"code": code, "order_total": order_total},
            )

        total = to_decimal(order_total, "order_total")
        if total < 0:
            raise InvalidParameterError(
                "Tổng tiền hóa đơn không được âm",
                {"order_total": str(total)},
            )
        current = parse_calendar_date(today, "today") if today is not None else store_today()
        code = str(code).strip()

        with storage_errors("validate_and_price"):
            promotion = await self.store.get_by_code(code)

        if promotion is None:
            raise NotFoundError("Mã khuyến mãi không hợp lệ", {"code": code})

        self._check_window(promotion, current)
        self._check_usage(promotion)

        min_price = Decimal(promotion.min_price or 0)
        if total < min_price:
            shortfall = min_price - total
            logger.info(
                "Promotion %s rejected: order total %s below minimum %s",
                promotion.promotion_code, total, min_price,
            )
            raise BelowMinimumError(
                f"Giá trị đơn hàng tối thiểu là {format_money(min_price)}",
                {
                    "code": promotion.promotion_code,
                    "min_price": str(min_price),
                    "order_total": str(total),
                    "shortfall": str(shortfall),
                },
            )

        scope = set(promotion.book_ids)
        if scope and book_ids is not None and not scope.intersection(book_ids):
            raise NotApplicableError(
                "Mã khuyến mãi không áp dụng cho sách trong đơn hàng",
                {"code": promotion.promotion_code, "book_ids": sorted(scope)},
            )

        discount = compute_discount(promotion.type, Decimal(promotion.discount_value), total)
        return PriceQuote(promotion, total, discount)

    @staticmethod
    def _check_window(promotion: Promotion, today: date) -> None:
        if today < promotion.start_date:
            raise ExpiredError(
                "Mã khuyến mãi chưa có hiệu lực",
                {
                    "code": promotion.promotion_code,
                    "reason": "not_started",
                    "start_date": promotion.start_date.isoformat(),
                },
            )
        if today > promotion.end_date:
            raise ExpiredError(
                "Mã khuyến mãi đã hết hạn",
                {
                    "code": promotion.promotion_code,
                    "reason": "expired",
                    "end_date": promotion.end_date.isoformat(),
                },
            )

    @staticmethod
    def _check_usage(promotion: Promotion) -> None:
        if promotion.quantity is not None and promotion.used_quantity >= promotion.quantity:
            raise ExhaustedError(
                "Mã khuyến mãi đã hết lượt sử dụng",
                {
                    "code": promotion.promotion_code,
                    "quantity": promotion.quantity,
                    "used_quantity": promotion.used_quantity,
                },
            )

    async def commit_redemption(self, promotion_id: int) -> Promotion:
        """
        Record one redemption.

        The store performs the cap check and the increment as one atomic
        statement; of two concurrent redemptions of the last unit, one
        raises ExhaustedError.
        """
        with storage_errors("commit_redemption"):
            incremented = await self.store.increment_usage(promotion_id)
            promotion = await self.store.get_by_id(promotion_id)

        if promotion is None:
            raise NotFoundError("Không tìm thấy khuyến mãi", {"promotion_id": promotion_id})

        if not incremented:
            logger.warning("Redemption rejected, promotion %s is exhausted", promotion.promotion_code)
            raise ExhaustedError(
                "Mã khuyến mãi đã hết lượt sử dụng",
                {
                    "code": promotion.promotion_code,
                    "quantity": promotion.quantity,
                    "used_quantity": promotion.used_quantity,
                },
            )

        logger.info(
            "Promotion %s redeemed (%s/%s)",
            promotion.promotion_code, promotion.used_quantity,
            promotion.quantity if promotion.quantity is not None else "unlimited",
        )
        return promotion
