"""
Promotion administration: listing, create, update and delete.

Every write validates the form fields and the promotion window against the
max_promotion_duration rule before anything is persisted.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from bookstore.core.dates import DateInput, parse_calendar_date, store_today
from bookstore.core.exceptions import (
    InvalidParameterError,
    MissingParameterError,
    NotFoundError,
    storage_errors,
)
from bookstore.models.promotion import Promotion, PromotionType
from bookstore.repositories.interfaces import PromotionStore
from bookstore.schemas.promotion import PromotionBase, PromotionCreate, PromotionUpdate
from bookstore.services.promotion_engine import to_decimal, validate_duration_against_rules
from bookstore.services.rule_service import RuleService


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "type", "discount_value", "start_date", "end_date")


class PromotionService:
    """Admin CRUD for promotions."""

    def __init__(self, store: PromotionStore, rules: RuleService):
        self.store = store
        self.rules = rules

    async def list_promotions(self) -> List[Promotion]:
        with storage_errors("list_promotions"):
            return await self.store.list_all()

    async def list_available(
        self, order_total: Any, today: Optional[DateInput] = None
    ) -> List[Promotion]:
        """Promotions a checkout with ``order_total`` could use today."""
        if order_total is None or order_total == "":
            raise MissingParameterError("Thiếu tham số tổng tiền", {"field": "total_price"})

        total = to_decimal(order_total, "total_price")
        if total < 0:
            raise InvalidParameterError("Tổng tiền hóa đơn không được âm", {"total_price": str(total)})
        current = parse_calendar_date(today, "today") if today is not None else store_today()

        with storage_errors("list_available"):
            return await self.store.list_available(total, current)

    async def _validate(self, data: PromotionBase) -> Dict[str, Any]:
        """Clean form fields into model column values."""
        missing = [
            field for field in REQUIRED_FIELDS
            if getattr(data, field) is None or str(getattr(data, field)).strip() == ""
        ]
        if missing:
            raise MissingParameterError("Vui lòng cung cấp đầy đủ thông tin", {"fields": missing})

        promotion_type = data.type.strip().lower()
        if promotion_type not in (PromotionType.PERCENT.value, PromotionType.FIXED.value):
            raise InvalidParameterError(
                f"Loại khuyến mãi không hợp lệ: {data.type}",
                {"field": "type", "value": data.type},
            )

        discount_value = Decimal(data.discount_value)
        if promotion_type == PromotionType.PERCENT.value:
            if not Decimal(0) <= discount_value <= Decimal(100):
                raise InvalidParameterError(
                    "Mức giảm giá phần trăm phải từ 0 đến 100",
                    {"field": "discount_value", "value": str(discount_value)},
                )
        elif discount_value < 0:
            raise InvalidParameterError(
                "Số tiền giảm phải lớn hơn hoặc bằng 0",
                {"field": "discount_value", "value": str(discount_value)},
            )

        min_price = Decimal(data.min_price) if data.min_price is not None else Decimal(0)
        if min_price < 0:
            raise InvalidParameterError(
                "Giá trị đơn hàng tối thiểu phải lớn hơn hoặc bằng 0",
                {"field": "min_price", "value": str(min_price)},
            )

        if data.quantity is not None and data.quantity < 1:
            raise InvalidParameterError(
                "Số lượng áp dụng tối đa phải là số nguyên dương hoặc để trống",
                {"field": "quantity", "value": data.quantity},
            )

        start_date = parse_calendar_date(data.start_date, "start_date")
        end_date = parse_calendar_date(data.end_date, "end_date")
        max_duration = await self.rules.get_max_promotion_duration()
        validate_duration_against_rules(start_date, end_date, max_duration)

        if data.book_ids:
            with storage_errors("missing_book_ids"):
                unknown = await self.store.missing_book_ids(data.book_ids)
            if unknown:
                raise InvalidParameterError(
                    "Sách áp dụng khuyến mãi không tồn tại",
                    {"field": "book_ids", "missing": unknown},
                )

        return {
            "name": data.name.strip(),
            "type": promotion_type,
            "discount_value": discount_value,
            "start_date": start_date,
            "end_date": end_date,
            "min_price": min_price,
            "quantity": data.quantity,
        }

    async def create_promotion(self, data: PromotionCreate) -> Promotion:
        fields = await self._validate(data)

        with storage_errors("create_promotion"):
            if data.promotion_code and data.promotion_code.strip():
                code = data.promotion_code.strip().upper()
                if await self.store.get_by_code(code) is not None:
                    raise InvalidParameterError(
                        "Mã khuyến mãi đã tồn tại",
                        {"field": "promotion_code", "value": code},
                    )
            else:
                code = await self.store.next_code()

            fields["promotion_code"] = code
            fields["used_quantity"] = 0
            promotion = await self.store.create(fields, sorted(set(data.book_ids)))

        logger.info("Created promotion %s", code)
        return promotion

    async def update_promotion(self, promotion_id: int, data: PromotionUpdate) -> Promotion:
        with storage_errors("update_promotion"):
            existing = await self.store.get_by_id(promotion_id)
        if existing is None:
            raise NotFoundError(
                "Không tìm thấy khuyến mãi để cập nhật",
                {"promotion_id": promotion_id},
            )

        fields = await self._validate(data)
        quantity = fields["quantity"]

        # used_quantity never goes into ``fields``; only raise_usage writes it
        used_quantity = existing.used_quantity if data.used_quantity is None else data.used_quantity
        if used_quantity < existing.used_quantity:
            raise InvalidParameterError(
                "Số lượng đã sử dụng không được giảm",
                {"field": "used_quantity", "value": used_quantity, "current": existing.used_quantity},
            )
        if quantity is not None and used_quantity > quantity:
            raise InvalidParameterError(
                "Số lượng đã sử dụng không hợp lệ",
                {"field": "used_quantity", "value": used_quantity, "quantity": quantity},
            )

        with storage_errors("update_promotion"):
            promotion = await self.store.update(promotion_id, fields, sorted(set(data.book_ids)))
            if promotion is not None and data.used_quantity is not None:
                raised = await self.store.raise_usage(promotion_id, data.used_quantity)
                promotion = await self.store.get_by_id(promotion_id)
            else:
                raised = True

        if promotion is None:
            raise NotFoundError(
                "Không tìm thấy khuyến mãi để cập nhật",
                {"promotion_id": promotion_id},
            )
        if not raised:
            raise InvalidParameterError(
                "Số lượng đã sử dụng không được giảm",
                {"field": "used_quantity", "value": data.used_quantity, "current": promotion.used_quantity},
            )

        logger.info("Updated promotion %s", promotion.promotion_code)
        return promotion

    async def delete_promotion(self, promotion_id: int) -> None:
        with storage_errors("delete_promotion"):
            deleted = await self.store.delete(promotion_id)

        if not deleted:
            raise NotFoundError("Không tìm thấy khuyến mãi để xóa", {"promotion_id": promotion_id})
        logger.info("Deleted promotion %s", promotion_id)
