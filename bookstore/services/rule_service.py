"""
Rules Provider.

Serves the singleton record of operational constants and validates
administrator updates as a whole: one bad field rejects the update.
"""
import logging
from typing import Any, Dict, Mapping, Union

from bookstore.core.exceptions import InvalidRulesError, NotFoundError, storage_errors
from bookstore.models.rule import Rule
from bookstore.repositories.interfaces import RuleStore
from bookstore.schemas.rule import RuleUpdate


logger = logging.getLogger(__name__)

# field -> smallest accepted value
RULE_MINIMUMS = {
    "min_import_quantity": 0,
    "min_stock_before_import": 0,
    "min_stock_after_sale": 0,
    "max_promotion_duration": 1,
}


def _as_int(value: Any):
    """Integer value of ``value`` or None when it is not a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return int(text)
    return None


def validate_rules(data: Mapping[str, Any]) -> Dict[str, int]:
    """
    Validate all four rule fields together.

    Returns the cleaned values; raises InvalidRulesError listing every
    offending field otherwise.
    """
    cleaned: Dict[str, int] = {}
    errors: Dict[str, str] = {}

    for field, minimum in RULE_MINIMUMS.items():
        raw = data.get(field)
        if raw is None or raw == "":
            errors[field] = "Trường này là bắt buộc"
            continue

        value = _as_int(raw)
        if value is None:
            errors[field] = "Phải là số nguyên"
        elif value < minimum:
            errors[field] = f"Phải lớn hơn hoặc bằng {minimum}"
        else:
            cleaned[field] = value

    if errors:
        raise InvalidRulesError("Dữ liệu không hợp lệ", {"fields": errors})
    return cleaned


class RuleService:
    """Read and update the operational rules."""

    def __init__(self, store: RuleStore):
        self.store = store

    async def get_rules(self) -> Rule:
        with storage_errors("get_rules"):
            rule = await self.store.get_rules()

        if rule is None:
            raise NotFoundError("Không tìm thấy quy định")
        return rule

    async def get_max_promotion_duration(self) -> int:
        rule = await self.get_rules()
        return rule.max_promotion_duration

    async def update_rules(self, data: Union[RuleUpdate, Mapping[str, Any]]) -> Rule:
        if isinstance(data, RuleUpdate):
            data = data.model_dump()

        fields = validate_rules(data)

        with storage_errors("update_rules"):
            rule = await self.store.update_rules(fields)

        if rule is None:
            raise NotFoundError("Không tìm thấy quy định để cập nhật")

        logger.info("Rules updated: %s", fields)
        return rule
