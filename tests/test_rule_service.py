import pytest

from bookstore.core.exceptions import InvalidRulesError, NotFoundError
from bookstore.models import DEFAULT_RULES
from bookstore.schemas.rule import RuleUpdate
from bookstore.services.rule_service import RuleService, validate_rules
from tests.fakes import FakeRuleStore


VALID = {
    "min_import_quantity": 100,
    "min_stock_before_import": 250,
    "min_stock_after_sale": 10,
    "max_promotion_duration": 45,
}


async def test_get_rules(default_rule):
    rule = await RuleService(FakeRuleStore(default_rule)).get_rules()

    assert rule.max_promotion_duration == DEFAULT_RULES["max_promotion_duration"]


async def test_get_rules_missing():
    with pytest.raises(NotFoundError) as exc_info:
        await RuleService(FakeRuleStore()).get_rules()

    assert exc_info.value.message == "Không tìm thấy quy định"


async def test_update_rules(default_rule):
    store = FakeRuleStore(default_rule)

    rule = await RuleService(store).update_rules(RuleUpdate(**VALID))

    assert rule.min_import_quantity == 100
    assert rule.max_promotion_duration == 45
    assert store.calls == [("update_rules", VALID)]


async def test_update_rules_accepts_numeric_strings(default_rule):
    data = {**VALID, "min_stock_after_sale": "15"}

    rule = await RuleService(FakeRuleStore(default_rule)).update_rules(data)

    assert rule.min_stock_after_sale == 15


async def test_update_rules_reports_every_bad_field(default_rule):
    store = FakeRuleStore(default_rule)
    data = {
        "min_import_quantity": -1,
        "min_stock_before_import": "abc",
        "min_stock_after_sale": 5,
        "max_promotion_duration": 0,
    }

    with pytest.raises(InvalidRulesError) as exc_info:
        await RuleService(store).update_rules(data)

    assert exc_info.value.message == "Dữ liệu không hợp lệ"
    assert set(exc_info.value.context["fields"]) == {
        "min_import_quantity",
        "min_stock_before_import",
        "max_promotion_duration",
    }
    # Nothing is written, not even the valid field
    assert store.calls == []
    assert default_rule.min_stock_after_sale == DEFAULT_RULES["min_stock_after_sale"]


def test_validate_rules_requires_all_fields():
    with pytest.raises(InvalidRulesError) as exc_info:
        validate_rules({"min_import_quantity": 1})

    assert len(exc_info.value.context["fields"]) == 3


@pytest.mark.parametrize("value", [True, 1.5, None, ""])
def test_validate_rules_rejects_non_integers(value):
    with pytest.raises(InvalidRulesError):
        validate_rules({**VALID, "max_promotion_duration": value})


def test_validate_rules_accepts_boundaries():
    cleaned = validate_rules({
        "min_import_quantity": 0,
        "min_stock_before_import": 0,
        "min_stock_after_sale": 0,
        "max_promotion_duration": 1,
    })

    assert cleaned["max_promotion_duration"] == 1


async def test_update_rules_without_row():
    with pytest.raises(NotFoundError) as exc_info:
        await RuleService(FakeRuleStore()).update_rules(VALID)

    assert exc_info.value.message == "Không tìm thấy quy định để cập nhật"
