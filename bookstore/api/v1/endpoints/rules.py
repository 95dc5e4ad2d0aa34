"""API endpoints for the operational rules record."""
from fastapi import APIRouter

from bookstore.api.deps import Rules
from bookstore.schemas.rule import RuleUpdate, RuleResponse

router = APIRouter()


@router.get("", response_model=RuleResponse)
async def get_rules(service: Rules):
    return await service.get_rules()


@router.put("", response_model=RuleResponse)
async def update_rules(rules_in: RuleUpdate, service: Rules):
    """Replace all four rules at once; any invalid field rejects the update."""
    return await service.update_rules(rules_in)
