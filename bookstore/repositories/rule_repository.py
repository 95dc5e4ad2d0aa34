"""SQLAlchemy implementation of RuleStore."""
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.models.rule import Rule


class RuleRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_rules(self) -> Optional[Rule]:
        result = await self.db.execute(
            select(Rule)
            .order_by(Rule.id)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update_rules(self, fields: Dict[str, int]) -> Optional[Rule]:
        rule = await self.get_rules()
        if rule is None:
            return None

        for field, value in fields.items():
            setattr(rule, field, value)

        await self.db.flush()
        return rule
