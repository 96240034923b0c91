"""
Discount repository
Loads rules for the engine and records usage
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging
import uuid

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dealcart.discounts.rules import Discount
from dealcart.models.discount import DiscountRecord, DiscountUsage

logger = logging.getLogger(__name__)

class DiscountRepository:
    """Store access for discount rules"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_active_discounts(self, now: datetime) -> List[Discount]:
        """
        Rules switched on whose validity window contains `now`

        A missing start or end date leaves that side of the window open.
        """
        result = await self.db.execute(
            select(DiscountRecord)
            .where(
                and_(
                    DiscountRecord.is_active == True,
                    or_(DiscountRecord.start_date.is_(None), DiscountRecord.start_date <= now),
                    or_(DiscountRecord.end_date.is_(None), DiscountRecord.end_date >= now)
                )
            )
            .order_by(DiscountRecord.created_at, DiscountRecord.name)
        )
        return [record.to_rule() for record in result.scalars().all()]

    async def find_by_code(self, code: str) -> List[Discount]:
        result = await self.db.execute(
            select(DiscountRecord)
            .where(DiscountRecord.code == code)
            .order_by(DiscountRecord.created_at)
        )
        return [record.to_rule() for record in result.scalars().all()]

    async def get_record(self, discount_id: uuid.UUID) -> Optional[DiscountRecord]:
        result = await self.db.execute(
            select(DiscountRecord).where(DiscountRecord.id == discount_id)
        )
        return result.scalar_one_or_none()

    async def list_records(self, is_active: Optional[bool] = None) -> List[DiscountRecord]:
        query = select(DiscountRecord).order_by(DiscountRecord.created_at, DiscountRecord.name)
        if is_active is not None:
            query = query.where(DiscountRecord.is_active == is_active)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def save(self, record: DiscountRecord) -> DiscountRecord:
        self.db.add(record)
        await self.db.flush()
        await self.db.refresh(record)
        return record

    async def delete(self, record: DiscountRecord) -> None:
        await self.db.delete(record)
        await self.db.flush()

    async def claim_usage(
        self,
        discount_id: uuid.UUID,
        customer_id: uuid.UUID,
        discount_amount: Decimal
    ) -> bool:
        """
        Atomically count one redemption

        The counter only moves while it is below max_uses, so concurrent
        redemptions can never push uses_count past the limit. A ledger row
        is written for every successful claim.

        Returns:
            False when the limit was reached before this claim
        """
        result = await self.db.execute(
            update(DiscountRecord)
            .where(
                and_(
                    DiscountRecord.id == discount_id,
                    or_(
                        DiscountRecord.max_uses.is_(None),
                        DiscountRecord.uses_count < DiscountRecord.max_uses
                    )
                )
            )
            .values(uses_count=DiscountRecord.uses_count + 1)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            logger.warning(f"Usage claim for discount {discount_id} rejected, limit reached")
            return False

        self.db.add(
            DiscountUsage(
                discount_id=discount_id,
                customer_id=customer_id,
                discount_amount=discount_amount
            )
        )
        await self.db.flush()
        return True

    async def customer_usage_counts(self, customer_id: uuid.UUID) -> Dict[Any, int]:
        """Redemptions per discount for one customer"""
        result = await self.db.execute(
            select(DiscountUsage.discount_id, func.count(DiscountUsage.id))
            .where(DiscountUsage.customer_id == customer_id)
            .group_by(DiscountUsage.discount_id)
        )
        return {discount_id: count for discount_id, count in result.all()}
