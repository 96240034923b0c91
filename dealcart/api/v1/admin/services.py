"""
Admin discount service
Create, update, delete and bulk-manage discount rules
"""

from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from dealcart.core.exceptions import BadRequestException, NotFoundException
from dealcart.discounts import DiscountKind
from dealcart.models.discount import DiscountRecord
from dealcart.services.discount_repository import DiscountRepository
from .schemas import DiscountCreate, DiscountUpdate

logger = logging.getLogger(__name__)

BULK_ACTIONS = ("activate", "deactivate", "delete")

# Columns that only make sense for one kind
KIND_ONLY_FIELDS = {
    DiscountKind.COUPON: {"coupon_code", "is_single_use", "is_first_order_only", "customer_email"},
    DiscountKind.BULK_DISCOUNT: {"minimum_quantity", "product_id"},
    DiscountKind.PROMOTION: {"auto_apply", "banner_text", "image_url"},
}

def _storable(field: str, value: Any) -> Any:
    if field in ("excluded_products", "excluded_categories"):
        return [str(v) for v in value or []]
    return value

class DiscountAdminService:
    """Discount rule management"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = DiscountRepository(db)

    async def list_discounts(self, is_active: Optional[bool] = None) -> List[DiscountRecord]:
        return await self.repository.list_records(is_active)

    async def get_discount(self, discount_id: uuid.UUID) -> DiscountRecord:
        record = await self.repository.get_record(discount_id)
        if not record:
            raise NotFoundException(f"Discount {discount_id} not found")
        return record

    async def create_discount(self, data: DiscountCreate) -> DiscountRecord:
        """
        Create a discount rule

        Fields belonging to another kind are ignored. The rule is checked
        through its domain snapshot before being stored.
        """
        values = self._values_for_kind(data.kind, data.model_dump(exclude_none=True))
        record = DiscountRecord(uses_count=0, **values)

        # Raises InvalidDiscountException on inconsistent data
        record.to_rule()

        record = await self.repository.save(record)
        logger.info(f"Created {record.kind.value} discount {record.id} ({record.name})")
        return record

    async def update_discount(self, discount_id: uuid.UUID, data: DiscountUpdate) -> DiscountRecord:
        record = await self.get_discount(discount_id)

        values = self._values_for_kind(record.kind, data.model_dump(exclude_unset=True))
        for field, value in values.items():
            setattr(record, field, value)

        if record.start_date and record.end_date and record.start_date > record.end_date:
            raise BadRequestException("start_date must not be after end_date")

        if record.max_uses is not None and record.max_uses < record.uses_count:
            raise BadRequestException(
                f"max_uses cannot be lower than the {record.uses_count} use(s) already recorded"
            )

        record.to_rule()

        record = await self.repository.save(record)
        logger.info(f"Updated discount {record.id}")
        return record

    async def delete_discount(self, discount_id: uuid.UUID) -> None:
        record = await self.get_discount(discount_id)
        await self.repository.delete(record)
        logger.info(f"Deleted discount {discount_id}")

    async def bulk_action(self, discount_ids: List[str], action: str) -> Tuple[int, List[str]]:
        """
        Apply an action to many rules

        Returns:
            Number of rules changed and the ids that were skipped
            (malformed or unknown)
        """
        action = action.lower()
        if action not in BULK_ACTIONS:
            raise BadRequestException(
                f"Unknown action '{action}', expected one of {', '.join(BULK_ACTIONS)}",
                error_code="INVALID_ACTION"
            )

        affected = 0
        skipped = []
        for raw_id in discount_ids:
            try:
                discount_id = uuid.UUID(raw_id)
            except ValueError:
                skipped.append(raw_id)
                continue

            record = await self.repository.get_record(discount_id)
            if record is None:
                skipped.append(raw_id)
                continue

            if action == "delete":
                await self.repository.delete(record)
            else:
                record.is_active = action == "activate"
                await self.repository.save(record)
            affected += 1

        logger.info(f"Bulk {action}: {affected} changed, {len(skipped)} skipped")
        return affected, skipped

    @staticmethod
    def _values_for_kind(kind: DiscountKind, values: Dict[str, Any]) -> Dict[str, Any]:
        foreign = set().union(*(fields for k, fields in KIND_ONLY_FIELDS.items() if k != kind))
        return {
            field: _storable(field, value)
            for field, value in values.items()
            if field not in foreign
        }
