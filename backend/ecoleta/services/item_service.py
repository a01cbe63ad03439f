"""Item catalogue queries."""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ecoleta.exceptions import DatabaseError
from ecoleta.models.item import Item
from ecoleta.schemas.item import ItemResponse

logger = logging.getLogger(__name__)


class ItemService:
    """Read-only access to the seeded `items` table."""

    async def list_items(self, db: AsyncSession) -> List[ItemResponse]:
        """All items ordered by id."""
        try:
            result = await db.execute(select(Item).order_by(Item.id))
            items = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing items: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve items. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [ItemResponse.model_validate(item) for item in items]


item_service = ItemService()
