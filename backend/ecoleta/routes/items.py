"""Item catalogue route: GET /items."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ecoleta.database import get_db_session
from ecoleta.schemas.item import ItemResponse
from ecoleta.services.item_service import item_service

router = APIRouter(prefix="/items", tags=["Items"])


@router.get(
    "",
    response_model=List[ItemResponse],
    summary="List item categories",
    description="Ids returned here are the values POST /locations accepts in `items`.",
)
async def list_items(db: AsyncSession = Depends(get_db_session)) -> List[ItemResponse]:
    return await item_service.list_items(db)
