"""Pydantic schemas for the item catalogue."""

from pydantic import BaseModel, Field


class ItemResponse(BaseModel):
    """An item category, as listed by GET /items."""
    id: int = Field(description="Item id, referenced by POST /locations `items`")
    title: str = Field(description="Human-readable category name")

    model_config = {"from_attributes": True}
