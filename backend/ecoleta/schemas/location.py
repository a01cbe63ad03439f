"""
Ecoleta Backend — Location Request/Response Schemas
====================================================

What:  Pydantic models defining the /locations API contract.
How:   FastAPI validates request bodies against LocationCreate before the
       handler runs; every violated field is collected into one 400
       response (see main.register_exception_handlers). Response models
       control exactly which columns are serialized.
"""

from typing import Any, List

from pydantic import BaseModel, EmailStr, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class LocationCreate(BaseModel):
    """
    Body of POST /locations.

    Every field is required. Text fields reject empty strings; `uf` is a
    1-2 character state code with its own messages; `items` lists the ids
    of the item categories the location accepts and must not be empty.
    """
    name: str = Field(min_length=1, description="Collection point name")
    email: EmailStr = Field(description="Contact e-mail")
    whatsapp: str = Field(min_length=1, description="WhatsApp contact number")
    latitude: float = Field(description="Latitude in decimal degrees")
    longitude: float = Field(description="Longitude in decimal degrees")
    city: str = Field(min_length=1, description="City name")
    uf: str = Field(description="State code (1-2 characters)")
    items: List[int] = Field(min_length=1, description="Ids of accepted items")

    @field_validator("uf", mode="before")
    @classmethod
    def validate_uf(cls, v: Any) -> str:
        """Mirrors the messages the mobile and web clients already display."""
        if not isinstance(v, str):
            raise ValueError("\"uf\" should be a type of 'text'")
        if len(v) == 0:
            raise ValueError('"uf" cannot be an empty field')
        if len(v) > 2:
            raise ValueError('"uf" should have a maximum length of 2')
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class LocationResponse(BaseModel):
    """
    A collection point as returned by every /locations endpoint.

    image_url is derived from `image` and points at GET /uploads/{image}.
    """
    id: int = Field(description="Generated location id")
    image: str = Field(description="Stored image filename")
    image_url: str = Field(description="URL path serving the image")
    name: str
    email: str
    whatsapp: str
    latitude: float
    longitude: float
    city: str
    uf: str

    model_config = {"from_attributes": True}


class ItemTitle(BaseModel):
    """Title of an item accepted by a location."""
    title: str

    model_config = {"from_attributes": True}


class LocationDetailResponse(BaseModel):
    """GET /locations/{id}: the location plus the titles of its items."""
    location: LocationResponse
    items: List[ItemTitle]
