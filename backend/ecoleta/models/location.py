"""
Ecoleta Backend — Location SQLAlchemy Models
=============================================

What:  ORM models for the `locations` table and the `locations_items`
       many-to-many join.
How:   Inherit from the shared DeclarativeBase; Alembic migration 001 mirrors
       these definitions.
Who:   Used by LocationService for every query and by the test suite.

Table Design:
    locations
        id         INTEGER, generated by the store on insert
        image      filename of the uploaded picture ("fake.jpg" until one
                   is uploaded)
        uf         two-letter state code
        latitude / longitude stored as floats
    locations_items
        surrogate id plus (location_id, item_id), both foreign keys. One
        row per submitted item id, duplicates included. Rows are only ever
        created together with their location, inside the creation
        transaction.
"""

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ecoleta.database import Base


class Location(Base):
    """
    A collection point.

    Lifecycle:
        1. Created by POST /locations with the placeholder image
        2. Image replaced by PUT /locations/{id}
        3. Never deleted
    """

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    image: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    whatsapp: Mapped[str] = mapped_column(String(50), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    uf: Mapped[str] = mapped_column(String(2), nullable=False)

    def to_row(self) -> dict:
        """Column name → current value, for full-record UPDATE statements."""
        return {column.key: getattr(self, column.key) for column in self.__table__.columns}

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, name='{self.name}', city='{self.city}', uf='{self.uf}')>"


class LocationItem(Base):
    """Association row: location `location_id` accepts item `item_id`."""

    __tablename__ = "locations_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("locations.id"),
        nullable=False,
        index=True,
    )
    item_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("items.id"),
        nullable=False,
    )
