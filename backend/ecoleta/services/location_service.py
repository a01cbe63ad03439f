"""
Ecoleta Backend — Location Service
===================================

What:  Every query the /locations endpoints run: filtered listing, detail
       with item titles, transactional creation, image replacement.
How:   SQLAlchemy 2.0 select/insert/update statements executed on the
       AsyncSession passed in by the caller. The service owns no session or
       engine of its own.
Who:   Called by routes/locations.py.

Creation transaction (POST /locations):
    ┌──────────────┐    ┌──────────────┐    ┌──────────────────────┐    ┌────────┐
    │ INSERT       │───▶│ flush: read  │───▶│ INSERT locations_items│───▶│ COMMIT │
    │ locations    │    │ generated id │    │ one row per item id   │    │        │
    └──────────────┘    └──────────────┘    └──────────────────────┘    └────────┘
    Any failure → ROLLBACK: neither the location nor any association row
    survives, and the caller gets DatabaseError (500).

    Submitted item ids are not looked up before the association insert.
    An unknown id is rejected by the locations_items.item_id foreign key,
    which rolls the whole creation back.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ecoleta.config import settings
from ecoleta.exceptions import DatabaseError, NotFoundError, ValidationError
from ecoleta.models.item import Item
from ecoleta.models.location import Location, LocationItem
from ecoleta.schemas.location import (
    ItemTitle,
    LocationCreate,
    LocationDetailResponse,
    LocationResponse,
)
from ecoleta.services.file_service import FileService

logger = logging.getLogger(__name__)


def parse_item_ids(raw: str) -> List[int]:
    """
    Parse the `items` query parameter ("1, 2,3") into integer ids.

    Blank entries ("1,", "1,,2") are skipped. Raises ValidationError when
    an entry is not an integer.
    """
    item_ids = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            item_ids.append(int(part))
        except ValueError:
            raise ValidationError(
                message='"items" must be a comma-separated list of item ids',
                field="items",
                context={"value": raw},
            )
    return item_ids


def to_location_response(row: Dict[str, Any]) -> LocationResponse:
    """Build the API representation from a column → value mapping."""
    return LocationResponse(**row, image_url=f"/uploads/{row['image']}")


class LocationService:
    """
    Business logic for collection points.

    Error Handling Strategy:
        Missing rows become NotFoundError. SQLAlchemy failures are logged
        with their details and re-raised as DatabaseError after the session
        has been rolled back.
    """

    async def list_locations(
        self,
        db: AsyncSession,
        city: Optional[str] = None,
        uf: Optional[str] = None,
        items: Optional[List[int]] = None,
    ) -> List[LocationResponse]:
        """
        List locations, filtered only when city, uf and items are all given.

        Filtered query:
            SELECT DISTINCT locations.* FROM locations
            JOIN locations_items ON locations.id = locations_items.location_id
            WHERE locations_items.item_id IN (:items)
              AND locations.city = :city AND locations.uf = :uf

        With any of the three missing every location is returned. No
        pagination; rows come back in storage order.
        """
        if city and uf and items:
            query = (
                select(Location)
                .join(LocationItem, Location.id == LocationItem.location_id)
                .where(LocationItem.item_id.in_(items))
            )
            query = self._filter_by_place(query, city, uf).distinct()
        else:
            query = select(Location)

        try:
            result = await db.execute(query)
            locations = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing locations: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve locations. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [to_location_response(location.to_row()) for location in locations]

    @staticmethod
    def _filter_by_place(query, city: Optional[str], uf: Optional[str]):
        """Apply city and uf conditions; each one only when provided."""
        if city:
            query = query.where(Location.city == city)
        if uf:
            query = query.where(Location.uf == uf)
        return query

    async def _find(self, db: AsyncSession, location_id: int) -> Location:
        """Fetch one location or raise NotFoundError."""
        try:
            result = await db.execute(select(Location).where(Location.id == location_id))
            location = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching location %s: %s", location_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the location. Please try again.",
                context={"location_id": location_id},
            )

        if location is None:
            raise NotFoundError(resource="location", resource_id=location_id)
        return location

    async def get_location(self, db: AsyncSession, location_id: int) -> LocationDetailResponse:
        """
        One location plus the titles of the items it accepts.

        Raises:
            NotFoundError: no location with this id
            DatabaseError: query execution failed
        """
        location = await self._find(db, location_id)

        try:
            result = await db.execute(
                select(Item.title)
                .join(LocationItem, Item.id == LocationItem.item_id)
                .where(LocationItem.location_id == location_id)
            )
            titles = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error fetching items of location %s: %s", location_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the location. Please try again.",
                context={"location_id": location_id},
            )

        return LocationDetailResponse(
            location=to_location_response(location.to_row()),
            items=[ItemTitle(title=title) for title in titles],
        )

    async def create_location(self, db: AsyncSession, payload: LocationCreate) -> LocationResponse:
        """
        Insert a location and its item associations in one transaction.

        The location starts with the configured placeholder image. One
        locations_items row is written per entry of payload.items,
        duplicates included.

        Raises:
            DatabaseError: any statement failed; nothing was persisted
        """
        location = Location(
            image=settings.default_image,
            name=payload.name,
            email=str(payload.email),
            whatsapp=payload.whatsapp,
            latitude=payload.latitude,
            longitude=payload.longitude,
            city=payload.city,
            uf=payload.uf,
        )

        try:
            db.add(location)
            await db.flush()
            location_id = location.id

            if payload.items:
                await db.execute(
                    insert(LocationItem),
                    [{"location_id": location_id, "item_id": item_id} for item_id in payload.items],
                )

            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Location creation rolled back: %s", str(e))
            raise DatabaseError(
                message="Could not create the location. Please try again.",
                context={"error_type": type(e).__name__, "items": list(payload.items)},
            )

        logger.info("Location %s created with %d items", location_id, len(payload.items))
        return to_location_response(location.to_row())

    async def update_image(
        self,
        db: AsyncSession,
        location_id: int,
        filename: Optional[str],
        content: Optional[bytes],
        files: FileService,
    ) -> LocationResponse:
        """
        Store an uploaded image and point the location at it.

        The location is looked up first: an unknown id raises NotFoundError
        before anything is written to disk or to the database. The UPDATE
        then rewrites every column of the row, the untouched ones with their
        current values. With no upload (filename is None) nothing is stored
        and the row is rewritten with its current image.

        Raises:
            NotFoundError: no location with this id
            ValidationError: unsupported, empty or oversized image
            FileStorageError: the upload could not be written
            DatabaseError: the UPDATE failed (the stored file is removed)
        """
        location = await self._find(db, location_id)

        row = location.to_row()
        stored_name = None
        if filename is not None:
            stored_name = await files.validate_and_store(filename=filename, content=content or b"")
            row["image"] = stored_name

        try:
            await db.execute(
                update(Location).where(Location.id == location_id).values(**row)
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            if stored_name is not None:
                await files.cleanup_file(stored_name)
            logger.error("Image update of location %s rolled back: %s", location_id, str(e))
            raise DatabaseError(
                message="Could not update the location. Please try again.",
                context={"location_id": location_id},
            )

        logger.info("Location %s image set to %s", location_id, row["image"])
        return to_location_response(row)


location_service = LocationService()
