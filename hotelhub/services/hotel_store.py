from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from hotelhub.models.hotel import Hotel, RoomType
from hotelhub.schemas.hotel import HotelIn
from hotelhub.services.tags import encode_tags
from hotelhub.services.workflow import HotelStatus, Transition


class StaleHotelError(Exception):
    """The row changed (or vanished) between our read and our write."""


def next_update_time(previous: datetime | None) -> datetime:
    """
    Wall-clock now, but never at or before the previous value, so every write
    (an offline right after an approve included) gets its own later instant.
    """
    now = datetime.now(timezone.utc)
    if previous is None:
        return now
    # SQLite hands back naive datetimes; they were written as UTC
    prev = previous if previous.tzinfo else previous.replace(tzinfo=timezone.utc)
    return now if now > prev else prev + timedelta(microseconds=1)


async def get_hotel(db: AsyncSession, hotel_id: int, *, for_update: bool = False) -> Hotel | None:
    stmt = select(Hotel).where(Hotel.id == hotel_id).execution_options(populate_existing=True)
    if for_update:
        # row lock on PostgreSQL; the version check below covers back ends without one
        stmt = stmt.with_for_update(of=Hotel)
    return (await db.execute(stmt)).scalar_one_or_none()


def _room_types(content: HotelIn) -> list[RoomType]:
    return [
        RoomType(
            name=rt.name,
            price=rt.price,
            description=rt.description,
            image_url=rt.image_url,
        )
        for rt in content.room_types
    ]


def _write_content(hotel: Hotel, content: HotelIn) -> None:
    hotel.name = content.name
    hotel.city = content.city
    hotel.address = content.address
    hotel.phone = content.phone
    hotel.price = content.price
    hotel.star_level = content.star_level
    hotel.tags = encode_tags(content.tags)
    hotel.image_url = content.image_url
    hotel.description = content.description
    # delete-orphan cascade removes the previous room types in the same flush
    hotel.room_types = _room_types(content)


async def insert_hotel(
    db: AsyncSession,
    *,
    merchant_id: int,
    content: HotelIn,
    transition: Transition,
    updated_by: str,
) -> Hotel:
    now = next_update_time(None)
    hotel = Hotel(
        merchant_id=merchant_id,
        status=int(transition.to_status),
        cancellation=None,
        create_time=now,
        update_time=now,
        updated_by=updated_by,
    )
    _write_content(hotel, content)
    db.add(hotel)
    await db.flush()
    return hotel


async def apply_transition(
    db: AsyncSession,
    hotel: Hotel,
    transition: Transition,
    *,
    content: HotelIn | None = None,
    updated_by: str,
) -> Hotel | None:
    """
    Write a planned transition to a loaded row. Returns the updated row, or
    None when the transition deletes it. Raises StaleHotelError when another
    writer got there first; the caller must roll back.
    """
    try:
        if transition.rule.deletes:
            # room types go with it via the ORM cascade
            await db.delete(hotel)
            await db.flush()
            return None

        hotel.status = int(transition.to_status)
        hotel.cancellation = transition.cancellation
        hotel.update_time = next_update_time(hotel.update_time)
        hotel.updated_by = updated_by
        if transition.rule.replaces_content:
            assert content is not None
            _write_content(hotel, content)
        await db.flush()
    except StaleDataError as e:
        raise StaleHotelError(str(e)) from e

    return hotel


async def current_status(db: AsyncSession, hotel_id: int) -> HotelStatus | None:
    stmt = select(Hotel.status).where(Hotel.id == hotel_id)
    status = (await db.execute(stmt)).scalar_one_or_none()
    return HotelStatus(status) if status is not None else None
