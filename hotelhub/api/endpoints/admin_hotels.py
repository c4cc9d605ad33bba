from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hotelhub.core.db import get_db
from hotelhub.schemas.hotel import (
    HotelEnvelope,
    HotelIdEnvelope,
    HotelListEnvelope,
    HotelOut,
    ReasonIn,
)
from hotelhub.services import hotel_views, moderation
from hotelhub.services.auth import Actor, get_actor
from hotelhub.services.authorization import admin_only

# every route here is admin-only regardless of the listing state
router = APIRouter(prefix="/admin", dependencies=[Depends(admin_only)])


@router.get("/hotels/published", response_model=HotelListEnvelope)
async def published_hotels(
    response: Response,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> HotelListEnvelope:
    rows = await hotel_views.list_published(db, actor)
    # offline actions must show up on the very next read
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    return HotelListEnvelope(hotels=[HotelOut.from_hotel(h, merchant_name=name) for h, name in rows])


@router.get("/hotels/pending", response_model=HotelListEnvelope)
async def pending_hotels(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> HotelListEnvelope:
    rows = await hotel_views.list_pending(db, actor)
    return HotelListEnvelope(hotels=[HotelOut.from_hotel(h, merchant_name=name) for h, name in rows])


@router.get("/hotels/{hotel_id}", response_model=HotelEnvelope)
async def admin_get_hotel(
    hotel_id: int,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> HotelEnvelope:
    hotel = await moderation.get_hotel(db, actor, hotel_id, admin_view=True)
    name = await hotel_views.merchant_name(db, hotel.merchant_id)
    return HotelEnvelope(hotel=HotelOut.from_hotel(hotel, merchant_name=name))


async def _respond(db: AsyncSession, hotel, message: str) -> HotelEnvelope:
    # build the response before commit so it reflects exactly what was written
    name = await hotel_views.merchant_name(db, hotel.merchant_id)
    resp = HotelEnvelope(message=message, hotel=HotelOut.from_hotel(hotel, merchant_name=name))
    await db.commit()
    return resp


@router.post("/hotels/{hotel_id}/approve", response_model=HotelEnvelope)
async def approve_hotel(
    hotel_id: int,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> HotelEnvelope:
    hotel = await moderation.approve(db, actor, hotel_id)
    return await _respond(db, hotel, "Hotel approved")


@router.post("/hotels/{hotel_id}/reject", response_model=HotelEnvelope)
async def reject_hotel(
    hotel_id: int,
    payload: ReasonIn | None = None,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> HotelEnvelope:
    hotel = await moderation.reject(db, actor, hotel_id, payload.reason if payload else None)
    return await _respond(db, hotel, "Hotel rejected")


@router.post("/hotels/{hotel_id}/offline", response_model=HotelEnvelope)
async def offline_hotel(
    hotel_id: int,
    payload: ReasonIn | None = None,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> HotelEnvelope:
    hotel = await moderation.offline(db, actor, hotel_id, payload.reason if payload else None)
    return await _respond(db, hotel, "Hotel taken offline")


@router.delete("/hotels/{hotel_id}", response_model=HotelIdEnvelope)
async def admin_delete_hotel(
    hotel_id: int,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> HotelIdEnvelope:
    await moderation.delete(db, actor, hotel_id)
    await db.commit()
    return HotelIdEnvelope(message="Hotel deleted", hotel_id=hotel_id)
