from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hotelhub.core.db import get_db
from hotelhub.core.errors import ValidationError
from hotelhub.schemas.hotel import (
    HotelCreatedEnvelope,
    HotelEnvelope,
    HotelIdEnvelope,
    HotelIn,
    HotelListEnvelope,
    HotelOut,
    StatusChangeIn,
)
from hotelhub.services import hotel_views, moderation
from hotelhub.services.auth import Actor, get_actor
from hotelhub.services.authorization import merchant_only
from hotelhub.services.idempotency import optional_idempotency_key, remember_response, replay_or_reserve
from hotelhub.services.workflow import HotelStatus

router = APIRouter()

# The merchant console withdraws a pending submission by PATCHing this status.
WITHDRAW_STATUS = int(HotelStatus.REJECTED)


@router.get("/hotels/my", response_model=HotelListEnvelope)
async def my_hotels(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> HotelListEnvelope:
    rows = await hotel_views.list_mine(db, actor)
    return HotelListEnvelope(hotels=[HotelOut.from_hotel(h) for h in rows])


@router.post("/hotels", response_model=HotelCreatedEnvelope)
async def submit_hotel(
    payload: HotelIn,
    request: Request,
    actor: Actor = Depends(merchant_only),
    idempotency_key: str | None = Depends(optional_idempotency_key),
    db: AsyncSession = Depends(get_db),
) -> HotelCreatedEnvelope:
    if idempotency_key:
        stored = await replay_or_reserve(
            db, actor, idempotency_key,
            path=request.url.path,
            body=payload.model_dump(mode="json", by_alias=True),
        )
        if stored:
            return HotelCreatedEnvelope.model_validate(stored)

    hotel = await moderation.submit(db, actor, payload)
    resp = HotelCreatedEnvelope(
        message="Hotel submitted for review", hotel_id=hotel.id, hotel=HotelOut.from_hotel(hotel)
    )

    if idempotency_key:
        await remember_response(db, actor, idempotency_key, resp.model_dump(mode="json", by_alias=True))

    await db.commit()
    return resp


@router.get("/hotels/{hotel_id}", response_model=HotelEnvelope)
async def get_hotel(
    hotel_id: int,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> HotelEnvelope:
    hotel = await moderation.get_hotel(db, actor, hotel_id)
    return HotelEnvelope(hotel=HotelOut.from_hotel(hotel))


@router.put("/hotels/{hotel_id}", response_model=HotelEnvelope)
async def edit_hotel(
    hotel_id: int,
    payload: HotelIn,
    actor: Actor = Depends(merchant_only),
    db: AsyncSession = Depends(get_db),
) -> HotelEnvelope:
    hotel = await moderation.edit(db, actor, hotel_id, payload)
    resp = HotelEnvelope(message="Hotel resubmitted for review", hotel=HotelOut.from_hotel(hotel))
    await db.commit()
    return resp


@router.patch("/hotels/{hotel_id}/status", response_model=HotelIdEnvelope)
async def change_hotel_status(
    hotel_id: int,
    payload: StatusChangeIn,
    actor: Actor = Depends(merchant_only),
    db: AsyncSession = Depends(get_db),
) -> HotelIdEnvelope:
    if payload.status != WITHDRAW_STATUS:
        raise ValidationError(f"Only status {WITHDRAW_STATUS} (withdraw) can be requested here")

    await moderation.withdraw(db, actor, hotel_id)
    await db.commit()
    return HotelIdEnvelope(message="Submission withdrawn", hotel_id=hotel_id)


@router.delete("/hotels/{hotel_id}", response_model=HotelIdEnvelope)
async def delete_hotel(
    hotel_id: int,
    actor: Actor = Depends(merchant_only),
    db: AsyncSession = Depends(get_db),
) -> HotelIdEnvelope:
    await moderation.delete(db, actor, hotel_id)
    await db.commit()
    return HotelIdEnvelope(message="Hotel deleted", hotel_id=hotel_id)
