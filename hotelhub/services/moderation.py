"""
Listing lifecycle operations for merchants and admins.

Every operation resolves the listing, asks the authorization gate for a
planned transition, writes it through the store and records an audit row, all
inside the caller's transaction. Callers commit. Nothing here commits, so a
failure anywhere leaves the listing untouched once the session rolls back.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from hotelhub.core.errors import InvalidTransition, NotFound, ValidationError
from hotelhub.core.telemetry import tracer
from hotelhub.models.account import ROLE_ADMIN
from hotelhub.models.hotel import Hotel
from hotelhub.schemas.hotel import HotelIn
from hotelhub.services import hotel_store
from hotelhub.services.audit import record_transition
from hotelhub.services.auth import Actor
from hotelhub.services.authorization import authorize_read, authorize_transition, require_role
from hotelhub.services.tags import MAX_TAGS_LENGTH, encode_tags
from hotelhub.services.workflow import HotelAction, Transition


log = logging.getLogger(__name__)


def validate_content(content: HotelIn) -> None:
    if not content.room_types:
        raise ValidationError("At least one room type is required")
    for i, rt in enumerate(content.room_types, start=1):
        if not rt.name or rt.price is None:
            raise ValidationError(f"Room type #{i} needs a name and a price")
    if len(encode_tags(content.tags) or "") > MAX_TAGS_LENGTH:
        raise ValidationError(f"Tags must be at most {MAX_TAGS_LENGTH} characters once joined")


async def _load(db: AsyncSession, hotel_id: int, *, for_update: bool = False) -> Hotel:
    hotel = await hotel_store.get_hotel(db, hotel_id, for_update=for_update)
    if hotel is None:
        raise NotFound("Hotel not found")
    return hotel


async def _record(db: AsyncSession, actor: Actor, hotel_id: int, transition: Transition) -> None:
    record_transition(db, actor, hotel_id, transition)
    await db.flush()
    log.info("hotel %s: %s by %s %s", hotel_id, transition.describe(), actor.role, actor.account_id)


async def _transition(
    db: AsyncSession,
    actor: Actor,
    hotel_id: int,
    action: HotelAction,
    *,
    reason: str | None = None,
    content: HotelIn | None = None,
) -> Hotel | None:
    with tracer.start_as_current_span(f"hotel.{action.value}") as span:
        span.set_attribute("hotel.id", hotel_id)
        span.set_attribute("hotel.action", action.value)
        span.set_attribute("actor.role", actor.role)
        return await _run_transition(db, actor, hotel_id, action, reason=reason, content=content)


async def _run_transition(
    db: AsyncSession,
    actor: Actor,
    hotel_id: int,
    action: HotelAction,
    *,
    reason: str | None,
    content: HotelIn | None,
) -> Hotel | None:
    hotel = await _load(db, hotel_id, for_update=True)
    seen_status = hotel.status

    transition = authorize_transition(
        actor,
        action=action,
        current=hotel.status,
        merchant_id=hotel.merchant_id,
        hotel_id=hotel_id,
        reason=reason,
    )
    if transition.rule.replaces_content:
        assert content is not None
        validate_content(content)

    try:
        result = await hotel_store.apply_transition(db, hotel, transition, content=content, updated_by=actor.ref)
    except hotel_store.StaleHotelError:
        await db.rollback()
        now = await hotel_store.current_status(db, hotel_id)
        label = now.label if now is not None else "deleted"
        log.info("hotel %s: %s lost a race (saw %s, now %s)", hotel_id, action.value, seen_status, label)
        raise InvalidTransition(
            f"Hotel was changed by another request and is now {label}",
            current_status=int(now) if now is not None else None,
            action=action.value,
        )

    await _record(db, actor, hotel_id, transition)
    return result


async def submit(db: AsyncSession, actor: Actor, content: HotelIn) -> Hotel:
    transition = authorize_transition(actor, action=HotelAction.SUBMIT, current=None, merchant_id=None)
    validate_content(content)

    hotel = await hotel_store.insert_hotel(
        db,
        merchant_id=actor.account_id,
        content=content,
        transition=transition,
        updated_by=actor.ref,
    )
    await _record(db, actor, hotel.id, transition)
    return hotel


async def edit(db: AsyncSession, actor: Actor, hotel_id: int, content: HotelIn) -> Hotel:
    return await _transition(db, actor, hotel_id, HotelAction.EDIT, content=content)


async def approve(db: AsyncSession, actor: Actor, hotel_id: int) -> Hotel:
    return await _transition(db, actor, hotel_id, HotelAction.APPROVE)


async def reject(db: AsyncSession, actor: Actor, hotel_id: int, reason: str | None) -> Hotel:
    return await _transition(db, actor, hotel_id, HotelAction.REJECT, reason=reason)


async def offline(db: AsyncSession, actor: Actor, hotel_id: int, reason: str | None) -> Hotel:
    return await _transition(db, actor, hotel_id, HotelAction.OFFLINE, reason=reason)


async def withdraw(db: AsyncSession, actor: Actor, hotel_id: int) -> int:
    await _transition(db, actor, hotel_id, HotelAction.WITHDRAW)
    return hotel_id


async def delete(db: AsyncSession, actor: Actor, hotel_id: int) -> int:
    await _transition(db, actor, hotel_id, HotelAction.DELETE)
    return hotel_id


async def get_hotel(db: AsyncSession, actor: Actor, hotel_id: int, *, admin_view: bool = False) -> Hotel:
    if admin_view:
        require_role(actor, ROLE_ADMIN)
    hotel = await _load(db, hotel_id)
    authorize_read(actor, hotel.merchant_id)
    return hotel
