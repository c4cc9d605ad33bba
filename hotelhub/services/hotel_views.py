from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hotelhub.models.account import ROLE_ADMIN, ROLE_MERCHANT, Account
from hotelhub.models.hotel import Hotel
from hotelhub.services.auth import Actor
from hotelhub.services.authorization import require_role
from hotelhub.services.workflow import HotelStatus

# Read projections over the hotels table. No caching anywhere on this path:
# an admin must see the update_time of their own offline action on the next read.

PUBLISHED_QUEUE = (HotelStatus.PUBLISHED, HotelStatus.OFFLINE)


def _merchant_name():
    # display name, falling back to the login name when it was never set
    return Account.display_name, Account.username


async def list_mine(db: AsyncSession, actor: Actor) -> list[Hotel]:
    require_role(actor, ROLE_MERCHANT)
    stmt = (
        select(Hotel)
        .where(Hotel.merchant_id == actor.account_id)
        .order_by(Hotel.update_time.desc(), Hotel.id.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def _with_merchant(db: AsyncSession, stmt) -> list[tuple[Hotel, str | None]]:
    rows = (await db.execute(stmt)).all()
    return [(hotel, display_name or username) for hotel, display_name, username in rows]


async def list_published(db: AsyncSession, actor: Actor) -> list[tuple[Hotel, str | None]]:
    """Published and offline listings; offline rows stay visible so they can be deleted."""
    require_role(actor, ROLE_ADMIN)
    stmt = (
        select(Hotel, *_merchant_name())
        .outerjoin(Account, Account.id == Hotel.merchant_id)
        .where(Hotel.status.in_([int(s) for s in PUBLISHED_QUEUE]))
        .order_by(Hotel.update_time.desc(), Hotel.id.desc())
    )
    return await _with_merchant(db, stmt)


async def list_pending(db: AsyncSession, actor: Actor) -> list[tuple[Hotel, str | None]]:
    """The moderation queue, oldest submission first."""
    require_role(actor, ROLE_ADMIN)
    stmt = (
        select(Hotel, *_merchant_name())
        .outerjoin(Account, Account.id == Hotel.merchant_id)
        .where(Hotel.status == int(HotelStatus.PENDING))
        .order_by(Hotel.update_time.asc(), Hotel.id.asc())
    )
    return await _with_merchant(db, stmt)


async def merchant_name(db: AsyncSession, merchant_id: int) -> str | None:
    stmt = select(*_merchant_name()).where(Account.id == merchant_id)
    row = (await db.execute(stmt)).one_or_none()
    if row is None:
        return None
    display_name, username = row
    return display_name or username
