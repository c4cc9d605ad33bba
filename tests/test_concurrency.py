"""Two writers racing on one listing: exactly one transition commits."""
import asyncio
import os

import pytest

from hotelhub.core.errors import InvalidTransition
from hotelhub.models.account import ROLE_ADMIN, ROLE_MERCHANT
from hotelhub.models.hotel import Hotel
from hotelhub.schemas.hotel import HotelIn
from hotelhub.services import hotel_store, moderation
from hotelhub.services.auth import Actor
from hotelhub.services.authorization import authorize_transition
from hotelhub.services.workflow import HotelAction


def _actor(seed: dict, role: str) -> Actor:
    return Actor(
        account_id=seed["account_id"],
        role=role,
        username=seed["username"],
        display_name=seed["display_name"],
        api_key_id=seed["api_key_id"],
    )


@pytest.fixture
def actors(seed_accounts):
    return {
        "merchant": _actor(seed_accounts["merchant"], ROLE_MERCHANT),
        "admin": _actor(seed_accounts["admin"], ROLE_ADMIN),
    }


async def _pending_hotel(session_factory, merchant: Actor, hotel_body) -> int:
    async with session_factory() as db:
        hotel = await moderation.submit(db, merchant, HotelIn.model_validate(hotel_body()))
        await db.commit()
        return hotel.id


def _interleave(monkeypatch, competitor):
    """
    The first writer reads its row without a lock, then `competitor` runs to
    completion before it writes, so the copy it holds is stale. This is the
    version-check path a back end without row locks relies on.
    """
    real_get_hotel = hotel_store.get_hotel
    fired = False

    async def get_hotel(db, hotel_id, *, for_update=False):
        nonlocal fired
        if for_update and not fired:
            fired = True
            hotel = await real_get_hotel(db, hotel_id)
            await competitor()
            return hotel
        return await real_get_hotel(db, hotel_id, for_update=for_update)

    monkeypatch.setattr(hotel_store, "get_hotel", get_hotel)


async def _status(session_factory, hotel_id: int):
    async with session_factory() as db:
        hotel = await db.get(Hotel, hotel_id)
        return None if hotel is None else (hotel.status, hotel.cancellation, hotel.version)


@pytest.mark.asyncio
async def test_reject_loses_to_approve_that_committed_first(session_factory, actors, hotel_body, monkeypatch):
    hotel_id = await _pending_hotel(session_factory, actors["merchant"], hotel_body)

    async def approve():
        async with session_factory() as db:
            await moderation.approve(db, actors["admin"], hotel_id)
            await db.commit()

    _interleave(monkeypatch, approve)

    async with session_factory() as db:
        with pytest.raises(InvalidTransition) as exc:
            await moderation.reject(db, actors["admin"], hotel_id, "too late")

    assert exc.value.message == "Hotel was changed by another request and is now published"
    assert exc.value.current_status == 1
    assert await _status(session_factory, hotel_id) == (1, None, 2)


@pytest.mark.asyncio
async def test_withdraw_loses_to_approve_that_committed_first(session_factory, actors, hotel_body, monkeypatch):
    hotel_id = await _pending_hotel(session_factory, actors["merchant"], hotel_body)

    async def approve():
        async with session_factory() as db:
            await moderation.approve(db, actors["admin"], hotel_id)
            await db.commit()

    _interleave(monkeypatch, approve)

    async with session_factory() as db:
        with pytest.raises(InvalidTransition):
            await moderation.withdraw(db, actors["merchant"], hotel_id)

    status, cancellation, _ = await _status(session_factory, hotel_id)
    assert (status, cancellation) == (1, None)


@pytest.mark.asyncio
async def test_edit_and_approve_on_pending_listing(session_factory, actors, hotel_body, monkeypatch):
    hotel_id = await _pending_hotel(session_factory, actors["merchant"], hotel_body)

    async def edit():
        async with session_factory() as db:
            await moderation.edit(db, actors["merchant"], hotel_id, HotelIn.model_validate(hotel_body("Renamed")))

    _interleave(monkeypatch, lambda: _expect_invalid(edit))

    async with session_factory() as db:
        hotel = await moderation.approve(db, actors["admin"], hotel_id)
        await db.commit()
    assert hotel.status == 1

    async with session_factory() as db:
        row = await db.get(Hotel, hotel_id)
        assert (row.status, row.name) == (1, "Seaside Inn")


async def _expect_invalid(op):
    with pytest.raises(InvalidTransition):
        await op()


@pytest.mark.asyncio
async def test_edit_loses_to_offline_that_committed_first(session_factory, actors, hotel_body, monkeypatch):
    hotel_id = await _pending_hotel(session_factory, actors["merchant"], hotel_body)
    async with session_factory() as db:
        await moderation.approve(db, actors["admin"], hotel_id)
        await db.commit()

    async def offline():
        async with session_factory() as db:
            await moderation.offline(db, actors["admin"], hotel_id, "complaints")
            await db.commit()

    _interleave(monkeypatch, offline)

    async with session_factory() as db:
        with pytest.raises(InvalidTransition) as exc:
            await moderation.edit(db, actors["merchant"], hotel_id, HotelIn.model_validate(hotel_body("Renamed")))

    assert exc.value.message == "Hotel was changed by another request and is now offline"
    assert exc.value.current_status == 3
    assert exc.value.action == "edit"
    assert await _status(session_factory, hotel_id) == (3, "complaints", 3)

    async with session_factory() as db:
        row = await db.get(Hotel, hotel_id)
        assert row.name == "Seaside Inn"
        assert [rt.name for rt in row.room_types] == ["Standard King", "Family Suite"]


@pytest.mark.asyncio
async def test_stale_copy_is_refused_by_the_store(session_factory, actors, hotel_body):
    hotel_id = await _pending_hotel(session_factory, actors["merchant"], hotel_body)

    async with session_factory() as stale_db:
        stale = await hotel_store.get_hotel(stale_db, hotel_id)

        async with session_factory() as db:
            await moderation.approve(db, actors["admin"], hotel_id)
            await db.commit()

        transition = authorize_transition(
            actors["admin"],
            action=HotelAction.REJECT,
            current=stale.status,
            merchant_id=stale.merchant_id,
            reason="late",
        )
        with pytest.raises(hotel_store.StaleHotelError):
            await hotel_store.apply_transition(stale_db, stale, transition, updated_by="test")
        await stale_db.rollback()

    status, cancellation, _ = await _status(session_factory, hotel_id)
    assert (status, cancellation) == (1, None)


@pytest.mark.skipif(
    not os.getenv("DATABASE_URL_TEST", "").startswith("postgresql"),
    reason="needs row locks; run against PostgreSQL",
)
@pytest.mark.asyncio
async def test_parallel_requests_commit_exactly_one(client, seed_accounts, hotel_body):
    r = await client.post("/api/hotels", json=hotel_body(), headers=seed_accounts["merchant"]["headers"])
    hotel_id = r.json()["hotel"]["id"]
    admin = seed_accounts["admin"]["headers"]

    approve, reject = await asyncio.gather(
        client.post(f"/api/admin/hotels/{hotel_id}/approve", headers=admin),
        client.post(f"/api/admin/hotels/{hotel_id}/reject", json={"reason": "no"}, headers=admin),
    )
    assert sorted([approve.status_code, reject.status_code]) == [200, 409]

    r = await client.get(f"/api/admin/hotels/{hotel_id}", headers=admin)
    winner = approve if approve.status_code == 200 else reject
    assert r.json()["hotel"]["status"] == winner.json()["hotel"]["status"]
