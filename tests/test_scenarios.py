"""End-to-end moderation flows, merchant console and admin console talking to one API."""
import pytest

from hotelhub.models.hotel import Hotel
from hotelhub.services.workflow import cancellation_consistent


async def _hotel_row(db_session, hotel_id: int) -> Hotel:
    return await db_session.get(Hotel, hotel_id, populate_existing=True)


@pytest.mark.asyncio
async def test_submit_reject_edit_approve_offline(client, db_session, seed_accounts, hotel_body):
    merchant = seed_accounts["merchant"]["headers"]
    admin = seed_accounts["admin"]["headers"]

    # merchant submits
    body = hotel_body("Test Hotel", roomTypes=[{"name": "Standard", "price": 100}])
    r = await client.post("/api/hotels", json=body, headers=merchant)
    hotel = r.json()["hotel"]
    hotel_id = hotel["id"]
    assert (hotel["status"], hotel["cancellation"]) == (0, None)

    # admin rejects with a reason the merchant will read
    r = await client.post(f"/api/admin/hotels/{hotel_id}/reject", json={"reason": "照片不清晰"}, headers=admin)
    hotel = r.json()["hotel"]
    assert (hotel["status"], hotel["cancellation"]) == (2, "照片不清晰")

    r = await client.get("/api/hotels/my", headers=merchant)
    assert r.json()["hotels"][0]["cancellation"] == "照片不清晰"

    # merchant fixes it and resubmits, which clears the reason
    edited = hotel_body("Test Hotel", tags="pool", roomTypes=[{"name": "Deluxe", "price": 180}])
    r = await client.put(f"/api/hotels/{hotel_id}", json=edited, headers=merchant)
    assert r.status_code == 200, r.text
    hotel = r.json()["hotel"]
    assert (hotel["status"], hotel["cancellation"]) == (0, None)
    assert hotel["tags"] == "pool"
    assert [(rt["name"], rt["price"]) for rt in hotel["roomTypes"]] == [("Deluxe", 180.0)]

    # admin approves, then takes it offline with an empty reason
    r = await client.post(f"/api/admin/hotels/{hotel_id}/approve", headers=admin)
    hotel = r.json()["hotel"]
    assert (hotel["status"], hotel["cancellation"]) == (1, None)

    r = await client.post(f"/api/admin/hotels/{hotel_id}/offline", json={"reason": ""}, headers=admin)
    hotel = r.json()["hotel"]
    assert (hotel["status"], hotel["cancellation"]) == (3, "")

    r = await client.get("/api/admin/hotels/published", headers=admin)
    assert [(h["id"], h["status"]) for h in r.json()["hotels"]] == [(hotel_id, 3)]
    r = await client.get("/api/admin/hotels/pending", headers=admin)
    assert r.json()["hotels"] == []

    row = await _hotel_row(db_session, hotel_id)
    assert row.status == 3
    assert row.cancellation == ""
    assert cancellation_consistent(row.status, row.cancellation)

    # offline listings go back to review when edited
    r = await client.put(f"/api/hotels/{hotel_id}", json=edited, headers=merchant)
    assert (r.json()["hotel"]["status"], r.json()["hotel"]["cancellation"]) == (0, None)


@pytest.mark.asyncio
async def test_submit_approve_shows_in_published_view(client, seed_accounts, hotel_body):
    r = await client.post("/api/hotels", json=hotel_body(), headers=seed_accounts["merchant"]["headers"])
    hotel_id = r.json()["hotel"]["id"]

    admin = seed_accounts["admin"]["headers"]
    await client.post(f"/api/admin/hotels/{hotel_id}/approve", headers=admin)

    r = await client.get("/api/admin/hotels/published", headers=admin)
    (listed,) = r.json()["hotels"]
    assert (listed["id"], listed["status"], listed["cancellation"]) == (hotel_id, 1, None)


@pytest.mark.asyncio
async def test_withdraw_of_published_listing_is_refused(client, db_session, seed_accounts, hotel_body):
    merchant = seed_accounts["merchant"]["headers"]
    r = await client.post("/api/hotels", json=hotel_body(), headers=merchant)
    hotel_id = r.json()["hotel"]["id"]
    r = await client.post(f"/api/admin/hotels/{hotel_id}/approve", headers=seed_accounts["admin"]["headers"])
    published = r.json()["hotel"]

    r = await client.patch(f"/api/hotels/{hotel_id}/status", json={"status": 2}, headers=merchant)
    assert r.status_code == 409
    assert r.json()["message"] == "Cannot withdraw a hotel that is published"

    row = await _hotel_row(db_session, hotel_id)
    assert row.status == 1
    assert row.cancellation is None
    r = await client.get(f"/api/hotels/{hotel_id}", headers=merchant)
    assert r.json()["hotel"]["update_time"] == published["update_time"]


@pytest.mark.asyncio
async def test_rejected_listing_can_be_deleted_by_owner(client, db_session, seed_accounts, hotel_body):
    merchant = seed_accounts["merchant"]["headers"]
    r = await client.post("/api/hotels", json=hotel_body(), headers=merchant)
    hotel_id = r.json()["hotel"]["id"]
    await client.post(f"/api/admin/hotels/{hotel_id}/reject", json={"reason": "duplicate"},
                      headers=seed_accounts["admin"]["headers"])

    r = await client.delete(f"/api/hotels/{hotel_id}", headers=merchant)
    assert r.status_code == 200, r.text
    assert r.json()["hotelId"] == hotel_id
    assert await _hotel_row(db_session, hotel_id) is None


@pytest.mark.asyncio
async def test_refused_action_leaves_listing_untouched(client, db_session, seed_accounts, hotel_body):
    merchant = seed_accounts["merchant"]["headers"]
    admin = seed_accounts["admin"]["headers"]
    r = await client.post("/api/hotels", json=hotel_body(), headers=merchant)
    hotel_id = r.json()["hotel"]["id"]
    r = await client.post(f"/api/admin/hotels/{hotel_id}/reject", json={"reason": "dark"}, headers=admin)
    before = r.json()["hotel"]

    attempts = [
        ("POST", f"/api/admin/hotels/{hotel_id}/approve", admin),
        ("POST", f"/api/admin/hotels/{hotel_id}/offline", admin),
        ("POST", f"/api/admin/hotels/{hotel_id}/reject", admin),
        ("PATCH", f"/api/hotels/{hotel_id}/status", merchant),
    ]
    for method, path, headers in attempts:
        kwargs = {"json": {"status": 2}} if method == "PATCH" else {}
        r = await client.request(method, path, headers=headers, **kwargs)
        assert r.status_code == 409, (path, r.text)
        assert r.json()["details"]["current_status"] == 2

    r = await client.get(f"/api/hotels/{hotel_id}", headers=merchant)
    after = r.json()["hotel"]
    for key in ("status", "cancellation", "update_time"):
        assert after[key] == before[key]
