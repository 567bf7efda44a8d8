"""Integration tests for /trips endpoints."""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from tests.conftest import Catalog

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]

TRIP_BODY = {
    "name": "Japan Spring",
    "description": "Cherry blossoms",
    "start_date": "2026-04-01",
    "end_date": "2026-04-05",
    "total_budget": "2500.00",
    "cover_photo_url": "https://example.com/japan.jpg",
}


async def _create_trip(client: AsyncClient, headers: dict[str, str], **overrides: str) -> dict:
    response = await client.post("/trips", json={**TRIP_BODY, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_create_trip_returns_draft(client: AsyncClient, dev_headers: dict[str, str]) -> None:
    trip = await _create_trip(client, dev_headers)

    assert trip["name"] == "Japan Spring"
    assert trip["status"] == "DRAFT"
    assert Decimal(trip["total_budget"]) == Decimal("2500")
    assert trip["days"] == []
    assert trip["budgets"] == []
    assert trip["created_at"] is not None


async def test_requests_without_auth_are_rejected(client: AsyncClient) -> None:
    response = await client.get("/trips")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": ""},
        {"end_date": "2026-03-01"},
        {"total_budget": "0"},
        {"cover_photo_url": "ftp://example.com/x.jpg"},
    ],
)
async def test_create_trip_validation(
    client: AsyncClient, dev_headers: dict[str, str], overrides: dict[str, str]
) -> None:
    response = await client.post("/trips", json={**TRIP_BODY, **overrides}, headers=dev_headers)

    assert response.status_code == 422


async def test_get_trip_is_owner_scoped(
    client: AsyncClient, dev_headers: dict[str, str], other_headers: dict[str, str]
) -> None:
    trip = await _create_trip(client, dev_headers)

    own = await client.get(f"/trips/{trip['trip_id']}", headers=dev_headers)
    foreign = await client.get(f"/trips/{trip['trip_id']}", headers=other_headers)

    assert own.status_code == 200
    assert own.json()["trip_id"] == trip["trip_id"]
    assert foreign.status_code == 404


async def test_list_trips_paginates_and_filters(
    client: AsyncClient, dev_headers: dict[str, str], other_headers: dict[str, str]
) -> None:
    for i in range(3):
        await _create_trip(client, dev_headers, name=f"Trip {i}")
    await _create_trip(client, other_headers, name="Not mine")

    first = await client.get("/trips", params={"page": 1, "limit": 2}, headers=dev_headers)
    second = await client.get("/trips", params={"page": 2, "limit": 2}, headers=dev_headers)

    assert first.status_code == 200
    body = first.json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert len(body["trips"]) == 2
    assert len(second.json()["trips"]) == 1

    names = {t["name"] for t in body["trips"] + second.json()["trips"]}
    assert "Not mine" not in names

    drafts = await client.get("/trips", params={"status": "DRAFT"}, headers=dev_headers)
    confirmed = await client.get("/trips", params={"status": "CONFIRMED"}, headers=dev_headers)
    assert drafts.json()["total"] == 3
    assert confirmed.json()["total"] == 0


async def test_patch_trip_updates_status_and_fields(
    client: AsyncClient, dev_headers: dict[str, str]
) -> None:
    trip = await _create_trip(client, dev_headers)

    response = await client.patch(
        f"/trips/{trip['trip_id']}",
        json={"status": "CONFIRMED", "name": "Japan Spring 2026", "description": None},
        headers=dev_headers,
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "CONFIRMED"
    assert updated["name"] == "Japan Spring 2026"
    assert updated["description"] is None
    assert updated["start_date"] == TRIP_BODY["start_date"]


async def test_patch_trip_rejects_inverted_dates(
    client: AsyncClient, dev_headers: dict[str, str]
) -> None:
    trip = await _create_trip(client, dev_headers)

    response = await client.patch(
        f"/trips/{trip['trip_id']}", json={"end_date": "2026-03-01"}, headers=dev_headers
    )

    assert response.status_code == 400


async def test_delete_trip_cascades(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip = await _create_trip(client, dev_headers)
    trip_id = trip["trip_id"]

    day = await client.post(
        f"/trips/{trip_id}/itinerary/days",
        json={"city_id": str(catalog.cities["Tokyo"]), "day_number": 1, "date": "2026-04-01"},
        headers=dev_headers,
    )
    assert day.status_code == 201
    await client.post(
        f"/trips/{trip_id}/itinerary/days/{day.json()['day_id']}/activities",
        json={
            "activity_id": str(catalog.activities["Senso-ji Temple"]),
            "start_time": "09:00",
            "end_time": "10:30",
        },
        headers=dev_headers,
    )
    await client.post(
        f"/trips/{trip_id}/budget",
        json={"allocations": [{"category": "FOOD", "amount": "300"}]},
        headers=dev_headers,
    )
    await client.post(f"/sharing/trips/{trip_id}/share", json={}, headers=dev_headers)

    response = await client.delete(f"/trips/{trip_id}", headers=dev_headers)

    assert response.status_code == 204
    assert (await client.get(f"/trips/{trip_id}", headers=dev_headers)).status_code == 404
    assert (await client.delete(f"/trips/{trip_id}", headers=dev_headers)).status_code == 404


async def test_duplicate_trip_copies_itinerary_and_budgets(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip = await _create_trip(client, dev_headers)
    trip_id = trip["trip_id"]

    day = (
        await client.post(
            f"/trips/{trip_id}/itinerary/days",
            json={"city_id": str(catalog.cities["Tokyo"]), "day_number": 1, "date": "2026-04-01"},
            headers=dev_headers,
        )
    ).json()
    for name, start in [("Senso-ji Temple", "09:00"), ("Tsukiji Outer Market Tour", "12:00")]:
        await client.post(
            f"/trips/{trip_id}/itinerary/days/{day['day_id']}/activities",
            json={"activity_id": str(catalog.activities[name]), "start_time": start, "end_time": "23:00"},
            headers=dev_headers,
        )
    await client.post(
        f"/trips/{trip_id}/itinerary/days",
        json={"city_id": str(catalog.cities["Tokyo"]), "day_number": 2, "date": "2026-04-02"},
        headers=dev_headers,
    )
    await client.post(
        f"/trips/{trip_id}/budget",
        json={"allocations": [{"category": "FOOD", "amount": "300"}]},
        headers=dev_headers,
    )
    await client.patch(
        f"/trips/{trip_id}/budget/FOOD", json={"spent_amount": "150"}, headers=dev_headers
    )
    await client.patch(f"/trips/{trip_id}", json={"status": "CONFIRMED"}, headers=dev_headers)

    response = await client.post(f"/trips/{trip_id}/duplicate", headers=dev_headers)

    assert response.status_code == 201
    copy = response.json()
    assert copy["trip_id"] != trip_id
    assert copy["name"] == "Japan Spring (Copy)"
    assert copy["status"] == "DRAFT"
    assert [d["day_number"] for d in copy["days"]] == [1, 2]
    assert [a["activity_id"] for a in copy["days"][0]["activities"]] == [
        str(catalog.activities["Senso-ji Temple"]),
        str(catalog.activities["Tsukiji Outer Market Tour"]),
    ]
    assert copy["days"][0]["day_id"] != day["day_id"]
    assert len(copy["budgets"]) == 1
    assert copy["budgets"][0]["category"] == "FOOD"
    assert Decimal(copy["budgets"][0]["allocated_amount"]) == Decimal("300")
    assert Decimal(copy["budgets"][0]["spent_amount"]) == Decimal("0")

    # Source is unchanged
    source = (await client.get(f"/trips/{trip_id}", headers=dev_headers)).json()
    assert source["status"] == "CONFIRMED"
    assert Decimal(source["budgets"][0]["spent_amount"]) == Decimal("150")


async def test_duplicate_foreign_trip_is_not_found(
    client: AsyncClient, dev_headers: dict[str, str], other_headers: dict[str, str]
) -> None:
    trip = await _create_trip(client, dev_headers)

    response = await client.post(f"/trips/{trip['trip_id']}/duplicate", headers=other_headers)

    assert response.status_code == 404
