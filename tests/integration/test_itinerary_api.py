"""Integration tests for itinerary endpoints."""

import uuid
from decimal import Decimal

import pytest
from httpx import AsyncClient

from tests.conftest import Catalog


async def _trip(client: AsyncClient, headers: dict[str, str]) -> str:
    response = await client.post(
        "/trips",
        json={"name": "Peru", "start_date": "2026-07-01", "end_date": "2026-07-05"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["trip_id"]


async def _day(
    client: AsyncClient, headers: dict[str, str], trip_id: str, city_id: uuid.UUID, day_number: int
) -> dict:
    response = await client.post(
        f"/trips/{trip_id}/itinerary/days",
        json={"city_id": str(city_id), "day_number": day_number, "date": "2026-07-01"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _schedule(
    client: AsyncClient, headers: dict[str, str], trip_id: str, day_id: str, activity_id: uuid.UUID, **extra
) -> dict:
    response = await client.post(
        f"/trips/{trip_id}/itinerary/days/{day_id}/activities",
        json={"activity_id": str(activity_id), "start_time": "09:00", "end_time": "11:00", **extra},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_days_are_appended_in_order(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers)
    cusco = catalog.cities["Cusco"]

    first = await _day(client, dev_headers, trip_id, cusco, 1)
    second = await _day(client, dev_headers, trip_id, cusco, 2)

    assert first["order_index"] == 0
    assert second["order_index"] == 1
    assert first["activities"] == []

    response = await client.get(f"/trips/{trip_id}/itinerary", headers=dev_headers)
    assert response.status_code == 200
    assert [d["day_number"] for d in response.json()] == [1, 2]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_duplicate_day_number_conflicts(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers)
    await _day(client, dev_headers, trip_id, catalog.cities["Cusco"], 1)

    response = await client.post(
        f"/trips/{trip_id}/itinerary/days",
        json={"city_id": str(catalog.cities["Cusco"]), "day_number": 1, "date": "2026-07-02"},
        headers=dev_headers,
    )

    assert response.status_code == 409


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_city_or_activity_is_not_found(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers)

    response = await client.post(
        f"/trips/{trip_id}/itinerary/days",
        json={"city_id": str(uuid.uuid4()), "day_number": 1, "date": "2026-07-01"},
        headers=dev_headers,
    )
    assert response.status_code == 404

    day = await _day(client, dev_headers, trip_id, catalog.cities["Cusco"], 1)
    response = await client.post(
        f"/trips/{trip_id}/itinerary/days/{day['day_id']}/activities",
        json={"activity_id": str(uuid.uuid4()), "start_time": "09:00", "end_time": "10:00"},
        headers=dev_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_foreign_trip_itinerary_is_not_found(
    client: AsyncClient,
    dev_headers: dict[str, str],
    other_headers: dict[str, str],
    catalog: Catalog,
) -> None:
    trip_id = await _trip(client, dev_headers)

    read = await client.get(f"/trips/{trip_id}/itinerary", headers=other_headers)
    write = await client.post(
        f"/trips/{trip_id}/itinerary/days",
        json={"city_id": str(catalog.cities["Cusco"]), "day_number": 1, "date": "2026-07-01"},
        headers=other_headers,
    )

    assert read.status_code == 404
    assert write.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_scheduled_activities_are_appended_and_editable(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers)
    day = await _day(client, dev_headers, trip_id, catalog.cities["Cusco"], 1)

    valley = await _schedule(
        client, dev_headers, trip_id, day["day_id"], catalog.activities["Sacred Valley Day Trip"],
        custom_notes="Bring water",
    )
    market = await _schedule(
        client, dev_headers, trip_id, day["day_id"], catalog.activities["San Pedro Market"]
    )

    assert valley["order_index"] == 0
    assert market["order_index"] == 1
    assert valley["custom_notes"] == "Bring water"

    response = await client.patch(
        f"/trips/{trip_id}/itinerary/activities/{market['scheduled_id']}",
        json={"custom_cost": "12.50", "end_time": "12:30"},
        headers=dev_headers,
    )
    assert response.status_code == 200
    assert Decimal(response.json()["custom_cost"]) == Decimal("12.50")
    assert response.json()["end_time"] == "12:30:00"

    # Explicit null clears the override
    response = await client.patch(
        f"/trips/{trip_id}/itinerary/activities/{market['scheduled_id']}",
        json={"custom_cost": None},
        headers=dev_headers,
    )
    assert response.json()["custom_cost"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_and_delete_day(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers)
    day = await _day(client, dev_headers, trip_id, catalog.cities["Cusco"], 1)
    await _schedule(
        client, dev_headers, trip_id, day["day_id"], catalog.activities["San Pedro Market"]
    )

    response = await client.patch(
        f"/trips/{trip_id}/itinerary/days/{day['day_id']}",
        json={"city_id": str(catalog.cities["Tokyo"]), "notes": "Flight day"},
        headers=dev_headers,
    )
    assert response.status_code == 200
    assert response.json()["city_id"] == str(catalog.cities["Tokyo"])
    assert response.json()["notes"] == "Flight day"

    response = await client.delete(
        f"/trips/{trip_id}/itinerary/days/{day['day_id']}", headers=dev_headers
    )
    assert response.status_code == 204

    itinerary = await client.get(f"/trips/{trip_id}/itinerary", headers=dev_headers)
    assert itinerary.json() == []

    response = await client.delete(
        f"/trips/{trip_id}/itinerary/days/{day['day_id']}", headers=dev_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_scheduled_activity(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers)
    day = await _day(client, dev_headers, trip_id, catalog.cities["Cusco"], 1)
    scheduled = await _schedule(
        client, dev_headers, trip_id, day["day_id"], catalog.activities["San Pedro Market"]
    )

    url = f"/trips/{trip_id}/itinerary/activities/{scheduled['scheduled_id']}"
    assert (await client.delete(url, headers=dev_headers)).status_code == 204
    assert (await client.delete(url, headers=dev_headers)).status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reorder_days_and_activities(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers)
    cusco = catalog.cities["Cusco"]
    first = await _day(client, dev_headers, trip_id, cusco, 1)
    second = await _day(client, dev_headers, trip_id, cusco, 2)
    valley = await _schedule(
        client, dev_headers, trip_id, first["day_id"], catalog.activities["Sacred Valley Day Trip"]
    )
    market = await _schedule(
        client, dev_headers, trip_id, first["day_id"], catalog.activities["San Pedro Market"]
    )

    response = await client.patch(
        f"/trips/{trip_id}/itinerary/reorder",
        json={
            "days": [
                {"id": first["day_id"], "order_index": 1},
                {"id": second["day_id"], "order_index": 0},
            ],
            "activities": [
                {"id": valley["scheduled_id"], "order_index": 1},
                {"id": market["scheduled_id"], "order_index": 0},
            ],
        },
        headers=dev_headers,
    )
    assert response.status_code == 204

    days = (await client.get(f"/trips/{trip_id}/itinerary", headers=dev_headers)).json()
    by_id = {d["day_id"]: d for d in days}
    assert by_id[first["day_id"]]["order_index"] == 1
    assert by_id[second["day_id"]]["order_index"] == 0
    assert [a["scheduled_id"] for a in by_id[first["day_id"]]["activities"]] == [
        market["scheduled_id"],
        valley["scheduled_id"],
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reorder_ignores_rows_of_other_trips(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    mine = await _trip(client, dev_headers)
    other = await _trip(client, dev_headers)
    other_day = await _day(client, dev_headers, other, catalog.cities["Cusco"], 1)

    response = await client.patch(
        f"/trips/{mine}/itinerary/reorder",
        json={"days": [{"id": other_day["day_id"], "order_index": 7}]},
        headers=dev_headers,
    )
    assert response.status_code == 204

    days = (await client.get(f"/trips/{other}/itinerary", headers=dev_headers)).json()
    assert days[0]["order_index"] == 0
