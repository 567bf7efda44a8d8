"""Integration tests for sharing endpoints."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from backend.globetrotter.db.models import SharedTrip
from backend.globetrotter.db.seed_dev import DEV_USER_ID
from backend.globetrotter.models.common import SharePermission
from tests.conftest import OTHER_USER_EMAIL, OTHER_USER_ID, Catalog, auth


async def _trip(client: AsyncClient, headers: dict[str, str], catalog: Catalog) -> str:
    response = await client.post(
        "/trips",
        json={"name": "Tokyo Food", "start_date": "2026-10-01", "end_date": "2026-10-02"},
        headers=headers,
    )
    trip_id = response.json()["trip_id"]
    day = (
        await client.post(
            f"/trips/{trip_id}/itinerary/days",
            json={"city_id": str(catalog.cities["Tokyo"]), "day_number": 1, "date": "2026-10-01"},
            headers=headers,
        )
    ).json()
    await client.post(
        f"/trips/{trip_id}/itinerary/days/{day['day_id']}/activities",
        json={
            "activity_id": str(catalog.activities["Tsukiji Outer Market Tour"]),
            "start_time": "07:00",
            "end_time": "09:00",
        },
        headers=headers,
    )
    return trip_id


async def _share(client: AsyncClient, headers: dict[str, str], trip_id: str, **body) -> dict:
    response = await client.post(f"/sharing/trips/{trip_id}/share", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_share_defaults_to_view_only(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)

    share = await _share(client, dev_headers, trip_id)

    assert share["permission"] == "VIEW_ONLY"
    assert share["shared_with_id"] is None
    assert share["expires_at"] is None
    assert len(share["public_slug"]) == 16
    assert share["share_url"] == f"/shared/{share['public_slug']}"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_anonymous_viewer_sees_unrestricted_share(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)
    share = await _share(client, dev_headers, trip_id, permission="CAN_COPY")

    response = await client.get(f"/sharing/{share['public_slug']}")

    assert response.status_code == 200
    view = response.json()
    assert view["trip"]["trip_id"] == trip_id
    assert len(view["trip"]["days"]) == 1
    assert view["shared_by"]["user_id"] == str(DEV_USER_ID)
    assert view["permission"] == "CAN_COPY"
    assert view["can_copy"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_view_only_share_cannot_be_copied(
    client: AsyncClient,
    dev_headers: dict[str, str],
    other_headers: dict[str, str],
    catalog: Catalog,
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)
    share = await _share(client, dev_headers, trip_id)

    view = await client.get(f"/sharing/{share['public_slug']}", headers=other_headers)
    copy = await client.post(f"/sharing/{share['public_slug']}/copy", headers=other_headers)

    assert view.json()["can_copy"] is False
    assert copy.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_copy_shared_trip_into_callers_account(
    client: AsyncClient,
    dev_headers: dict[str, str],
    other_headers: dict[str, str],
    catalog: Catalog,
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)
    share = await _share(client, dev_headers, trip_id, permission="CAN_EDIT")

    response = await client.post(f"/sharing/{share['public_slug']}/copy", headers=other_headers)

    assert response.status_code == 201
    copy = response.json()
    assert copy["user_id"] == str(OTHER_USER_ID)
    assert copy["name"] == "Tokyo Food (Copy)"
    assert copy["status"] == "DRAFT"
    assert copy["days"][0]["activities"][0]["activity_id"] == str(
        catalog.activities["Tsukiji Outer Market Tour"]
    )

    mine = await client.get(f"/trips/{copy['trip_id']}", headers=other_headers)
    assert mine.status_code == 200
    owners = await client.get(f"/trips/{copy['trip_id']}", headers=dev_headers)
    assert owners.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_copy_requires_auth(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)
    share = await _share(client, dev_headers, trip_id, permission="CAN_COPY")

    response = await client.post(f"/sharing/{share['public_slug']}/copy")

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_restricted_share_is_only_for_recipient(
    client: AsyncClient,
    dev_headers: dict[str, str],
    other_headers: dict[str, str],
    catalog: Catalog,
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)
    share = await _share(
        client, dev_headers, trip_id, permission="CAN_COPY", shared_with_email=OTHER_USER_EMAIL.upper()
    )
    slug = share["public_slug"]

    assert share["shared_with_id"] == str(OTHER_USER_ID)
    assert (await client.get(f"/sharing/{slug}", headers=other_headers)).status_code == 200
    assert (await client.get(f"/sharing/{slug}")).status_code == 403
    assert (await client.get(f"/sharing/{slug}", headers=auth(uuid.uuid4()))).status_code == 403
    assert (await client.post(f"/sharing/{slug}/copy", headers=dev_headers)).status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_share_with_unknown_email_is_not_found(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)

    response = await client.post(
        f"/sharing/trips/{trip_id}/share",
        json={"shared_with_email": "nobody@example.com"},
        headers=dev_headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_share_with_malformed_email_is_rejected(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)

    response = await client.post(
        f"/sharing/trips/{trip_id}/share",
        json={"shared_with_email": "not-an-email"},
        headers=dev_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_expired_share_is_gone(
    client: AsyncClient,
    session: AsyncSession,
    dev_headers: dict[str, str],
    other_headers: dict[str, str],
    catalog: Catalog,
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)
    session.add(
        SharedTrip(
            trip_id=uuid.UUID(trip_id),
            shared_by_id=DEV_USER_ID,
            public_slug="expired-link",
            permission=SharePermission.CAN_COPY,
            expires_at=datetime.now(timezone.utc) - timedelta(days=1),
        )
    )
    await session.commit()

    assert (await client.get("/sharing/expired-link")).status_code == 410
    copy = await client.post("/sharing/expired-link/copy", headers=other_headers)
    assert copy.status_code == 410


@pytest.mark.asyncio
@pytest.mark.integration
async def test_share_with_expiry_is_viewable_until_then(
    client: AsyncClient, dev_headers: dict[str, str], catalog: Catalog
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)

    share = await _share(client, dev_headers, trip_id, expires_in_days=7)

    assert share["expires_at"] is not None
    assert (await client.get(f"/sharing/{share['public_slug']}")).status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_slug_is_not_found(client: AsyncClient) -> None:
    response = await client.get("/sharing/does-not-exist")

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_and_revoke_shares(
    client: AsyncClient,
    dev_headers: dict[str, str],
    other_headers: dict[str, str],
    catalog: Catalog,
) -> None:
    trip_id = await _trip(client, dev_headers, catalog)
    first = await _share(client, dev_headers, trip_id)
    second = await _share(client, dev_headers, trip_id, permission="CAN_COPY")

    listed = await client.get(f"/sharing/trips/{trip_id}/shares", headers=dev_headers)
    assert listed.status_code == 200
    assert {s["share_id"] for s in listed.json()} == {first["share_id"], second["share_id"]}

    foreign = await client.get(f"/sharing/trips/{trip_id}/shares", headers=other_headers)
    assert foreign.status_code == 404

    response = await client.delete(
        f"/sharing/trips/{trip_id}/share/{first['share_id']}", headers=dev_headers
    )
    assert response.status_code == 204
    assert (await client.get(f"/sharing/{first['public_slug']}")).status_code == 404

    response = await client.delete(
        f"/sharing/trips/{trip_id}/share/{first['share_id']}", headers=dev_headers
    )
    assert response.status_code == 404
