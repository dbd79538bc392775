from datetime import date, datetime, timedelta

from gigplanner.models import AvailabilityShareLink


def _share(client, musician_id, **payload):
    return client.post(f"/api/musicians/{musician_id}/availability-share", json=payload or None)


def test_admin_sets_availability_for_any_date(client, make_musician) -> None:
    musician = make_musician()

    response = client.post(
        f"/api/musicians/{musician.id}/availability",
        json={"dates": ["2025-03-01", "2025-03-02", "2025-03-01"], "isAvailable": True},
    )

    assert response.status_code == 200
    assert response.json()["updatedDates"] == 2

    calendar = client.get(f"/api/musicians/{musician.id}/availability?month=3&year=2025").json()
    assert [entry["date"] for entry in calendar["availability"]] == ["2025-03-01", "2025-03-02"]
    assert all(entry["isAvailable"] for entry in calendar["availability"])


def test_availability_update_overwrites_existing_day(client, make_musician) -> None:
    musician = make_musician()
    url = f"/api/musicians/{musician.id}/availability"
    client.post(url, json={"dates": ["2025-03-01"], "isAvailable": True})
    client.post(url, json={"dates": ["2025-03-01"], "isAvailable": False})

    calendar = client.get(f"{url}?month=3&year=2025").json()
    assert calendar["availability"] == [{"date": "2025-03-01", "isAvailable": False}]


def test_availability_for_unknown_musician(client) -> None:
    assert client.get("/api/musicians/999/availability").status_code == 404


def test_share_link_lifecycle(client, make_musician) -> None:
    musician = make_musician()

    created = _share(client, musician.id, expiryDays=7)
    assert created.status_code == 201
    assert created.json()["shareLink"].endswith(created.json()["token"])
    assert created.json()["isExpired"] is False

    links = client.get(f"/api/musicians/{musician.id}/availability-share").json()
    assert [link["id"] for link in links] == [created.json()["id"]]

    deleted = client.delete(f"/api/musicians/{musician.id}/availability-share/{links[0]['id']}")
    assert deleted.status_code == 200
    assert client.get(f"/api/musicians/{musician.id}/availability-share").json() == []


def test_cannot_delete_another_musicians_link(client, make_musician) -> None:
    owner = make_musician()
    other = make_musician(name="Jack Wilson")
    link_id = _share(client, owner.id).json()["id"]

    response = client.delete(f"/api/musicians/{other.id}/availability-share/{link_id}")
    assert response.status_code == 403


def test_public_calendar_shows_bookings(
    anon_client, client, make_musician, make_planner, make_venue, make_slot, make_assignment
) -> None:
    musician = make_musician()
    planner = make_planner()
    make_assignment(make_slot(planner, make_venue(name="Soundwave Lounge")), musician)
    token = _share(client, musician.id).json()["token"]

    response = anon_client.get(
        f"/api/public/availability/{token}?month={planner.month}&year={planner.year}"
    )

    assert response.status_code == 200
    body = response.json()
    assert body["musician"]["name"] == "Ella Thompson"
    assert [b["venueName"] for b in body["calendar"]["bookings"]] == ["Soundwave Lounge"]


def test_public_update_skips_past_dates(anon_client, client, make_musician) -> None:
    musician = make_musician()
    token = _share(client, musician.id).json()["token"]
    yesterday = date.today() - timedelta(days=1)
    tomorrow = date.today() + timedelta(days=1)

    response = anon_client.post(
        f"/api/public/availability/{token}",
        json={"dates": [yesterday.isoformat(), tomorrow.isoformat()], "isAvailable": True},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "updatedDates": 1, "musicianId": musician.id}


def test_expired_link_is_gone(anon_client, client, db, make_musician) -> None:
    musician = make_musician()
    link_id = _share(client, musician.id).json()["id"]
    link = db.get(AvailabilityShareLink, link_id)
    link.expires_at = datetime.utcnow() - timedelta(days=1)
    db.commit()

    assert anon_client.get(f"/api/public/availability/{link.token}").status_code == 410
    response = anon_client.post(
        f"/api/public/availability/{link.token}",
        json={"dates": [date.today().isoformat()], "isAvailable": True},
    )
    assert response.status_code == 410


def test_unknown_link(anon_client, db) -> None:
    assert anon_client.get("/api/public/availability/nope").status_code == 404


def test_public_access_is_stamped(anon_client, client, db, make_musician) -> None:
    musician = make_musician()
    link_id = _share(client, musician.id).json()["id"]
    token = db.get(AvailabilityShareLink, link_id).token

    anon_client.get(f"/api/public/availability/{token}")

    db.expire_all()
    assert db.get(AvailabilityShareLink, link_id).last_accessed_at is not None


def test_calendar_rejects_month_zero(client, make_musician) -> None:
    musician = make_musician()

    response = client.get(f"/api/musicians/{musician.id}/availability?month=0&year=2025")

    assert response.status_code == 400
