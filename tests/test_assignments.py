from datetime import date


def test_assign_by_planner_venue_and_date_creates_the_slot(
    client, make_planner, make_venue, make_musician
) -> None:
    planner = make_planner()
    venue = make_venue()
    musician = make_musician(pay_rate=80)

    response = client.post(
        "/api/planner-assignments",
        json={
            "musicianId": musician.id,
            "plannerId": planner.id,
            "venueId": venue.id,
            "date": date(planner.year, planner.month, 8).isoformat(),
            "startTime": "20:00",
            "endTime": "23:00",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["actualFee"] == 240.0
    assert body["feeOverridden"] is False
    assert body["status"] == "scheduled"

    slot = client.get(f"/api/planner-slots/{body['slotId']}").json()
    assert slot["status"] == "assigned"


def test_pay_rate_table_is_used_for_slot_event_category(
    client, make_planner, make_venue, make_musician, make_event_category, make_pay_rate, make_slot
) -> None:
    make_event_category()
    planner = make_planner()
    slot = make_slot(planner, make_venue(), duration=3)
    musician = make_musician(pay_rate=80)
    make_pay_rate(musician, event_category_id=7, hourly_rate=50)

    response = client.post(
        "/api/planner-assignments", json={"musicianId": musician.id, "slotId": slot.id}
    )
    assert response.json()["actualFee"] == 150.0

    fee = client.get(f"/api/planner-assignments/{response.json()['id']}/fee").json()
    assert fee["amount"] == 150.0


def test_same_musician_twice_in_a_slot_conflicts(
    client, make_planner, make_venue, make_musician, make_slot
) -> None:
    slot = make_slot(make_planner(), make_venue())
    musician = make_musician()
    payload = {"musicianId": musician.id, "slotId": slot.id}

    assert client.post("/api/planner-assignments", json=payload).status_code == 201
    assert client.post("/api/planner-assignments", json=payload).status_code == 409


def test_assignment_needs_a_slot_reference(client, make_musician) -> None:
    musician = make_musician()
    response = client.post("/api/planner-assignments", json={"musicianId": musician.id})
    assert response.status_code == 400


def test_manual_fee_override_and_reset(
    client, make_planner, make_venue, make_musician, make_slot
) -> None:
    slot = make_slot(make_planner(), make_venue(), start_time="20:00", end_time="22:00")
    musician = make_musician(pay_rate=80)
    created = client.post(
        "/api/planner-assignments",
        json={"musicianId": musician.id, "slotId": slot.id, "actualFee": 300},
    ).json()
    assert created["actualFee"] == 300.0
    assert created["feeOverridden"] is True

    reset = client.put(f"/api/planner-assignments/{created['id']}", json={"actualFee": 0}).json()
    assert reset["actualFee"] == 160.0
    assert reset["feeOverridden"] is False


def test_invalid_status_transition(client, make_planner, make_venue, make_musician, make_slot, make_assignment) -> None:
    assignment = make_assignment(make_slot(make_planner(), make_venue()), make_musician())

    response = client.put(
        f"/api/planner-assignments/{assignment.id}", json={"status": "contract-signed"}
    )
    assert response.status_code == 400


def test_deleting_last_assignment_reopens_slot(
    client, make_planner, make_venue, make_musician, make_slot, make_assignment
) -> None:
    slot = make_slot(make_planner(), make_venue())
    assignment = make_assignment(slot, make_musician())

    assert client.delete(f"/api/planner-assignments/{assignment.id}").status_code == 200
    assert client.get(f"/api/planner-slots/{slot.id}").json()["status"] == "open"


def test_mark_attendance_completes_slot(
    client, admin, make_planner, make_venue, make_musician, make_slot, make_assignment
) -> None:
    slot = make_slot(make_planner(), make_venue())
    first = make_assignment(slot, make_musician())
    second = make_assignment(slot, make_musician(name="Jack Wilson"))

    response = client.post(
        f"/api/planner-assignments/{first.id}/mark-attendance", json={"status": "attended"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "attended"
    assert response.json()["attendanceMarkedAt"] is not None
    assert client.get(f"/api/planner-slots/{slot.id}").json()["status"] == "assigned"

    client.post(f"/api/planner-assignments/{second.id}/mark-attendance", json={"status": "absent"})
    assert client.get(f"/api/planner-slots/{slot.id}").json()["status"] == "completed"


def test_attendance_cannot_be_marked_for_future_dates(
    client, future_period, make_planner, make_venue, make_musician, make_slot, make_assignment
) -> None:
    month, year = future_period
    slot = make_slot(make_planner(month=month, year=year), make_venue())
    assignment = make_assignment(slot, make_musician())

    response = client.post(
        f"/api/planner-assignments/{assignment.id}/mark-attendance", json={"status": "attended"}
    )
    assert response.status_code == 400


def test_attendance_status_must_be_attended_or_absent(
    client, make_planner, make_venue, make_musician, make_slot, make_assignment
) -> None:
    assignment = make_assignment(make_slot(make_planner(), make_venue()), make_musician())

    response = client.post(
        f"/api/planner-assignments/{assignment.id}/mark-attendance", json={"status": "late"}
    )
    assert response.status_code == 422


def test_assignments_grouped_by_musician(
    client, make_planner, make_venue, make_musician, make_slot, make_assignment
) -> None:
    planner = make_planner()
    venue = make_venue()
    ella = make_musician()
    jack = make_musician(name="Jack Wilson")
    for day, musician, fee in ((3, ella, 100.0), (4, ella, 120.0), (5, jack, 90.0)):
        slot = make_slot(planner, venue, day=date(planner.year, planner.month, day))
        make_assignment(slot, musician, fee, fee_overridden=True)

    body = client.get(f"/api/planner-assignments/by-musician/{planner.id}").json()

    assert [row["musicianName"] for row in body] == ["Ella Thompson", "Jack Wilson"]
    assert body[0]["slotCount"] == 2
    assert body[0]["totalFee"] == 220.0


def test_fee_breakdown_reports_the_rule_that_priced_it(
    client, make_planner, make_venue, make_musician, make_slot
) -> None:
    slot = make_slot(make_planner(), make_venue(), duration=3)
    musician = make_musician(pay_rate=80)
    created = client.post(
        "/api/planner-assignments", json={"musicianId": musician.id, "slotId": slot.id}
    ).json()

    fee = client.get(f"/api/planner-assignments/{created['id']}/fee").json()

    assert fee["amount"] == 240.0
    assert fee["rule"] == "musician_rate"
    assert fee["hours"] == 3.0
    assert fee["feeOverridden"] is False


def test_new_pay_rate_reprices_computed_fees_only(
    client, make_planner, make_venue, make_musician, make_slot, make_event_category
) -> None:
    make_event_category()
    slot = make_slot(make_planner(), make_venue(), duration=3)
    ella = make_musician(pay_rate=80)
    jack = make_musician(name="Jack Wilson", pay_rate=80)
    computed = client.post(
        "/api/planner-assignments", json={"musicianId": ella.id, "slotId": slot.id}
    ).json()
    fixed = client.post(
        "/api/planner-assignments",
        json={"musicianId": jack.id, "slotId": slot.id, "actualFee": 500},
    ).json()
    assert computed["actualFee"] == 240.0

    for musician in (ella, jack):
        client.post(
            "/api/musician-pay-rates",
            json={"musicianId": musician.id, "eventCategoryId": 7, "hourlyRate": 50},
        )

    fee = client.get(f"/api/planner-assignments/{computed['id']}/fee").json()
    assert fee["amount"] == 150.0
    assert fee["rule"] == "pay_rate_table"
    assert client.get(f"/api/planner-assignments/{computed['id']}").json()["actualFee"] == 150.0

    kept = client.get(f"/api/planner-assignments/{fixed['id']}/fee").json()
    assert kept["amount"] == 500.0
    assert kept["rule"] == "override"


def test_musician_rate_change_reprices_assignments(
    client, make_planner, make_venue, make_musician, make_slot
) -> None:
    slot = make_slot(make_planner(), make_venue(), duration=2)
    musician = make_musician(pay_rate=80)
    created = client.post(
        "/api/planner-assignments", json={"musicianId": musician.id, "slotId": slot.id}
    ).json()

    client.put(f"/api/musicians/{musician.id}", json={"payRate": 100})

    assert client.get(f"/api/planner-assignments/{created['id']}").json()["actualFee"] == 200.0


def test_slot_event_category_picks_its_own_pay_rate(
    client, make_planner, make_venue, make_musician, make_slot, make_event_category, make_pay_rate
) -> None:
    make_event_category(title="Corporate Event", category_id=3)
    make_event_category()
    musician = make_musician(pay_rate=80)
    make_pay_rate(musician, event_category_id=3, hourly_rate=70)
    make_pay_rate(musician, event_category_id=7, hourly_rate=50)
    corporate = make_slot(make_planner(), make_venue(), duration=3, event_category_id=3)

    created = client.post(
        "/api/planner-assignments", json={"musicianId": musician.id, "slotId": corporate.id}
    ).json()

    assert created["actualFee"] == 210.0
    fee = client.get(f"/api/planner-assignments/{created['id']}/fee").json()
    assert fee["rule"] == "pay_rate_table"
    assert fee["hourlyRate"] == 70.0
