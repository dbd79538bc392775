from datetime import date

import pytest

from gigplanner.models import Contract, PlannerAssignment


@pytest.fixture
def three_gig_contract(
    client, db, make_planner, make_venue, make_musician, make_slot, make_assignment
):
    """Sent contract covering three dates for one musician; returns (contract_id, token, lines)"""
    planner = make_planner(status="finalized")
    venue = make_venue()
    musician = make_musician()
    for day, fee in ((3, 100.0), (10, 150.0), (17, 200.0)):
        make_assignment(
            make_slot(planner, venue, day=date(planner.year, planner.month, day)),
            musician,
            actual_fee=fee,
            fee_overridden=True,
        )
    result = client.post(f"/api/planner-contracts/{planner.id}", json={"send": True}).json()
    contract_id = result["details"][0]["contractId"]
    db.expire_all()
    contract = db.get(Contract, contract_id)
    return contract_id, contract.token, [line.id for line in contract.lines]


def _answer(anon_client, token, line_id, **payload):
    return anon_client.post(f"/api/contracts/token/{token}/dates/{line_id}", json=payload)


def _assignment_statuses(db, contract_id):
    db.expire_all()
    contract = db.get(Contract, contract_id)
    return [db.get(PlannerAssignment, line.assignment_id).status for line in contract.lines]


def test_answering_one_date_keeps_contract_open(anon_client, db, three_gig_contract) -> None:
    contract_id, token, line_ids = three_gig_contract

    response = _answer(anon_client, token, line_ids[0], status="accepted", signature="E.T.")

    assert response.status_code == 200
    body = response.json()
    assert body["line"]["status"] == "accepted"
    assert body["contractStatus"] == "sent"
    assert body["summary"]["pendingDates"] == 2
    assert _assignment_statuses(db, contract_id) == [
        "contract-signed",
        "contract-sent",
        "contract-sent",
    ]


def test_mixed_answers_partially_sign(
    anon_client, client, db, sent_emails, three_gig_contract
) -> None:
    contract_id, token, line_ids = three_gig_contract
    sent_emails.clear()

    _answer(anon_client, token, line_ids[0], status="accepted", signature="E.T.")
    _answer(anon_client, token, line_ids[1], status="rejected", responseNotes="Away")
    last = _answer(anon_client, token, line_ids[2], status="accepted")

    assert last.json()["contractStatus"] == "partially-signed"
    summary = client.get(f"/api/monthly-contracts/{contract_id}/summary").json()
    assert summary == {
        "contractId": contract_id,
        "status": "partially-signed",
        "totalDates": 3,
        "acceptedDates": 2,
        "rejectedDates": 1,
        "pendingDates": 0,
    }
    assert _assignment_statuses(db, contract_id) == [
        "contract-signed",
        "contract-rejected",
        "contract-signed",
    ]
    [(kind, notification)] = sent_emails
    assert kind == "response"
    assert notification["verdict"] == "partially-signed"


def test_rejecting_every_date_rejects_contract(anon_client, three_gig_contract) -> None:
    _, token, line_ids = three_gig_contract

    for line_id in line_ids:
        last = _answer(anon_client, token, line_id, status="rejected")

    assert last.json()["contractStatus"] == "rejected"


def test_accepting_a_date_needs_a_signature(anon_client, three_gig_contract) -> None:
    _, token, line_ids = three_gig_contract

    assert _answer(anon_client, token, line_ids[0], status="accepted").status_code == 400
    assert _answer(anon_client, token, line_ids[0], status="rejected").status_code == 200


def test_a_date_can_only_be_answered_once(anon_client, three_gig_contract) -> None:
    _, token, line_ids = three_gig_contract
    _answer(anon_client, token, line_ids[0], status="rejected")

    again = _answer(anon_client, token, line_ids[0], status="accepted", signature="E.T.")

    assert again.status_code == 409


def test_unknown_date_and_token(anon_client, three_gig_contract) -> None:
    _, token, _ = three_gig_contract

    assert _answer(anon_client, token, 9999, status="rejected").status_code == 404
    assert _answer(anon_client, "nope", 1, status="rejected").status_code == 404


def test_batch_reports_each_date(anon_client, db, three_gig_contract) -> None:
    contract_id, token, line_ids = three_gig_contract
    _answer(anon_client, token, line_ids[0], status="rejected")

    response = anon_client.post(
        f"/api/contracts/token/{token}/batch",
        json={
            "signature": "Ella Thompson",
            "responses": [
                {"lineId": line_ids[0], "status": "accepted"},
                {"lineId": line_ids[1], "status": "accepted"},
                {"lineId": line_ids[2], "status": "accepted"},
                {"lineId": 9999, "status": "accepted"},
            ],
        },
    )

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is False
    assert [r["success"] for r in body["results"]] == [False, True, True, False]
    assert body["contractStatus"] == "partially-signed"
    assert body["summary"]["acceptedDates"] == 2
    db.expire_all()
    assert db.get(Contract, contract_id).musician_signature == "Ella Thompson"


def test_batch_accept_without_signature(anon_client, three_gig_contract) -> None:
    _, token, line_ids = three_gig_contract

    response = anon_client.post(
        f"/api/contracts/token/{token}/batch",
        json={"responses": [{"lineId": line_ids[0], "status": "accepted"}]},
    )

    assert response.status_code == 400


def test_whole_contract_answer_covers_remaining_dates(
    anon_client, client, three_gig_contract
) -> None:
    contract_id, token, line_ids = three_gig_contract
    _answer(anon_client, token, line_ids[0], status="rejected")

    response = anon_client.post(f"/api/contracts/token/{token}/accept", json={"signature": "E.T."})

    assert response.json()["status"] == "partially-signed"
    lines = client.get(f"/api/monthly-contracts/{contract_id}").json()["lines"]
    assert [line["status"] for line in lines] == ["rejected", "accepted", "accepted"]


def test_signature_is_stored_escaped(anon_client, client, three_gig_contract) -> None:
    contract_id, token, _ = three_gig_contract

    anon_client.post(
        f"/api/contracts/token/{token}/accept",
        json={"signature": '<img src=x onerror="alert(1)">'},
    )

    contract = client.get(f"/api/monthly-contracts/{contract_id}").json()
    assert contract["musicianSignature"].startswith("&lt;img")
    content = client.get(f"/api/monthly-contracts/{contract_id}/content").json()["content"]
    assert "<img" not in content
    assert client.get(f"/api/monthly-contracts/{contract_id}/pdf").status_code == 200


def test_resend_leaves_answered_dates_alone(anon_client, client, db, three_gig_contract) -> None:
    contract_id, token, line_ids = three_gig_contract
    _answer(anon_client, token, line_ids[0], status="rejected")

    client.post(f"/api/monthly-contracts/{contract_id}/send")

    assert _assignment_statuses(db, contract_id) == [
        "contract-rejected",
        "contract-sent",
        "contract-sent",
    ]


def test_contract_history_follows_the_answers(anon_client, client, three_gig_contract) -> None:
    contract_id, token, line_ids = three_gig_contract
    for line_id in line_ids:
        _answer(anon_client, token, line_id, status="rejected")

    entries = client.get(
        "/api/status/history", params={"entityType": "contract", "entityId": contract_id}
    ).json()

    assert [e["toStatus"] for e in entries] == ["rejected", "sent", "draft"]
    assert entries[0]["changedBy"].startswith("musician:")
    assert entries[1]["changedBy"] == "admin:admin"
