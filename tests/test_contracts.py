from datetime import datetime, timedelta

import pytest

from gigplanner.domain.contracts.rendering import fill_placeholders
from gigplanner.models import Contract, PlannerAssignment


@pytest.fixture
def booked_planner(make_planner, make_venue, make_musician, make_slot, make_assignment):
    """Finalized planner with one musician on one slot (fee 240)"""
    planner = make_planner(status="finalized")
    slot = make_slot(planner, make_venue(name="The Jazz Cellar"))
    musician = make_musician()
    assignment = make_assignment(slot, musician, actual_fee=240.0, fee_overridden=True)
    return planner, musician, assignment


def _generate(client, planner_id, **payload):
    return client.post(f"/api/planner-contracts/{planner_id}", json=payload)


def _token_for(db, contract_id):
    db.expire_all()
    return db.get(Contract, contract_id).token


def test_generate_requires_finalized_planner(client, make_planner) -> None:
    planner = make_planner()
    assert _generate(client, planner.id).status_code == 400


def test_generate_creates_one_draft_per_musician(client, booked_planner) -> None:
    planner, musician, _ = booked_planner

    result = _generate(client, planner.id).json()

    assert result["created"] == 1
    assert result["skipped"] == 0
    contract = client.get(f"/api/monthly-contracts/{result['details'][0]['contractId']}").json()
    assert contract["status"] == "draft"
    assert contract["amount"] == 240.0
    assert contract["musicianId"] == musician.id
    assert [line["venueName"] for line in contract["lines"]] == ["The Jazz Cellar"]


def test_generate_skips_musicians_with_open_contracts(client, booked_planner) -> None:
    planner, _, _ = booked_planner
    _generate(client, planner.id)

    result = _generate(client, planner.id).json()

    assert result["created"] == 0
    assert result["skipped"] == 1


def test_generate_and_send_emails_the_link(client, sent_emails, booked_planner, db) -> None:
    planner, _, assignment = booked_planner

    result = _generate(client, planner.id, send=True, message="See you there").json()

    assert result["sent"] == 1
    assert result["details"][0]["emailSent"] is True
    kind, email = sent_emails[0]
    assert kind == "contract"
    assert email["to"] == "ella@example.com"
    assert email["message"] == "See you there"
    assert "/contracts/respond/" in email["signing_url"]
    db.expire_all()
    assert db.get(PlannerAssignment, assignment.id).status == "contract-sent"


def test_send_without_email_configured_still_sends(client, booked_planner) -> None:
    planner, _, _ = booked_planner
    contract_id = _generate(client, planner.id).json()["details"][0]["contractId"]

    response = client.post(f"/api/monthly-contracts/{contract_id}/send")

    assert response.status_code == 200
    assert response.json()["emailSent"] is False
    assert response.json()["contract"]["status"] == "sent"
    assert response.json()["signingUrl"].startswith("http")


def test_resend_invalidates_previous_token(client, db, booked_planner) -> None:
    planner, _, _ = booked_planner
    contract_id = _generate(client, planner.id, send=True).json()["details"][0]["contractId"]
    old_token = _token_for(db, contract_id)

    client.post(f"/api/monthly-contracts/{contract_id}/send")

    assert client.get(f"/api/contracts/token/{old_token}").status_code == 404
    assert client.get(f"/api/contracts/token/{_token_for(db, contract_id)}").status_code == 200


def test_public_view_shows_content(anon_client, client, db, booked_planner) -> None:
    planner, _, _ = booked_planner
    contract_id = _generate(client, planner.id, send=True).json()["details"][0]["contractId"]

    body = anon_client.get(f"/api/contracts/token/{_token_for(db, contract_id)}").json()

    assert body["canRespond"] is True
    assert body["musician"]["name"] == "Ella Thompson"
    assert "Monthly Musician Agreement" in body["content"]


def test_unknown_token(anon_client, db) -> None:
    assert anon_client.get("/api/contracts/token/not-a-token").status_code == 404


def test_accept_requires_signature(anon_client, client, db, booked_planner) -> None:
    planner, _, _ = booked_planner
    contract_id = _generate(client, planner.id, send=True).json()["details"][0]["contractId"]
    token = _token_for(db, contract_id)

    response = anon_client.post(
        f"/api/contracts/token/{token}/respond", json={"status": "accepted", "signature": "  "}
    )
    assert response.status_code == 400


def test_accept_signs_contract_once(anon_client, client, db, booked_planner) -> None:
    planner, _, assignment = booked_planner
    contract_id = _generate(client, planner.id, send=True).json()["details"][0]["contractId"]
    token = _token_for(db, contract_id)

    response = anon_client.post(f"/api/contracts/token/{token}/accept", json={"signature": "E.T."})

    assert response.status_code == 200
    assert response.json()["status"] == "signed"
    contract = client.get(f"/api/monthly-contracts/{contract_id}").json()
    assert contract["musicianSignature"] == "E.T."
    assert contract["companySignature"]
    db.expire_all()
    assert db.get(PlannerAssignment, assignment.id).status == "contract-signed"

    again = anon_client.post(f"/api/contracts/token/{token}/accept", json={"signature": "E.T."})
    assert again.status_code == 409


def test_reject_with_notes(anon_client, client, db, booked_planner) -> None:
    planner, _, assignment = booked_planner
    contract_id = _generate(client, planner.id, send=True).json()["details"][0]["contractId"]
    token = _token_for(db, contract_id)

    response = anon_client.post(
        f"/api/contracts/token/{token}/respond",
        json={"status": "rejected", "response": "Away that week"},
    )

    assert response.json()["status"] == "rejected"
    db.expire_all()
    assert db.get(PlannerAssignment, assignment.id).status == "contract-rejected"
    assert db.get(Contract, contract_id).response_notes == "Away that week"


def test_expired_token(anon_client, client, db, booked_planner) -> None:
    planner, _, _ = booked_planner
    contract_id = _generate(client, planner.id, send=True).json()["details"][0]["contractId"]
    token = _token_for(db, contract_id)
    contract = db.get(Contract, contract_id)
    contract.token_expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    assert anon_client.get(f"/api/contracts/token/{token}").status_code == 410
    response = anon_client.post(f"/api/contracts/token/{token}/accept", json={"signature": "E.T."})
    assert response.status_code == 410


def test_cancel_releases_assignments(client, db, booked_planner) -> None:
    planner, _, assignment = booked_planner
    contract_id = _generate(client, planner.id, send=True).json()["details"][0]["contractId"]

    response = client.post(f"/api/monthly-contracts/{contract_id}/cancel")

    assert response.json()["status"] == "cancelled"
    db.expire_all()
    assert db.get(PlannerAssignment, assignment.id).status == "scheduled"
    assert _generate(client, planner.id).json()["created"] == 1


def test_only_signed_contracts_complete(client, booked_planner) -> None:
    planner, _, _ = booked_planner
    contract_id = _generate(client, planner.id).json()["details"][0]["contractId"]

    assert client.post(f"/api/monthly-contracts/{contract_id}/complete").status_code == 400


def test_content_and_pdf(client, booked_planner) -> None:
    planner, _, _ = booked_planner
    contract_id = _generate(client, planner.id).json()["details"][0]["contractId"]

    content = client.get(f"/api/monthly-contracts/{contract_id}/content").json()["content"]
    assert "The Jazz Cellar" in content
    assert "240.00" in content

    pdf = client.get(f"/api/monthly-contracts/{contract_id}/pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")


def test_list_contracts_filters_by_status(client, booked_planner) -> None:
    planner, _, _ = booked_planner
    _generate(client, planner.id)

    assert len(client.get("/api/monthly-contracts?status=draft").json()) == 1
    assert client.get("/api/monthly-contracts?status=signed").json() == []


def test_unknown_placeholders_are_left_as_written() -> None:
    filled = fill_placeholders("{{ company }} and {{nope}}", {"company": "Rhythm & Brews"})
    assert filled == "Rhythm &amp; Brews and {{nope}}"
