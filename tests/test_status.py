from datetime import date

from gigplanner.models import Contract
from gigplanner.services.status_automation import update_contract_statuses
from gigplanner.status import (
    validate_assignment_transition,
    validate_contract_transition,
    validate_invoice_transition,
)


def test_assignment_transitions() -> None:
    assert validate_assignment_transition("scheduled", "contract-sent")
    assert validate_assignment_transition("contract-sent", "contract-signed")
    assert validate_assignment_transition("contract-signed", "attended")
    assert validate_assignment_transition("attended", "absent")
    assert not validate_assignment_transition("scheduled", "contract-signed")


def test_contract_terminal_states() -> None:
    assert validate_contract_transition("sent", "sent")
    assert validate_contract_transition("signed", "completed")
    for status in ("rejected", "cancelled", "completed"):
        assert not validate_contract_transition(status, "sent")


def test_invoice_transitions() -> None:
    assert validate_invoice_transition("draft", "finalized")
    assert not validate_invoice_transition("draft", "paid")


def _contract(db, planner, musician, status):
    contract = Contract(planner_id=planner.id, musician_id=musician.id, status=status, amount=0)
    db.add(contract)
    db.commit()
    return contract


def test_signed_contracts_complete_after_month_ends(db, make_planner, make_musician) -> None:
    musician = make_musician()
    past = make_planner(month=1, year=2025)
    current = make_planner(month=date.today().month, year=date.today().year)
    done = _contract(db, past, musician, "signed")
    running = _contract(db, current, musician, "signed")
    draft = _contract(db, past, musician, "draft")

    summary = update_contract_statuses(db)

    assert summary == {"signed_to_completed": 1, "total_updated": 1}
    assert db.get(Contract, done.id).status == "completed"
    assert db.get(Contract, running.id).status == "signed"
    assert db.get(Contract, draft.id).status == "draft"


def test_automation_endpoint(client, db, make_planner, make_musician) -> None:
    _contract(db, make_planner(month=1, year=2025), make_musician(), "signed")

    response = client.post("/api/status/automation/run")

    assert response.json() == {"signed_to_completed": 1, "total_updated": 1}


def test_status_analytics_counts(
    client, db, make_planner, make_venue, make_musician, make_slot, make_assignment
) -> None:
    planner = make_planner()
    musician = make_musician()
    make_assignment(make_slot(planner, make_venue()), musician, status="attended")
    _contract(db, planner, musician, "sent")

    body = client.get("/api/status/analytics").json()

    assert body["contracts"]["sent"] == 1
    assert body["contracts"]["draft"] == 0
    assert body["assignments"]["attended"] == 1
    assert body["invoices"] == {"draft": 0, "finalized": 0, "paid": 0}


def test_partially_signed_contracts_complete_too(db, make_planner, make_musician) -> None:
    contract = _contract(db, make_planner(month=1, year=2025), make_musician(), "partially-signed")

    summary = update_contract_statuses(db)

    assert summary["signed_to_completed"] == 1
    assert db.get(Contract, contract.id).status == "completed"


def _history(client, entity_type, entity_id, **params):
    return client.get(
        "/api/status/history",
        params={"entityType": entity_type, "entityId": entity_id, **params},
    )


def test_planner_history_records_who_changed_it(client, make_planner) -> None:
    planner = make_planner()
    client.post(f"/api/planners/{planner.id}/finalize")
    client.post(f"/api/planners/{planner.id}/reopen")

    entries = _history(client, "planner", planner.id).json()

    assert [(e["fromStatus"], e["toStatus"]) for e in entries] == [
        ("finalized", "draft"),
        ("draft", "finalized"),
    ]
    assert {e["changedBy"] for e in entries} == {"admin:admin"}
    assert len(_history(client, "planner", planner.id, limit=1).json()) == 1


def test_automation_is_recorded_as_system(client, db, make_planner, make_musician) -> None:
    contract = _contract(db, make_planner(month=1, year=2025), make_musician(), "signed")
    update_contract_statuses(db)

    [entry] = _history(client, "contract", contract.id).json()

    assert entry["toStatus"] == "completed"
    assert entry["changedBy"] == "system"


def test_history_rejects_unknown_entity(client) -> None:
    assert _history(client, "venue", 1).status_code == 400
    assert client.get("/api/status/history?entityType=planner").status_code == 422


def test_history_requires_auth(anon_client) -> None:
    assert _history(anon_client, "planner", 1).status_code == 401
