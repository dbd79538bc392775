import pytest

from gigplanner.models import Contract


def _create(client, **payload):
    body = {"name": "Standard", "content": "Between {{company}} and {{musician_name}}."}
    body.update(payload)
    return client.post("/api/contract-templates", json=body)


def test_create_and_list_templates(client) -> None:
    response = _create(client, description="House terms")

    assert response.status_code == 201
    created = response.json()
    assert created["isDefault"] is False
    assert created["createdBy"] is not None
    assert [t["name"] for t in client.get("/api/contract-templates").json()] == ["Standard"]


def test_no_default_template_yet(client) -> None:
    assert client.get("/api/contract-templates/default").status_code == 404


def test_set_default_moves_the_flag(client) -> None:
    first = _create(client, name="First", isDefault=True).json()
    second = _create(client, name="Second").json()

    response = client.post(f"/api/contract-templates/{second['id']}/set-default")

    assert response.json() == {"success": True}
    assert client.get("/api/contract-templates/default").json()["id"] == second["id"]
    assert client.get(f"/api/contract-templates/{first['id']}").json()["isDefault"] is False


def test_default_template_cannot_be_deleted(client) -> None:
    template = _create(client, isDefault=True).json()

    assert client.delete(f"/api/contract-templates/{template['id']}").status_code == 409


def test_update_and_delete(client) -> None:
    template = _create(client).json()

    updated = client.put(
        f"/api/contract-templates/{template['id']}", json={"content": "New <b>terms</b>"}
    ).json()

    assert updated["content"] == "New &lt;b&gt;terms&lt;/b&gt;"
    assert client.delete(f"/api/contract-templates/{template['id']}").status_code == 200
    assert client.get(f"/api/contract-templates/{template['id']}").status_code == 404


def test_templates_require_auth(anon_client) -> None:
    assert anon_client.get("/api/contract-templates").status_code == 401


@pytest.fixture
def booked_planner(make_planner, make_venue, make_musician, make_slot, make_assignment):
    planner = make_planner(status="finalized")
    musician = make_musician(name="Ella & Co")
    slot = make_slot(planner, make_venue())
    make_assignment(slot, musician, actual_fee=240.0, fee_overridden=True)
    return planner


def _contract(client, planner_id, **payload):
    result = client.post(f"/api/planner-contracts/{planner_id}", json=payload).json()
    return client.get(f"/api/monthly-contracts/{result['details'][0]['contractId']}").json()


def test_default_template_fills_new_contracts(client, booked_planner) -> None:
    template = _create(
        client, content="{{musician_name}} plays {{period}} for {{total}}.", isDefault=True
    ).json()

    contract = _contract(client, booked_planner.id)

    assert contract["templateId"] == template["id"]
    content = client.get(f"/api/monthly-contracts/{contract['id']}/content").json()["content"]
    assert "Ella &amp; Co plays" in content
    assert "$240.00." in content
    assert "{{" not in content


def test_explicit_template_and_terms(client, booked_planner) -> None:
    _create(client, name="Default", content="Default terms", isDefault=True)
    chosen = _create(client, name="Festival", content="Festival terms").json()

    contract = _contract(client, booked_planner.id, templateId=chosen["id"])
    assert contract["terms"] == "Festival terms"

    client.post(f"/api/monthly-contracts/{contract['id']}/cancel")
    contract = _contract(client, booked_planner.id, terms="Handshake deal")
    assert contract["terms"] == "Handshake deal"
    assert contract["templateId"] is None


def test_unknown_template_is_404(client, booked_planner) -> None:
    response = client.post(
        f"/api/planner-contracts/{booked_planner.id}", json={"templateId": 9999}
    )
    assert response.status_code == 404


def test_deleting_template_keeps_contract_terms(client, db, booked_planner) -> None:
    template = _create(client, content="Keep me").json()
    contract = _contract(client, booked_planner.id, templateId=template["id"])

    client.delete(f"/api/contract-templates/{template['id']}")

    db.expire_all()
    stored = db.get(Contract, contract["id"])
    assert stored.template_id is None
    assert stored.terms == "Keep me"
