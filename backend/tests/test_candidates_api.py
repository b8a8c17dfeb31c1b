"""
Integration tests for candidates.

The agreed / paid / due figures must agree across the candidate list, the
detail view, the financials endpoint and every report.
"""

import pytest
from backend.app.models.enums import UserRole
from backend.tests.factories import create_user, bearer

# Note: Client and DB setup are in conftest.py


async def enroll(client, headers, name, agreed_amount, **fields):
    response = await client.post("/v1/candidates", json={
        "name": name,
        "batch_id": "JAVA-24",
        "agreed_amount": agreed_amount,
        **fields
    }, headers=headers)
    assert response.status_code == 201
    return response.json()


async def record(client, headers, type, amount, source, source_kind, destination, destination_kind):
    response = await client.post("/v1/transactions", json={
        "date": "2024-02-01",
        "type": type,
        "amount": amount,
        "from_entity_id": source,
        "from_entity_type": source_kind,
        "to_entity_id": destination,
        "to_entity_type": destination_kind
    }, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
async def office(client, admin_headers, cash_account):
    """Three candidates: one part-paid, one overpaid, one discontinued."""
    asha = await enroll(client, admin_headers, "Asha", 50000)
    bala = await enroll(client, admin_headers, "Bala", 10000)
    chitra = await enroll(client, admin_headers, "Chitra", 30000)

    cash = cash_account.id
    await record(client, admin_headers, "Income", 20000, asha["id"], "Candidate", cash, "Account")
    await record(client, admin_headers, "Income", 10000, asha["id"], "Candidate", cash, "Account")
    await record(client, admin_headers, "Refund", 5000, cash, "Account", asha["id"], "Candidate")
    await record(client, admin_headers, "Income", 12000, bala["id"], "Candidate", cash, "Account")

    response = await client.put(
        f"/v1/candidates/{chitra['id']}", json={"status": "Discontinued"}, headers=admin_headers
    )
    assert response.status_code == 200
    response = await client.post(f"/v1/candidates/{chitra['id']}/deactivate", headers=admin_headers)
    assert response.status_code == 200

    return {"asha": asha["id"], "bala": bala["id"], "chitra": chitra["id"]}


# TEST 1: Enrolment
@pytest.mark.asyncio
async def test_enroll_defaults(client, staff_headers):
    data = await enroll(client, staff_headers, "Asha", 45000)

    assert data["status"] == "Training"
    assert data["is_active"] == True
    assert data["joined_date"]
    assert data["financials"]["paid"] == 0
    assert data["financials"]["due"] == 45000
    assert data["financials"]["is_cleared"] == False


@pytest.mark.asyncio
async def test_enroll_rejects_negative_agreed_amount(client, staff_headers):
    response = await client.post("/v1/candidates", json={
        "name": "Asha", "batch_id": "B1", "agreed_amount": -1
    }, headers=staff_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["name", "batch_id", "agreed_amount", "status"])
async def test_update_rejects_null_for_required_fields(client, staff_headers, field):
    candidate = await enroll(client, staff_headers, "Asha", 45000)

    response = await client.put(f"/v1/candidates/{candidate['id']}", json={field: None}, headers=staff_headers)
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"

    response = await client.get(f"/v1/candidates/{candidate['id']}", headers=staff_headers)
    assert response.json()["agreed_amount"] == 45000
    assert response.json()["status"] == "Training"


@pytest.mark.asyncio
async def test_update_clears_optional_contact(client, staff_headers):
    candidate = await enroll(client, staff_headers, "Asha", 45000, email="asha@example.com")

    response = await client.put(f"/v1/candidates/{candidate['id']}", json={"email": None}, headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["email"] is None


@pytest.mark.asyncio
async def test_work_support_and_resume(client, staff_headers):
    data = await enroll(
        client, staff_headers, "Asha", 45000,
        resume="JVBERi0xLjQK", resume_name="asha.pdf", agreement_text="Fee payable after placement."
    )
    assert data["work_support_status"] == "None"
    assert data["resume_name"] == "asha.pdf"
    assert data["agreement_text"] == "Fee payable after placement."
    assert "resume" not in data

    response = await client.put(f"/v1/candidates/{data['id']}", json={
        "work_support_status": "Active",
        "work_support_start_date": "2024-06-01",
        "work_support_monthly_amount": 5000
    }, headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["work_support_status"] == "Active"
    assert response.json()["work_support_monthly_amount"] == 5000
    # Work support is billed separately from the agreed fee
    assert response.json()["financials"]["due"] == 45000

    response = await client.put(
        f"/v1/candidates/{data['id']}", json={"work_support_status": "Paused"}, headers=staff_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_search_and_filters(client, staff_headers):
    await enroll(client, staff_headers, "Asha Rao", 1000, phone="98450 11111")
    await enroll(client, staff_headers, "Bala Krishnan", 1000, status="Placed")

    response = await client.get("/v1/candidates", params={"search": "rao"}, headers=staff_headers)
    assert [c["name"] for c in response.json()["candidates"]] == ["Asha Rao"]

    response = await client.get("/v1/candidates", params={"search": "11111"}, headers=staff_headers)
    assert response.json()["total"] == 1

    response = await client.get("/v1/candidates", params={"status": "Placed"}, headers=staff_headers)
    assert [c["name"] for c in response.json()["candidates"]] == ["Bala Krishnan"]


# TEST 2: One figure everywhere
@pytest.mark.asyncio
async def test_figures_agree_across_views(client, admin_headers, office):
    listing = {c["id"]: c["financials"] for c in (await client.get("/v1/candidates", headers=admin_headers)).json()["candidates"]}

    for candidate_id in office.values():
        detail = (await client.get(f"/v1/candidates/{candidate_id}", headers=admin_headers)).json()
        financials = (await client.get(f"/v1/candidates/{candidate_id}/financials", headers=admin_headers)).json()
        assert detail["financials"] == financials == listing[candidate_id]

    asha = listing[office["asha"]]
    assert asha["paid"] == 25000
    assert asha["due"] == 25000
    assert asha["display_due"] == 25000

    bala = listing[office["bala"]]
    assert bala["due"] == -2000
    assert bala["display_due"] is None
    assert bala["is_cleared"] == True


@pytest.mark.asyncio
async def test_receivables_agree_across_reports(client, admin_headers, office):
    dashboard = (await client.get("/v1/reports/dashboard", headers=admin_headers)).json()
    sheet = (await client.get("/v1/reports/balance-sheet", headers=admin_headers)).json()
    receivables = (await client.get("/v1/reports/receivables", headers=admin_headers)).json()

    # Overpayment reduces the total; the discontinued candidate is excluded
    assert dashboard["pending_receivables"] == 23000
    assert sheet["candidate_receivables"] == 23000
    assert receivables["total_candidate_receivables"] == 23000

    ids = {row["candidate_id"] for row in receivables["candidates"]}
    assert ids == {office["asha"], office["bala"]}

    rows = {row["candidate_id"]: row for row in receivables["candidates"]}
    assert rows[office["asha"]]["due"] == 25000


@pytest.mark.asyncio
async def test_candidate_balance_matches_net_paid(client, admin_headers, office):
    response = await client.get(f"/v1/reports/balance/Candidate/{office['asha']}", headers=admin_headers)
    # Candidates pay out (negative) and receive refunds (positive)
    assert response.json()["balance"] == -25000


@pytest.mark.asyncio
async def test_candidate_statement(client, admin_headers, office):
    response = await client.get(f"/v1/candidates/{office['asha']}/statement", headers=admin_headers)
    statement = response.json()

    assert statement["opening_balance"] == 0
    assert statement["closing_balance"] == -25000
    assert len(statement["lines"]) == 3


# TEST 3: Soft delete
@pytest.mark.asyncio
async def test_candidate_with_history_cannot_be_deleted(client, admin_headers, office):
    response = await client.delete(f"/v1/candidates/{office['asha']}", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_LEDGER_001"


@pytest.mark.asyncio
async def test_candidate_without_history_deleted(client, admin_headers):
    data = await enroll(client, admin_headers, "Dev", 1000)

    response = await client.delete(f"/v1/candidates/{data['id']}", headers=admin_headers)
    assert response.status_code == 204

    response = await client.get(f"/v1/candidates/{data['id']}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_deactivate_twice(client, admin_headers, office):
    response = await client.post(f"/v1/candidates/{office['chitra']}/deactivate", headers=admin_headers)
    assert response.status_code == 400

    response = await client.post(f"/v1/candidates/{office['chitra']}/activate", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] == True


@pytest.mark.asyncio
async def test_reactivated_discontinued_candidate_counts_again(client, admin_headers, office):
    await client.post(f"/v1/candidates/{office['chitra']}/activate", headers=admin_headers)

    response = await client.get("/v1/reports/receivables", headers=admin_headers)
    assert response.json()["total_candidate_receivables"] == 53000


# TEST 4: Agreement markers
@pytest.mark.asyncio
async def test_agreement_markers(client, staff_headers):
    data = await enroll(client, staff_headers, "Asha", 1000)

    response = await client.post(
        f"/v1/candidates/{data['id']}/agreement/sent", json={"date": "2024-01-02T10:00:00Z"},
        headers=staff_headers
    )
    assert response.status_code == 200
    assert response.json()["agreement_sent_date"] == "2024-01-02T10:00:00Z"

    response = await client.post(f"/v1/candidates/{data['id']}/agreement/accepted", headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["agreement_accepted_date"]


# TEST 5: Candidate portal users
@pytest.fixture
async def portal(client, admin_headers, db_session):
    asha = await enroll(client, admin_headers, "Asha", 1000)
    bala = await enroll(client, admin_headers, "Bala", 1000)
    user = await create_user(
        db_session, "asha", UserRole.CANDIDATE, [], "Asha", linked_candidate_id=asha["id"]
    )
    return asha["id"], bala["id"], bearer(user)


@pytest.mark.asyncio
async def test_candidate_reads_own_record_only(client, portal):
    own_id, other_id, headers = portal

    response = await client.get(f"/v1/candidates/{own_id}", headers=headers)
    assert response.status_code == 200

    response = await client.get(f"/v1/candidates/{own_id}/financials", headers=headers)
    assert response.status_code == 200

    response = await client.get(f"/v1/candidates/{other_id}", headers=headers)
    assert response.status_code == 403

    response = await client.get("/v1/candidates", headers=headers)
    assert response.status_code == 403

    response = await client.get("/v1/reports/dashboard", headers=headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_candidate_accepts_own_agreement(client, portal):
    own_id, other_id, headers = portal

    response = await client.post(f"/v1/candidates/{own_id}/agreement/accepted", headers=headers)
    assert response.status_code == 200

    response = await client.post(f"/v1/candidates/{other_id}/agreement/accepted", headers=headers)
    assert response.status_code == 403

    response = await client.post(f"/v1/candidates/{own_id}/agreement/sent", headers=headers)
    assert response.status_code == 403
