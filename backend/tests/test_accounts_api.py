"""
Integration tests for ledger accounts: CRUD, derived balances, statements
and the deletion guards.
"""

import pytest

# Note: Client and DB setup are in conftest.py


async def create_account(client, headers, **fields):
    payload = {"name": "Account", "type": "Bank", **fields}
    response = await client.post("/v1/accounts", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


async def move(client, headers, amount, source, destination, type="Transfer", date="2024-01-15",
               source_kind="Account", destination_kind="Account"):
    response = await client.post("/v1/transactions", json={
        "date": date,
        "type": type,
        "amount": amount,
        "from_entity_id": source,
        "from_entity_type": source_kind,
        "to_entity_id": destination,
        "to_entity_type": destination_kind
    }, headers=headers)
    assert response.status_code == 201
    return response.json()


# TEST 1: CRUD
@pytest.mark.asyncio
async def test_create_account(client, staff_headers):
    data = await create_account(client, staff_headers, name="HDFC Current", opening_balance=2500)

    assert data["is_system"] == False
    assert data["balance"] == 2500
    assert "id" in data


@pytest.mark.asyncio
async def test_creditor_opening_balance_is_owed(client, staff_headers):
    data = await create_account(client, staff_headers, name="Laptop Vendor", type="Creditor", opening_balance=800)
    assert data["opening_balance"] == 800
    assert data["balance"] == -800


@pytest.mark.asyncio
async def test_list_accounts_with_type_filter(client, staff_headers, cash_account):
    await create_account(client, staff_headers, name="HDFC")
    await create_account(client, staff_headers, name="Rent", type="Expense")

    response = await client.get("/v1/accounts", headers=staff_headers)
    assert response.json()["total"] == 3

    response = await client.get("/v1/accounts", params={"type": "Expense"}, headers=staff_headers)
    names = [a["name"] for a in response.json()["accounts"]]
    assert names == ["Rent"]


@pytest.mark.asyncio
async def test_update_account(client, staff_headers):
    account = await create_account(client, staff_headers, name="Rent", type="Expense")

    response = await client.put(
        f"/v1/accounts/{account['id']}", json={"sub_type": "Office Rent", "recurring_amount": 12000},
        headers=staff_headers
    )
    assert response.status_code == 200
    assert response.json()["sub_type"] == "Office Rent"
    assert response.json()["name"] == "Rent"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["name", "type", "opening_balance"])
async def test_update_rejects_null_for_required_fields(client, staff_headers, field):
    account = await create_account(client, staff_headers, name="Rent", type="Expense")

    response = await client.put(f"/v1/accounts/{account['id']}", json={field: None}, headers=staff_headers)
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_rejects_malformed_recurring_date(client, staff_headers):
    response = await client.post("/v1/accounts", json={
        "name": "Salary - Ravi",
        "type": "Salary",
        "recurring_start_date": "first of May"
    }, headers=staff_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_account_404(client, staff_headers):
    response = await client.get("/v1/accounts/missing", headers=staff_headers)
    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_trainer_cannot_see_accounts(client, trainer_headers):
    response = await client.get("/v1/accounts", headers=trainer_headers)
    assert response.status_code == 403


# TEST 2: Deletion guards
@pytest.mark.asyncio
async def test_system_account_cannot_be_deleted(client, admin_headers, cash_account):
    response = await client.delete(f"/v1/accounts/{cash_account.id}", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_LEDGER_002"


@pytest.mark.asyncio
async def test_referenced_account_cannot_be_deleted(client, staff_headers, cash_account):
    bank = await create_account(client, staff_headers, name="HDFC", opening_balance=1000)
    await move(client, staff_headers, 300, bank["id"], cash_account.id)

    response = await client.delete(f"/v1/accounts/{bank['id']}", headers=staff_headers)
    assert response.status_code == 409
    body = response.json()
    assert body["error_code"] == "ERR_LEDGER_001"
    assert body["details"]["reference_count"] == 1

    response = await client.get(f"/v1/accounts/{bank['id']}", headers=staff_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_unreferenced_account_deleted(client, staff_headers):
    account = await create_account(client, staff_headers, name="Unused")

    response = await client.delete(f"/v1/accounts/{account['id']}", headers=staff_headers)
    assert response.status_code == 204

    response = await client.get(f"/v1/accounts/{account['id']}", headers=staff_headers)
    assert response.status_code == 404


# TEST 3: Balances and statements
@pytest.mark.asyncio
async def test_transfer_moves_balance(client, staff_headers, cash_account):
    bank = await create_account(client, staff_headers, name="HDFC", opening_balance=1000)
    await move(client, staff_headers, 400, bank["id"], cash_account.id)

    response = await client.get(f"/v1/accounts/{bank['id']}/balance", headers=staff_headers)
    assert response.json()["balance"] == 600

    response = await client.get(f"/v1/accounts/{cash_account.id}/balance", headers=staff_headers)
    assert response.json()["balance"] == 400


@pytest.mark.asyncio
async def test_statement_running_balance(client, staff_headers, cash_account):
    bank = await create_account(client, staff_headers, name="HDFC", opening_balance=1000)
    rent = await create_account(client, staff_headers, name="Rent", type="Expense")

    await move(client, staff_headers, 200, bank["id"], cash_account.id, date="2024-01-05")
    await move(client, staff_headers, 500, bank["id"], rent["id"], type="Expense", date="2024-02-01")
    await move(client, staff_headers, 50, cash_account.id, bank["id"], date="2024-01-20")

    response = await client.get(f"/v1/accounts/{bank['id']}/statement", headers=staff_headers)
    assert response.status_code == 200
    statement = response.json()

    assert statement["opening_balance"] == 1000
    assert statement["closing_balance"] == 350
    # Newest first
    assert [line["date"] for line in statement["lines"]] == ["2024-02-01", "2024-01-20", "2024-01-05"]
    assert [line["impact"] for line in statement["lines"]] == [-500, 50, -200]
    assert [line["running_balance"] for line in statement["lines"]] == [350, 850, 800]


@pytest.mark.asyncio
async def test_statement_of_creditor_starts_negative(client, staff_headers, cash_account):
    vendor = await create_account(client, staff_headers, name="Vendor", type="Creditor", opening_balance=900)

    response = await client.get(f"/v1/accounts/{vendor['id']}/statement", headers=staff_headers)
    statement = response.json()
    assert statement["opening_balance"] == -900
    assert statement["closing_balance"] == -900
    assert statement["lines"] == []
