"""
Integration tests for user management (admin only).
"""

import pytest

# Note: Client and DB setup are in conftest.py


# TEST 1: Creation
@pytest.mark.asyncio
async def test_admin_creates_staff(client, admin_headers):
    response = await client.post("/v1/users", json={
        "name": "Meena",
        "username": "meena",
        "password": "meena123",
        "role": "staff",
        "modules": ["finance"]
    }, headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "staff"
    assert data["modules"] == ["finance"]
    assert "hashed_password" not in data

    response = await client.post("/v1/auth/login", json={"username": "meena", "password": "meena123"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_duplicate_username(client, admin_headers, staff_user):
    response = await client.post("/v1/users", json={
        "name": "Other", "username": "accounts", "password": "secret123"
    }, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_candidate_user_needs_existing_candidate(client, admin_headers):
    response = await client.post("/v1/users", json={
        "name": "Asha", "username": "asha", "password": "secret123", "role": "candidate"
    }, headers=admin_headers)
    assert response.status_code == 400

    response = await client.post("/v1/users", json={
        "name": "Asha", "username": "asha", "password": "secret123", "role": "candidate",
        "linked_candidate_id": "missing"
    }, headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_staff_cannot_manage_users(client, staff_headers):
    response = await client.get("/v1/users", headers=staff_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_filter_by_role(client, admin_headers, staff_user, trainer_user):
    response = await client.get("/v1/users", params={"role": "staff"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 2
    assert {u["username"] for u in response.json()["users"]} == {"accounts", "trainer"}


# TEST 2: Permissions take effect immediately
@pytest.mark.asyncio
async def test_module_change_applies_to_existing_token(client, admin_headers, trainer_user, trainer_headers):
    response = await client.get("/v1/accounts", headers=trainer_headers)
    assert response.status_code == 403

    response = await client.put(
        f"/v1/users/{trainer_user.id}", json={"modules": ["candidates", "finance"]}, headers=admin_headers
    )
    assert response.status_code == 200

    response = await client.get("/v1/accounts", headers=trainer_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["name", "role", "modules", "password"])
async def test_update_rejects_null_for_required_fields(client, admin_headers, trainer_user, field):
    response = await client.put(f"/v1/users/{trainer_user.id}", json={field: None}, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


# TEST 3: Block / unblock
@pytest.mark.asyncio
async def test_block_revokes_sessions(client, admin_headers, staff_user, staff_headers):
    response = await client.post(
        f"/v1/users/{staff_user.id}/block", json={"reason": "Left the company"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["action"] == "BLOCK"

    response = await client.get("/v1/auth/me", headers=staff_headers)
    assert response.status_code in (401, 403)

    response = await client.post("/v1/auth/login", json={"username": "accounts", "password": "password123"})
    assert response.status_code == 403

    response = await client.post(f"/v1/users/{staff_user.id}/unblock", headers=admin_headers)
    assert response.status_code == 200

    response = await client.post("/v1/auth/login", json={"username": "accounts", "password": "password123"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_admin_cannot_block_self(client, admin_headers, admin_user):
    response = await client.post(f"/v1/users/{admin_user.id}/block", json={}, headers=admin_headers)
    assert response.status_code == 400


# TEST 4: Deletion
@pytest.mark.asyncio
async def test_delete_unreferenced_staff(client, admin_headers, trainer_user):
    response = await client.delete(f"/v1/users/{trainer_user.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["success"] == True

    response = await client.get(f"/v1/users/{trainer_user.id}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_referenced_staff_cannot_be_deleted(client, admin_headers, staff_user, cash_account):
    response = await client.post("/v1/transactions", json={
        "date": "2024-03-31",
        "type": "Expense",
        "amount": 1000,
        "from_entity_id": cash_account.id,
        "from_entity_type": "Account",
        "to_entity_id": staff_user.id,
        "to_entity_type": "Staff"
    }, headers=admin_headers)
    assert response.status_code == 201

    response = await client.delete(f"/v1/users/{staff_user.id}", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_LEDGER_001"


@pytest.mark.asyncio
async def test_cannot_delete_self(client, admin_headers, admin_user):
    response = await client.delete(f"/v1/users/{admin_user.id}", headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_last_admin_cannot_be_demoted(client, admin_headers, admin_user):
    response = await client.put(f"/v1/users/{admin_user.id}", json={"role": "staff"}, headers=admin_headers)
    assert response.status_code == 400
